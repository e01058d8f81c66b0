"""
Calculator Engine for TapCalc
Turns key presses into a token list and evaluates it with operator precedence
"""
import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)

ERROR_TEXT = "Error"
DIGITS = frozenset("0123456789") | {"00", "."}


class Operator(Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"

    @property
    def precedence(self):
        return 2 if self in (Operator.MULTIPLY, Operator.DIVIDE) else 1

    @classmethod
    def parse(cls, symbol):
        """Return the operator for an ASCII symbol or keypad glyph, else None"""
        if isinstance(symbol, Operator):
            return symbol
        if not isinstance(symbol, str):
            return None
        return _SYMBOLS.get(symbol)


_GLYPHS = {
    Operator.ADD: "+",
    Operator.SUBTRACT: "−",
    Operator.MULTIPLY: "×",
    Operator.DIVIDE: "÷",
}

_SYMBOLS = {op.value: op for op in Operator}
_SYMBOLS.update({glyph: op for op, glyph in _GLYPHS.items()})
_SYMBOLS.update({"x": Operator.MULTIPLY, "–": Operator.SUBTRACT})


@dataclass(frozen=True)
class NumberToken:
    value: str


@dataclass(frozen=True)
class OperatorToken:
    op: Operator


@dataclass(frozen=True)
class ParenToken:
    is_open: bool


Token = Union[NumberToken, OperatorToken, ParenToken]

OPEN_PAREN = ParenToken(True)
CLOSE_PAREN = ParenToken(False)


@dataclass(frozen=True)
class EngineState:
    """One immutable snapshot of the calculator.

    ``tokens`` holds the committed expression, ``buffer`` the number still
    being typed. ``display_value`` is derived and always refreshed through
    ``_with_display``.
    """
    tokens: Tuple[Token, ...] = ()
    buffer: str = "0"
    paren_balance: int = 0
    overwrite: bool = False
    error: bool = False
    active_operator: Optional[Operator] = None
    display_value: str = "0"


INITIAL_STATE = EngineState()


class InvalidStateError(ValueError):
    """Raised when a serialized state cannot be turned back into an EngineState"""


# ── Helpers ──────────────────────────────────────────────────────────────────

def format_number(value):
    """Format a float the way the display shows it (4.0 -> '4')"""
    if math.isfinite(value) and value == int(value) and abs(value) < 1e21:
        return str(int(value))
    return repr(float(value))


def _to_number(text):
    try:
        return float(text)
    except (TypeError, ValueError):
        return math.nan


def _has_value(buffer):
    return buffer != "" and buffer != "-"


def _last(tokens):
    return tokens[-1] if tokens else None


def _last_number(tokens):
    for token in reversed(tokens):
        if isinstance(token, NumberToken):
            return token
    return None


def _last_operator_index(tokens):
    for index in range(len(tokens) - 1, -1, -1):
        if isinstance(tokens[index], OperatorToken):
            return index
    return -1


def _flush_buffer(state):
    """Commit the buffer as a number token unless it is empty or a lone '-'"""
    if not _has_value(state.buffer):
        return state
    return replace(state, tokens=state.tokens + (NumberToken(state.buffer),), buffer="")


def compute_display(state):
    """Project a state onto the text shown on the display"""
    if state.error:
        return ERROR_TEXT
    if _has_value(state.buffer):
        return state.buffer
    number = _last_number(state.tokens)
    if number is not None:
        return number.value
    if state.buffer == "-":
        return "-"
    return "0"


def _with_display(state):
    return replace(state, display_value=compute_display(state))


def is_error_state(state):
    """True when the calculator shows Error and only clear will respond"""
    return state.error or state.display_value == ERROR_TEXT


def reset_state():
    """Return a fresh session state"""
    return INITIAL_STATE


def _fresh(**changes):
    return _with_display(replace(INITIAL_STATE, **changes))


# ── Transitions ──────────────────────────────────────────────────────────────

def append_digit(state, digit):
    """Type a digit, '00' or the decimal point into the buffer"""
    if state.error or digit not in DIGITS:
        return state

    if state.overwrite:
        return _fresh(buffer="0." if digit == "." else digit)

    buffer = state.buffer
    if digit == ".":
        if "." in buffer:
            return state
        buffer = "0." if buffer == "" else buffer + "."
    elif digit == "00":
        # no stacking of leading zeros
        if buffer in ("0", "-"):
            return state
        buffer += "00"
    elif buffer == "0":
        buffer = digit
    else:
        buffer += digit
    return _with_display(replace(state, buffer=buffer))


def append_operator(state, op):
    """Commit the buffer and add (or swap in) a binary operator"""
    if state.error:
        return state
    op = Operator.parse(op)
    if op is None:
        return state

    next_state = replace(state, overwrite=False)
    if state.overwrite:
        # the previous result chains in as the left operand
        tokens = ()
        if state.buffer and state.buffer != ERROR_TEXT:
            tokens = (NumberToken(state.buffer),)
        next_state = replace(next_state, tokens=tokens, buffer="", paren_balance=0)

    if next_state.buffer == "" and not next_state.tokens and op is Operator.SUBTRACT:
        return _with_display(replace(next_state, buffer="-"))

    next_state = _flush_buffer(next_state)
    tokens = next_state.tokens
    if isinstance(_last(tokens), OperatorToken):
        tokens = tokens[:-1]
    tokens = tokens + (OperatorToken(op),)
    return _with_display(replace(next_state, tokens=tokens, active_operator=op))


def _percent_of(op, left, right):
    """Return (value of 'left op right%', operand that replaces the buffer)

    The buffer gets the operand, not the value: after 200 + 10 % the display
    reads 20 and = gives 220. Writing the value into the buffer would make
    = compute 200 + 220.
    """
    if op is None or left is None:
        value = right / 100
        return value, value
    if op is Operator.ADD:
        part = left * (right / 100)
        return left + part, part
    if op is Operator.SUBTRACT:
        part = left * (right / 100)
        return left - part, part
    if op is Operator.MULTIPLY:
        return left * (right / 100), right / 100
    if right == 0:
        return math.nan, math.nan
    return left / (right / 100), right / 100


def apply_percent(state):
    """Turn the current operand into a percentage relative to the pending operator"""
    if state.error:
        return state

    tokens = state.tokens
    if state.buffer != "":
        current = state.buffer
    else:
        number = _last_number(tokens)
        current = number.value if number is not None else "0"
    right = _to_number(current)
    if math.isnan(right):
        return state

    op_index = _last_operator_index(tokens)
    op = tokens[op_index].op if op_index >= 0 else None
    left = None
    if op is not None:
        left_token = _last_number(tokens[:op_index])
        if left_token is not None:
            left = _to_number(left_token.value)

    value, operand = _percent_of(op, left, right)
    if not (math.isfinite(value) and math.isfinite(operand)):
        logger.debug("Percent produced a non-finite value for %r", current)
        return _with_display(replace(state, error=True))
    return _with_display(replace(state, buffer=format_number(operand)))


def apply_parenthesis(state):
    """Open or close a parenthesis depending on what precedes the cursor"""
    if state.error:
        return state

    if state.overwrite:
        state = replace(state, tokens=(), buffer="", paren_balance=0,
                        overwrite=False, active_operator=None)

    tokens = state.tokens
    last = _last(tokens)
    has_buffer = _has_value(state.buffer)
    negative_only = state.buffer == "-"

    can_open = not tokens or (
        not has_buffer and not negative_only and (
            last is None or isinstance(last, OperatorToken) or last == OPEN_PAREN
        )
    )
    can_close = state.paren_balance > 0 and (
        has_buffer or negative_only
        or last == CLOSE_PAREN or isinstance(last, NumberToken)
    )

    if can_open:
        state = replace(state, tokens=tokens + (OPEN_PAREN,),
                        paren_balance=state.paren_balance + 1)
    elif can_close:
        state = _flush_buffer(state)
        state = replace(state, tokens=state.tokens + (CLOSE_PAREN,), buffer="",
                        paren_balance=max(0, state.paren_balance - 1))
    return _with_display(state)


def backspace(state):
    """Delete the last typed character or committed token"""
    if state.error:
        return state
    if state.overwrite:
        return reset_state()

    if state.buffer != "":
        buffer = state.buffer[:-1]
        if buffer == "-":
            buffer = ""
        return _with_display(replace(state, buffer=buffer))

    tokens = state.tokens
    last = _last(tokens)
    balance = state.paren_balance
    if isinstance(last, NumberToken):
        trimmed = last.value[:-1]
        tokens = tokens[:-1] + ((NumberToken(trimmed),) if trimmed else ())
    elif isinstance(last, ParenToken):
        tokens = tokens[:-1]
        balance = max(0, balance - 1) if last.is_open else balance + 1
    elif isinstance(last, OperatorToken):
        tokens = tokens[:-1]
    return _with_display(replace(state, tokens=tokens, paren_balance=balance))


# ── Evaluation ───────────────────────────────────────────────────────────────

def to_rpn(tokens):
    """Reorder infix tokens into postfix with the shunting-yard algorithm"""
    output = []
    stack = []
    for token in tokens:
        if isinstance(token, NumberToken):
            output.append(token)
        elif isinstance(token, OperatorToken):
            while (stack and isinstance(stack[-1], OperatorToken)
                   and stack[-1].op.precedence >= token.op.precedence):
                output.append(stack.pop())
            stack.append(token)
        elif token.is_open:
            stack.append(token)
        else:
            while stack and stack[-1] != OPEN_PAREN:
                output.append(stack.pop())
            if stack:
                stack.pop()
    while stack:
        output.append(stack.pop())
    return output


def evaluate_rpn(tokens):
    """Evaluate postfix tokens; malformed input gives nan, x/0 gives inf"""
    stack = []
    for token in tokens:
        if isinstance(token, NumberToken):
            stack.append(_to_number(token.value))
        elif isinstance(token, OperatorToken):
            if len(stack) < 2:
                return math.nan
            b = stack.pop()
            a = stack.pop()
            if token.op is Operator.ADD:
                stack.append(a + b)
            elif token.op is Operator.SUBTRACT:
                stack.append(a - b)
            elif token.op is Operator.MULTIPLY:
                stack.append(a * b)
            elif b == 0:
                return math.inf
            else:
                stack.append(a / b)
    return stack[0] if len(stack) == 1 else math.nan


def evaluate_expression(state):
    """Evaluate the whole expression, auto-closing any open parentheses"""
    if state.error:
        return state

    working = list(state.tokens)
    if _has_value(state.buffer):
        working.append(NumberToken(state.buffer))
    working.extend([CLOSE_PAREN] * state.paren_balance)

    result = evaluate_rpn(to_rpn(working))
    if not math.isfinite(result):
        logger.debug("Evaluation failed for %d tokens: %r", len(working), result)
        return _fresh(buffer=ERROR_TEXT, overwrite=True, error=True)
    return _fresh(buffer=format_number(result), overwrite=True)


# ── Wire format ──────────────────────────────────────────────────────────────

def _token_to_dict(token):
    if isinstance(token, NumberToken):
        return {"type": "number", "value": token.value}
    if isinstance(token, OperatorToken):
        return {"type": "op", "value": token.op.value}
    return {"type": "paren", "value": "(" if token.is_open else ")"}


def _token_from_dict(data):
    if not isinstance(data, dict):
        raise InvalidStateError(f"Token must be an object, got {data!r}")
    kind = data.get("type")
    value = data.get("value")
    if kind == "number" and isinstance(value, str) and value:
        return NumberToken(value)
    if kind == "op" and Operator.parse(value) is not None:
        return OperatorToken(Operator.parse(value))
    if kind == "paren" and value in ("(", ")"):
        return OPEN_PAREN if value == "(" else CLOSE_PAREN
    raise InvalidStateError(f"Invalid token: {data!r}")


def state_to_dict(state):
    """Serialize a state into JSON-friendly primitives"""
    return {
        "tokens": [_token_to_dict(t) for t in state.tokens],
        "buffer": state.buffer,
        "parenBalance": state.paren_balance,
        "overwrite": state.overwrite,
        "error": state.error,
        "activeOperator": state.active_operator.value if state.active_operator else None,
        "displayValue": state.display_value,
    }


def state_from_dict(data):
    """Rebuild a state from ``state_to_dict`` output; displayValue is recomputed"""
    if not isinstance(data, dict):
        raise InvalidStateError("State must be an object")

    raw_tokens = data.get("tokens", [])
    if not isinstance(raw_tokens, list):
        raise InvalidStateError("tokens must be a list")
    tokens = tuple(_token_from_dict(t) for t in raw_tokens)
    for first, second in zip(tokens, tokens[1:]):
        if isinstance(first, OperatorToken) and isinstance(second, OperatorToken):
            raise InvalidStateError("tokens contain two adjacent operators")

    buffer = data.get("buffer", "0")
    if not isinstance(buffer, str) or buffer.count(".") > 1:
        raise InvalidStateError(f"Invalid buffer: {buffer!r}")

    balance = 0
    for token in tokens:
        if token == OPEN_PAREN:
            balance += 1
        elif token == CLOSE_PAREN:
            balance -= 1
            if balance < 0:
                raise InvalidStateError("tokens close a parenthesis that was never opened")
    given = data.get("parenBalance", balance)
    if not isinstance(given, int) or isinstance(given, bool) or given != balance:
        raise InvalidStateError(f"parenBalance {given!r} does not match the tokens ({balance})")

    flags = {}
    for name in ("overwrite", "error"):
        value = data.get(name, False)
        if not isinstance(value, bool):
            raise InvalidStateError(f"{name} must be a boolean, got {value!r}")
        flags[name] = value

    active = data.get("activeOperator")
    active_op = Operator.parse(active) if active is not None else None
    if active is not None and active_op is None:
        raise InvalidStateError(f"Invalid activeOperator: {active!r}")

    state = EngineState(
        tokens=tokens,
        buffer=buffer,
        paren_balance=balance,
        overwrite=flags["overwrite"],
        error=flags["error"],
        active_operator=active_op,
    )
    return _with_display(state)


# ── Session ──────────────────────────────────────────────────────────────────

class Calculator:
    """Holds the state of one calculator session.

    Every method replaces the whole state; nothing is mutated in place.
    Calls must be made one at a time.
    """

    def __init__(self, state=None):
        self.state = state if state is not None else reset_state()

    def add_digit(self, digit):
        """Add a digit, '00' or decimal point"""
        self.state = append_digit(self.state, str(digit))
        return self.get_display()

    def add_operator(self, operator):
        """Add an operator to the expression"""
        self.state = append_operator(self.state, operator)
        return self.get_display()

    def percent(self):
        """Apply the percent key to the current operand"""
        self.state = apply_percent(self.state)
        return self.get_display()

    def parenthesis(self):
        """Open or close a parenthesis"""
        self.state = apply_parenthesis(self.state)
        return self.get_display()

    def clear(self):
        """Start over"""
        self.state = reset_state()
        return self.get_display()

    def clear_entry(self):
        """Clear last entry (backspace)"""
        self.state = backspace(self.state)
        return self.get_display()

    def evaluate(self):
        """Evaluate the current expression"""
        self.state = evaluate_expression(self.state)
        return self.get_display()

    def get_display(self):
        """Get the text shown on the display"""
        return self.state.display_value

    @property
    def has_error(self):
        return is_error_state(self.state)
