"""
Keypad and keyboard mapping for TapCalc
Every key maps to exactly one engine operation through an action tag
"""
import logging
from collections import namedtuple

from calculator import (
    Operator,
    append_digit,
    append_operator,
    apply_parenthesis,
    apply_percent,
    backspace,
    evaluate_expression,
    reset_state,
)

logger = logging.getLogger(__name__)

KeyConfig = namedtuple("KeyConfig", ["label", "action", "value", "variant"])

# Action tags
DIGIT = "digit"
OP = "op"
PERCENT = "percent"
PAREN = "paren"
EQUALS = "equals"
CLEAR = "clear"
BACKSPACE = "backspace"

ACTIONS = (DIGIT, OP, PERCENT, PAREN, EQUALS, CLEAR, BACKSPACE)


class UnknownActionError(KeyError):
    """Raised for an action tag or key that has no engine operation"""


KEYPAD = [
    KeyConfig("C", CLEAR, None, "action"),
    KeyConfig("()", PAREN, None, "action"),
    KeyConfig("%", PERCENT, None, "action"),
    KeyConfig("÷", OP, "/", "operator"),
    KeyConfig("7", DIGIT, "7", "number"),
    KeyConfig("8", DIGIT, "8", "number"),
    KeyConfig("9", DIGIT, "9", "number"),
    KeyConfig("×", OP, "*", "operator"),
    KeyConfig("4", DIGIT, "4", "number"),
    KeyConfig("5", DIGIT, "5", "number"),
    KeyConfig("6", DIGIT, "6", "number"),
    KeyConfig("−", OP, "-", "operator"),
    KeyConfig("1", DIGIT, "1", "number"),
    KeyConfig("2", DIGIT, "2", "number"),
    KeyConfig("3", DIGIT, "3", "number"),
    KeyConfig("+", OP, "+", "operator"),
    KeyConfig(".", DIGIT, ".", "number"),
    KeyConfig("0", DIGIT, "0", "number"),
    KeyConfig("00", DIGIT, "00", "number"),
    KeyConfig("=", EQUALS, None, "operator"),
]

KEYPAD_COLUMNS = 4

_KEYPAD_BY_LABEL = {key.label: key for key in KEYPAD}

# Keyboard keys (characters and Tk keysyms) that are not keypad labels
_KEYBOARD = {
    "+": (OP, "+"),
    "-": (OP, "-"),
    "*": (OP, "*"),
    "/": (OP, "/"),
    "(": (PAREN, None),
    ")": (PAREN, None),
    "%": (PERCENT, None),
    "=": (EQUALS, None),
    "\r": (EQUALS, None),
    "\n": (EQUALS, None),
    "Enter": (EQUALS, None),
    "Return": (EQUALS, None),
    "KP_Enter": (EQUALS, None),
    "Escape": (CLEAR, None),
    "BackSpace": (BACKSPACE, None),
    "Backspace": (BACKSPACE, None),
    "\x08": (BACKSPACE, None),
}


def apply_action(state, action, value=None):
    """Apply one action tag to a state and return the new state"""
    if action == DIGIT:
        return append_digit(state, value)
    if action == OP:
        return append_operator(state, value)
    if action == PERCENT:
        return apply_percent(state)
    if action == PAREN:
        return apply_parenthesis(state)
    if action == EQUALS:
        return evaluate_expression(state)
    if action == CLEAR:
        return reset_state()
    if action == BACKSPACE:
        return backspace(state)
    raise UnknownActionError(action)


def press(state, key):
    """Apply a keypad key"""
    return apply_action(state, key.action, key.value)


def action_for_key(key):
    """Map a keyboard key to (action, value), or None if the key is not used"""
    if not key or key == " ":
        return None
    if key in _KEYBOARD:
        return _KEYBOARD[key]
    if len(key) == 1 and key in "0123456789.":
        return DIGIT, key
    keypad_key = _KEYPAD_BY_LABEL.get(key)
    if keypad_key is not None:
        return keypad_key.action, keypad_key.value
    return None


def is_active(key, state):
    """True when an operator key should be highlighted"""
    if key.action != OP or state.active_operator is None:
        return False
    return Operator.parse(key.value) is state.active_operator


def run_keys(keys, state=None):
    """Replay a sequence of keypad labels or keyboard keys"""
    if state is None:
        state = reset_state()
    for key in keys:
        mapped = action_for_key(key)
        if mapped is None:
            raise UnknownActionError(key)
        state = apply_action(state, *mapped)
    logger.debug("Replayed %d keys -> %r", len(keys), state.display_value)
    return state
