"""
Property-based tests using Hypothesis.

Random key sequences must never leave the engine in an inconsistent state.
"""
from hypothesis import given, settings
from hypothesis import strategies as st

from calculator import CLOSE_PAREN, OPEN_PAREN, OperatorToken, compute_display
from keypad import KEYPAD, run_keys

KEYS = [key.label for key in KEYPAD] + ["BackSpace"]


class TestEngineProperties:
    """Invariants that hold for every reachable state."""

    @given(st.lists(st.sampled_from(KEYS), max_size=40))
    @settings(max_examples=300)
    def test_reachable_states_are_consistent(self, keys):
        """Invariant: every prefix of a key sequence yields a consistent state."""
        state = None
        for key in keys:
            state = run_keys([key], state)

            assert state.display_value
            assert state.display_value == compute_display(state)
            assert state.buffer.count(".") <= 1

            for first, second in zip(state.tokens, state.tokens[1:]):
                assert not (isinstance(first, OperatorToken) and isinstance(second, OperatorToken))

            opens = state.tokens.count(OPEN_PAREN)
            closes = state.tokens.count(CLOSE_PAREN)
            assert state.paren_balance == opens - closes
            assert state.paren_balance >= 0
