import pytest

from api import app as flask_app
from keypad import run_keys


@pytest.fixture
def client():
    flask_app.config["TESTING"] = True
    with flask_app.test_client() as client:
        yield client


@pytest.fixture
def keys():
    """Replay a space separated key sequence, e.g. keys("2 + 3 =")"""
    def _run(sequence, state=None):
        return run_keys(sequence.split(), state)
    return _run
