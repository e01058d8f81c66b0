"""
Flask REST API for the TapCalc Web Portal
Exposes the calculator engine as stateless JSON endpoints
"""
import logging

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

import config
from calculator import (
    InvalidStateError,
    evaluate_expression,
    is_error_state,
    reset_state,
    state_from_dict,
    state_to_dict,
)
from keypad import KEYPAD, KEYPAD_COLUMNS, UnknownActionError, apply_action, run_keys

logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)  # Enable CORS for all routes


class BadRequest(ValueError):
    pass


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")
    return data


def _state_from(data):
    """State carried by the client, or a fresh one"""
    raw = data.get("state")
    if raw is None:
        return reset_state()
    return state_from_dict(raw)


def _keys_from(data):
    keys = data.get("keys")
    if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
        raise BadRequest("keys must be a list of strings")
    if len(keys) > config.MAX_KEYS_PER_REQUEST:
        raise BadRequest(f"At most {config.MAX_KEYS_PER_REQUEST} keys per request")
    return keys


@app.errorhandler(BadRequest)
@app.errorhandler(InvalidStateError)
def handle_bad_request(e):
    logger.warning("Rejected request to %s: %s", request.path, e)
    return jsonify({'success': False, 'error': str(e)}), 400


@app.errorhandler(UnknownActionError)
def handle_unknown_action(e):
    logger.warning("Unknown action or key on %s: %s", request.path, e)
    return jsonify({'success': False, 'error': f"Unknown action or key: {e.args[0]!r}"}), 400


@app.errorhandler(Exception)
def handle_unexpected(e):
    if isinstance(e, HTTPException):
        return jsonify({'success': False, 'error': e.description}), e.code
    logger.exception("Unhandled error on %s", request.path)
    return jsonify({'success': False, 'error': str(e)}), 500


@app.route('/api')
def api_info():
    """API information page"""
    return f"""
    <html>
    <head><title>{config.APP_NAME} API</title></head>
    <body style="font-family: Arial; padding: 40px; background: #1a1a2e; color: white;">
        <h1>{config.APP_NAME} API Server</h1>
        <p>Version {config.VERSION}. The client keeps the calculator state and sends it with every key.</p>
        <h2>Available Endpoints:</h2>
        <ul>
            <li><a href="/api/keypad" style="color: #2196F3;">/api/keypad</a> - Keypad layout</li>
            <li><a href="/api/state/initial" style="color: #2196F3;">/api/state/initial</a> - Fresh calculator state</li>
            <li>POST /api/press - Apply one action to a state</li>
            <li>POST /api/keys - Replay a list of keys</li>
            <li>POST /api/evaluate - Replay keys and evaluate</li>
        </ul>
    </body>
    </html>
    """


@app.route('/api/keypad')
def get_keypad():
    """Get the keypad layout"""
    return jsonify({
        'success': True,
        'data': {
            'columns': KEYPAD_COLUMNS,
            'keys': [key._asdict() for key in KEYPAD],
        }
    })


@app.route('/api/state/initial')
def get_initial_state():
    """Get a fresh calculator state"""
    return jsonify({'success': True, 'data': state_to_dict(reset_state())})


@app.route('/api/press', methods=['POST'])
def press_key():
    """Apply one action tag to the state sent by the client"""
    data = _json_body()
    action = data.get('action')
    if not isinstance(action, str):
        raise BadRequest("action is required")
    value = data.get('value')
    if value is not None and not isinstance(value, str):
        raise BadRequest("value must be a string")

    state = apply_action(_state_from(data), action, value)
    return jsonify({'success': True, 'data': state_to_dict(state)})


@app.route('/api/keys', methods=['POST'])
def press_keys():
    """Replay keypad labels or keyboard keys"""
    data = _json_body()
    state = run_keys(_keys_from(data), _state_from(data))
    return jsonify({'success': True, 'data': state_to_dict(state)})


@app.route('/api/evaluate', methods=['POST'])
def evaluate_keys():
    """Replay keys from a fresh state and evaluate the result"""
    data = _json_body()
    state = evaluate_expression(run_keys(_keys_from(data)))
    return jsonify({
        'success': True,
        'data': {
            'display': state.display_value,
            'error': is_error_state(state),
        }
    })


if __name__ == '__main__':
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    logger.info("%s Web Portal API Server starting on http://%s:%s",
                config.APP_NAME, config.WEB_HOST, config.WEB_PORT)
    if config.WEB_HOST == '0.0.0.0':
        logger.info("Access from network: http://<your-ip>:%s", config.WEB_PORT)

    app.run(host=config.WEB_HOST, port=config.WEB_PORT, debug=False)
