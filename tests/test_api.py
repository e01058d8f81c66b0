"""
Tests for the web portal API.
"""
from calculator import reset_state, state_to_dict


def test_info_page(client):
    response = client.get('/api')
    assert response.status_code == 200
    assert b"TapCalc" in response.data


def test_keypad(client):
    response = client.get('/api/keypad')
    body = response.get_json()
    assert response.status_code == 200
    assert body['success'] is True
    assert body['data']['columns'] == 4
    assert body['data']['keys'][0] == {'label': 'C', 'action': 'clear', 'value': None, 'variant': 'action'}


def test_initial_state(client):
    body = client.get('/api/state/initial').get_json()
    assert body['data'] == state_to_dict(reset_state())
    assert body['data']['displayValue'] == "0"


class TestPress:
    """Tests for POST /api/press."""

    def test_without_state_starts_fresh(self, client):
        response = client.post('/api/press', json={'action': 'digit', 'value': '7'})
        body = response.get_json()
        assert response.status_code == 200
        assert body['data']['buffer'] == "7"
        assert body['data']['displayValue'] == "7"

    def test_carries_state(self, client):
        state = None
        for action, value in [('digit', '2'), ('op', '+'), ('digit', '3'), ('equals', None)]:
            body = client.post('/api/press', json={'state': state, 'action': action, 'value': value}).get_json()
            state = body['data']
        assert state['displayValue'] == "5"
        assert state['overwrite'] is True

    def test_unknown_action(self, client):
        response = client.post('/api/press', json={'action': 'memory'})
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_missing_action(self, client):
        response = client.post('/api/press', json={'value': '1'})
        assert response.status_code == 400

    def test_invalid_state(self, client):
        bad = {'tokens': [{'type': 'op', 'value': '^'}]}
        response = client.post('/api/press', json={'state': bad, 'action': 'digit', 'value': '1'})
        assert response.status_code == 400
        assert 'Invalid token' in response.get_json()['error']

    def test_not_json(self, client):
        response = client.post('/api/press', data="2+2", content_type='text/plain')
        assert response.status_code == 400


class TestKeys:
    """Tests for POST /api/keys and /api/evaluate."""

    def test_replay(self, client):
        body = client.post('/api/keys', json={'keys': ['2', '+', '3', '*', '4', '=']}).get_json()
        assert body['data']['displayValue'] == "14"

    def test_replay_from_state(self, client):
        first = client.post('/api/keys', json={'keys': ['1', '2']}).get_json()['data']
        body = client.post('/api/keys', json={'keys': ['+', '1', '='], 'state': first}).get_json()
        assert body['data']['displayValue'] == "13"

    def test_unknown_key(self, client):
        response = client.post('/api/keys', json={'keys': ['1', 'sqrt']})
        assert response.status_code == 400

    def test_keys_must_be_list(self, client):
        response = client.post('/api/keys', json={'keys': '1+1'})
        assert response.status_code == 400

    def test_evaluate(self, client):
        body = client.post('/api/evaluate', json={'keys': ['(', '2', '+', '3']}).get_json()
        assert body['data'] == {'display': "5", 'error': False}

    def test_evaluate_division_by_zero(self, client):
        body = client.post('/api/evaluate', json={'keys': ['5', '/', '0']}).get_json()
        assert body['data'] == {'display': "Error", 'error': True}


def test_unknown_route_is_json(client):
    response = client.get('/api/nope')
    assert response.status_code == 404
    assert response.get_json()['success'] is False
