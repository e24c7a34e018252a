import warnings

from fastapi.testclient import TestClient

from hintstore.core.config import settings
from hintstore.main import app

HINTS = '/api/v1/notification-hints'


def test_health():
    with TestClient(app) as client:
        response = client.get('/api/v1/health')
    assert response.status_code == 200
    assert response.json() == {'status': 'ok'}


def test_notification_hint_flow(frozen_clock):
    with TestClient(app) as client:
        created = client.post(
            HINTS,
            json={'block_type': 'card', 'block_id': 'b1', 'workspace_id': 't1', 'notify_freq_seconds': 300},
        )
        assert created.status_code == 201
        assert created.json()['notify_at'] == 300000

        frozen_clock.advance(100000)
        refreshed = client.post(HINTS, json={'block_type': 'card', 'block_id': 'b1', 'workspace_id': 't1'})
        assert refreshed.status_code == 201
        assert refreshed.json()['notify_at'] == 100000 + settings.NOTIFICATION_FREQ_SECONDS * 1000

        fetched = client.get(f"{HINTS}/t1/b1")
        assert fetched.status_code == 200
        assert fetched.json()['block_type'] == 'card'

        peeked = client.get(f"{HINTS}/next")
        assert peeked.status_code == 200
        assert peeked.json()['block_id'] == 'b1'

        popped = client.get(f"{HINTS}/next", params={'remove': 'true'})
        assert popped.status_code == 200
        assert popped.json()['block_id'] == 'b1'

        assert client.get(f"{HINTS}/next").status_code == 404
        assert client.get(f"{HINTS}/t1/b1").status_code == 404
        assert client.delete(f"{HINTS}/t1/b1").status_code == 404


def test_delete_endpoint():
    with TestClient(app) as client:
        client.post(HINTS, json={'block_type': 'card', 'block_id': 'b1', 'workspace_id': 't1'})
        removed = client.delete(f"{HINTS}/t1/b1")
        assert removed.status_code == 200
        assert removed.json() == {'status': 'ok'}
        assert client.get(f"{HINTS}/t1/b1").status_code == 404


def test_invalid_payloads_are_rejected():
    with TestClient(app) as client:
        blank = client.post(HINTS, json={'block_type': 'card', 'block_id': ' ', 'workspace_id': 't1'})
        assert blank.status_code == 422
        assert 'block id' in blank.json()['detail']

        bad_freq = client.post(
            HINTS,
            json={'block_type': 'card', 'block_id': 'b1', 'workspace_id': 't1', 'notify_freq_seconds': 0},
        )
        assert bad_freq.status_code == 422


def test_lost_claim_maps_to_conflict(monkeypatch):
    from hintstore.api.v1 import notification_hints as hints_api
    from hintstore.core.errors import ClaimLostError

    def lost(session, remove=False):
        raise ClaimLostError('b1', 't1')

    monkeypatch.setattr(hints_api, 'get_next_notification_hint', lost)
    with TestClient(app) as client:
        response = client.get(f"{HINTS}/next", params={'remove': 'true'})
    assert response.status_code == 409


def test_rejected_hint_does_not_warn():
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter('always')
        with TestClient(app) as client:
            response = client.post(HINTS, json={'block_type': 'card', 'block_id': '', 'workspace_id': 't1'})
    assert response.status_code == 422
    assert not [item for item in caught if 'UNPROCESSABLE' in str(item.message)]
