import pytest

import auth_middleware
from app import create_app
from config import TestConfig
from conftest import DevAuthConfig


def _headers(uid="u1"):
    return {"X-Debug-Uid": uid}


def _play_time_attack(client, service, uid="u1", limit=2):
    lookup = {q.id: q for q in service.catalog.questions}
    resp = client.post("/api/games/time_attack/start", json={"limit": limit}, headers=_headers(uid))
    assert resp.status_code == 200
    current = resp.get_json()["current"]
    while current is not None:
        q = lookup[current["id"]]
        resp = client.post("/api/games/answer", json={"guess": "good" if q.is_good else "bad"}, headers=_headers(uid))
        assert resp.status_code == 200
        current = resp.get_json()["current"]
    return client.post("/api/games/finish", headers=_headers(uid))


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json()["ok"] is True


def test_levels_are_public(client):
    resp = client.get("/api/games/levels")
    assert resp.status_code == 200
    assert len(resp.get_json()["levels"]) == 5


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json()["ok"] is False


def test_profile(client):
    resp = client.get("/api/games/profile", headers=_headers())
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["level"] == 1
    assert body["tickets"] == 0
    assert body["next_level"]["xp_required"] == 100


def test_play_and_finish(client, service):
    resp = _play_time_attack(client, service)
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["xp_earned"] == 70
    assert body["progression"]["total_xp"] == 70
    assert client.get("/api/games/state", headers=_headers()).get_json() == {"ok": True, "has_active_session": False}


def test_second_start_conflicts(client):
    assert client.post("/api/games/board_room/start", headers=_headers()).status_code == 200

    resp = client.post("/api/games/time_attack/start", headers=_headers())
    assert resp.status_code == 409
    assert resp.get_json()["code"] == "SessionInProgress"


def test_early_finish_conflicts(client):
    client.post("/api/games/board_room/start", headers=_headers())
    resp = client.post("/api/games/finish", headers=_headers())
    assert resp.status_code == 409
    assert resp.get_json()["code"] == "SessionNotComplete"


def test_unknown_mode_is_400(client):
    resp = client.post("/api/games/poker/start", headers=_headers())
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "UnknownMode"


@pytest.mark.parametrize("limit", [0, -2, "3", True])
def test_start_rejects_bad_limit(client, limit):
    resp = client.post("/api/games/time_attack/start", json={"limit": limit}, headers=_headers())
    assert resp.status_code == 400


def test_answer_needs_a_response(client):
    client.post("/api/games/time_attack/start", headers=_headers())
    resp = client.post("/api/games/answer", json={}, headers=_headers())
    assert resp.status_code == 400


def test_invalid_option_is_400(client):
    client.post("/api/games/macro_mastermind/start", headers=_headers())
    resp = client.post("/api/games/answer", json={"option_id": "nope"}, headers=_headers())
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "InvalidOption"


def test_no_active_session_is_404(client):
    assert client.post("/api/games/finish", headers=_headers()).status_code == 404
    assert client.post("/api/games/abandon", headers=_headers()).status_code == 404


def test_abandon(client):
    client.post("/api/games/investor_simulator/start", headers=_headers())
    resp = client.post("/api/games/abandon", headers=_headers())
    assert resp.status_code == 200
    assert resp.get_json()["ok"] is True


def test_rewards_and_purchase(client, service):
    from services.game_engine import rewards

    resp = client.post("/api/games/rewards/premium_badge/purchase", headers=_headers())
    assert resp.status_code == 409
    assert resp.get_json()["code"] == "InsufficientTickets"

    assert client.post("/api/games/rewards/unicorn/purchase", headers=_headers()).status_code == 404

    service.store.update("u1", lambda p: rewards.credit_tickets(p, 12))
    resp = client.post("/api/games/rewards/premium_badge/purchase", headers=_headers())
    assert resp.status_code == 200
    assert resp.get_json()["tickets"] == 2

    listed = client.get("/api/games/rewards", headers=_headers()).get_json()
    assert listed["tickets"] == 2
    assert {r["id"]: r["acquired"] for r in listed["rewards"]}["premium_badge"] is True


# ---------------------------------------------------------------------
# Firebase auth
# ---------------------------------------------------------------------

@pytest.fixture
def auth_client(service):
    return create_app(TestConfig, service=service).test_client()


def test_missing_token_is_401(auth_client):
    resp = auth_client.get("/api/games/profile")
    assert resp.status_code == 401
    assert resp.get_json()["ok"] is False


def test_debug_uid_is_ignored_when_auth_is_on(auth_client):
    assert auth_client.get("/api/games/profile", headers=_headers()).status_code == 401


def test_valid_token(auth_client, monkeypatch):
    seen = {}

    def fake_verify(token):
        seen["token"] = token
        return {"uid": "firebase-user", "email": "a@b.c"}

    monkeypatch.setattr(auth_middleware.fb_auth, "verify_id_token", fake_verify)
    resp = auth_client.get("/api/games/profile", headers={"Authorization": "Bearer abc123"})

    assert resp.status_code == 200
    assert seen["token"] == "abc123"


def test_rejected_token(auth_client, monkeypatch):
    def fake_verify(token):
        raise ValueError("expired")

    monkeypatch.setattr(auth_middleware.fb_auth, "verify_id_token", fake_verify)
    resp = auth_client.get("/api/games/profile", headers={"Authorization": "Bearer abc123"})

    assert resp.status_code == 401
    assert "expired" in resp.get_json()["error"]


def test_create_app_builds_its_own_service():
    app = create_app(TestConfig)
    service = app.extensions["game_service"]
    assert service.controller.time_limits
    assert len(service.catalog.questions) == 15
    assert service.market_data.timeout == TestConfig.MARKET_DATA_TIMEOUT


def test_market_start_without_market_data_is_502(client):
    resp = client.post("/api/games/market/aapl/start", headers=_headers())
    assert resp.status_code == 502
    assert resp.get_json()["code"] == "MarketDataUnavailable"


def test_market_start_and_play(market_service):
    client = create_app(DevAuthConfig, service=market_service).test_client()

    resp = client.post("/api/games/market/aapl/start", json={"limit": 2}, headers=_headers())
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["session"]["mode"] == "market_adventure"
    assert body["current"]["id"] in {"aapl_roeTTM", "aapl_peTTM"}

    state = client.get("/api/games/state", headers=_headers()).get_json()
    assert state["has_active_session"] is True


@pytest.mark.parametrize("payload", [{"industry_averages": [1, 2]}, {"limit": 0}, {"limit": True}])
def test_market_start_rejects_bad_body(market_service, payload):
    client = create_app(DevAuthConfig, service=market_service).test_client()
    resp = client.post("/api/games/market/aapl/start", json=payload, headers=_headers())
    assert resp.status_code == 400
    assert market_service.get_state("u1")["has_active_session"] is False
