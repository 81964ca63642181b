import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

import swipe_match.main as m
from swipe_match import config
from swipe_match.auth.deps import SESSION_COOKIE_NAME, get_current_user
from swipe_match.auth.security import create_access_token
from swipe_match.deps import get_swipe_engine, get_user_directory
from swipe_match.services import rate_limit
from swipe_match.services.engine import SwipeMatchEngine
from swipe_match.services.side_effects import InlineSideEffects
from swipe_match.stores import InMemoryMatchStore, InMemorySwipeStore, InMemoryUserDirectory

from fakes import RecordingNotifier

USERS = {
    "u1": {"display_name": "Ana"},
    "u2": {"display_name": "Ben"},
    "u3": {"display_name": "Cleo", "is_premium": True},
}


@pytest.fixture(autouse=True)
def _reset_app():
    rate_limit.limiter.reset()
    yield
    m.app.dependency_overrides.clear()
    rate_limit.limiter.reset()


def _engine(daily_swipe_limit=0):
    return SwipeMatchEngine(
        InMemorySwipeStore(),
        InMemoryMatchStore(),
        InMemoryUserDirectory(USERS),
        RecordingNotifier(),
        side_effects=InlineSideEffects(),
        daily_swipe_limit=daily_swipe_limit,
    )


def _client(monkeypatch, engine):
    monkeypatch.setattr(m, "wait_for_db", lambda *args, **kwargs: None)
    monkeypatch.setattr(m, "run_migrations", lambda *args, **kwargs: None)
    m.app.dependency_overrides[get_swipe_engine] = lambda: engine
    m.app.dependency_overrides[get_user_directory] = lambda: engine.users
    return TestClient(m.app)


def _as(user_id):
    m.app.dependency_overrides[get_current_user] = lambda: {"id": user_id, **USERS[user_id], "is_premium": bool(USERS[user_id].get("is_premium"))}


def test_health(monkeypatch):
    client = _client(monkeypatch, _engine())
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_mutual_like_over_http(monkeypatch):
    engine = _engine()
    client = _client(monkeypatch, engine)

    _as("u1")
    first = client.post("/swipes", json={"target_id": "u2", "kind": "like"})
    assert first.status_code == 200
    assert first.json() == {"success": True, "matched": False, "match_id": None, "error": None}

    _as("u2")
    second = client.post("/swipes", json={"target_id": "u1", "kind": "like"})
    assert second.status_code == 200
    assert second.json()["matched"] is True
    assert second.json()["match_id"] == "u1_u2"
    assert engine.notifier.calls == [("u1", "Ben", "u1_u2")]


def test_swipe_error_statuses(monkeypatch):
    client = _client(monkeypatch, _engine())
    _as("u1")

    self_swipe = client.post("/swipes", json={"target_id": "u1", "kind": "like"})
    assert self_swipe.status_code == 400
    assert self_swipe.json()["error"] == "Cannot swipe on yourself"

    bad_kind = client.post("/swipes", json={"target_id": "u2", "kind": "superlike"})
    assert bad_kind.status_code == 400
    assert bad_kind.json()["code"] == "invalid"

    missing = client.post("/swipes", json={"kind": "like"})
    assert missing.status_code == 400
    assert missing.json()["error"] == "Missing required field: target_id"

    assert client.post("/swipes", json={"target_id": "u2", "kind": "like"}).status_code == 200
    dup = client.post("/swipes", json={"target_id": "u2", "kind": "dislike"})
    assert dup.status_code == 409
    assert dup.json()["error"] == "Swipe already exists"


def test_daily_limit_returns_429_for_free_users(monkeypatch):
    client = _client(monkeypatch, _engine(daily_swipe_limit=1))

    _as("u1")
    assert client.post("/swipes", json={"target_id": "u2", "kind": "like"}).status_code == 200
    blocked = client.post("/swipes", json={"target_id": "u3", "kind": "like"})
    assert blocked.status_code == 429
    assert blocked.json()["limit_exceeded"] is True

    quota = client.get("/swipes/quota").json()
    assert quota["used"] == 1
    assert quota["remaining"] == 0

    _as("u3")
    assert client.post("/swipes", json={"target_id": "u1", "kind": "like"}).status_code == 200
    assert client.post("/swipes", json={"target_id": "u2", "kind": "like"}).status_code == 200


def test_swipe_lists_and_pending(monkeypatch):
    client = _client(monkeypatch, _engine())

    _as("u2")
    client.post("/swipes", json={"target_id": "u1", "kind": "like"})
    _as("u3")
    client.post("/swipes", json={"target_id": "u1", "kind": "like"})
    _as("u1")
    client.post("/swipes", json={"target_id": "u2", "kind": "dislike"})

    mine = client.get("/swipes").json()
    assert mine["count"] == 1
    assert mine["swipes"][0]["target"] == "u2"
    assert mine["swipes"][0]["kind"] == "dislike"

    received = client.get("/swipes/received").json()
    assert {s["swiper"] for s in received["swipes"]} == {"u2", "u3"}

    pending = client.get("/swipes/pending").json()
    assert [p["user_id"] for p in pending["likes"]] == ["u3"]


def test_matches_listing_and_access(monkeypatch):
    client = _client(monkeypatch, _engine())

    _as("u1")
    client.post("/swipes", json={"target_id": "u2", "kind": "like"})
    _as("u2")
    client.post("/swipes", json={"target_id": "u1", "kind": "like"})

    listing = client.get("/matches").json()
    assert listing["count"] == 1
    assert listing["matches"][0]["match_id"] == "u1_u2"
    assert listing["matches"][0]["user"] == {"id": "u1", "display_name": "Ana"}
    assert listing["matches"][0]["is_expired"] is False

    detail = client.get("/matches/u1_u2")
    assert detail.status_code == 200
    assert detail.json()["peer_id"] == "u1"

    assert client.get("/matches/u1_u3").status_code == 404
    _as("u3")
    assert client.get("/matches/u1_u2").status_code == 403


def test_requests_without_credentials_are_rejected(monkeypatch):
    client = _client(monkeypatch, _engine())
    res = client.post("/swipes", json={"target_id": "u2", "kind": "like"})
    assert res.status_code == 401


def test_bearer_and_cookie_tokens_authenticate(monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", "test-secret")
    client = _client(monkeypatch, _engine())
    token = create_access_token("u1")

    res = client.get("/swipes", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 200

    client.cookies.set(SESSION_COOKIE_NAME, token)
    assert client.get("/matches").status_code == 200


def test_token_for_unknown_user_is_rejected(monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", "test-secret")
    client = _client(monkeypatch, _engine())
    token = create_access_token("ghost")
    res = client.get("/swipes", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401


def test_swipe_stats_endpoint(monkeypatch):
    client = _client(monkeypatch, _engine())

    _as("u1")
    client.post("/swipes", json={"target_id": "u2", "kind": "like"})
    client.post("/swipes", json={"target_id": "u3", "kind": "dislike"})
    _as("u2")
    client.post("/swipes", json={"target_id": "u1", "kind": "like"})

    _as("u1")
    stats = client.get("/swipes/stats").json()
    assert stats["sent"] == {"total": 2, "likes": 1, "dislikes": 1}
    assert stats["received"] == {"total": 1, "likes": 1}
    assert stats["matches"] == 1
    assert stats["match_rate"] == 100.0
