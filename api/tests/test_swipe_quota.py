from datetime import datetime, timedelta, timezone

from swipe_match.domain import Match, Swipe, SwipeKind
from swipe_match.services.swipe_quota import UNLIMITED, check_daily_swipe_quota, start_of_day_utc
from swipe_match.stores import InMemorySwipeStore

NOW = datetime(2026, 2, 9, 12, 0, tzinfo=timezone.utc)


def _store_with(count, at):
    store = InMemorySwipeStore()
    for i in range(count):
        store.insert_if_absent(Swipe("u1", f"t{i}", SwipeKind.LIKE, at))
    return store


def test_start_of_day_utc_normalises_offsets():
    local = datetime(2026, 2, 10, 1, 30, tzinfo=timezone(timedelta(hours=3)))
    assert start_of_day_utc(local) == datetime(2026, 2, 9, tzinfo=timezone.utc)


def test_quota_counts_only_today():
    store = _store_with(3, NOW - timedelta(days=1))
    decision = check_daily_swipe_quota(store, "u1", limit=3, is_premium=False, now=NOW)
    assert decision.allowed is True
    assert decision.used == 0
    assert decision.remaining == 3


def test_quota_blocks_at_limit():
    store = _store_with(3, NOW - timedelta(hours=1))
    decision = check_daily_swipe_quota(store, "u1", limit=3, is_premium=False, now=NOW)
    assert decision.allowed is False
    assert decision.remaining == 0
    assert decision.to_dict() == {"used": 3, "remaining": 0, "limit": 3, "is_unlimited": False}


def test_premium_and_disabled_limit_are_unlimited():
    store = _store_with(5, NOW)
    premium = check_daily_swipe_quota(store, "u1", limit=3, is_premium=True, now=NOW)
    disabled = check_daily_swipe_quota(store, "u1", limit=0, is_premium=False, now=NOW)
    for decision in (premium, disabled):
        assert decision.allowed is True
        assert decision.remaining == UNLIMITED
        assert decision.to_dict()["limit"] == "unlimited"


def test_match_expiry_view():
    match = Match("u1_u2", "u1", "u2", NOW)
    assert match.is_expired(NOW + timedelta(days=14)) is False
    assert match.is_expired(NOW + timedelta(days=14, seconds=1)) is True
    assert match.days_until_expiration(NOW) == 14
    assert match.days_until_expiration(NOW + timedelta(days=13, hours=1)) == 1
    assert match.days_until_expiration(NOW + timedelta(days=30)) == 0
    assert match.days_until_expiration(NOW, expiration_days=7) == 7
