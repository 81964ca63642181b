import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from swipe_match.errors import DuplicateSwipeError, SwipeLimitError
from swipe_match.services.engine import SwipeMatchEngine
from swipe_match.services.side_effects import InlineSideEffects
from swipe_match.stores import InMemoryMatchStore, InMemorySwipeStore, InMemoryUserDirectory

from fakes import RecordingNotifier


class _RendezvousSwipeStore(InMemorySwipeStore):
    """Holds each writer after its insert until the other writer has inserted too."""

    def __init__(self, parties):
        super().__init__()
        self._barrier = threading.Barrier(parties, timeout=5)

    def insert_if_absent(self, swipe):
        result = super().insert_if_absent(swipe)
        self._barrier.wait()
        return result


def _engine(swipes):
    return SwipeMatchEngine(
        swipes,
        InMemoryMatchStore(),
        InMemoryUserDirectory({"a": {"display_name": "A"}, "b": {"display_name": "B"}}),
        RecordingNotifier(),
        side_effects=InlineSideEffects(),
    )


def _run_together(*calls):
    start = threading.Barrier(len(calls), timeout=5)

    def _go(call):
        start.wait()
        return call()

    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        futures = [pool.submit(_go, c) for c in calls]
        return [f.result() for f in futures]


def test_concurrent_mutual_likes_produce_exactly_one_match():
    for _ in range(25):
        engine = _engine(_RendezvousSwipeStore(parties=2))
        first, second = _run_together(
            lambda: engine.record_swipe("a", "b", "like"),
            lambda: engine.record_swipe("b", "a", "like"),
        )

        assert first.matched is True
        assert second.matched is True
        assert first.match_key == second.match_key == "a_b"
        assert len(engine.matches) == 1
        assert len(engine.notifier.calls) == 1
        assert engine.users.matched_peers("a") == ["b"]
        assert engine.users.matched_peers("b") == ["a"]


def test_unsynchronised_mutual_likes_never_double_match():
    for _ in range(50):
        engine = _engine(InMemorySwipeStore())
        outcomes = _run_together(
            lambda: engine.record_swipe("a", "b", "like"),
            lambda: engine.record_swipe("b", "a", "like"),
        )

        matched = [o for o in outcomes if o.matched]
        assert matched
        assert {o.match_key for o in matched} == {"a_b"}
        assert len(engine.matches) == 1
        assert len(engine.notifier.calls) == 1


def test_concurrent_identical_swipes_record_once():
    engine = _engine(InMemorySwipeStore())
    results = []
    lock = threading.Lock()

    def _attempt():
        try:
            engine.record_swipe("a", "b", "like")
        except DuplicateSwipeError:
            outcome = "duplicate"
        else:
            outcome = "recorded"
        with lock:
            results.append(outcome)

    _run_together(*[_attempt for _ in range(6)])

    assert results.count("recorded") == 1
    assert results.count("duplicate") == 5
    assert len(engine.swipes) == 1
    assert engine.users.swiped_targets("a") == ["b"]


def test_daily_limit_is_soft_under_concurrent_requests():
    engine = SwipeMatchEngine(
        InMemorySwipeStore(),
        InMemoryMatchStore(),
        InMemoryUserDirectory({"a": {"display_name": "A"}}),
        RecordingNotifier(),
        side_effects=InlineSideEffects(),
        daily_swipe_limit=1,
    )
    outcomes = []
    lock = threading.Lock()

    def _attempt(target):
        try:
            engine.record_swipe("a", target, "dislike")
        except SwipeLimitError:
            result = "limited"
        else:
            result = "recorded"
        with lock:
            outcomes.append(result)

    _run_together(*[lambda t=f"t{i}": _attempt(t) for i in range(4)])

    # in-flight requests may all pass the check, but never more than were in flight
    assert 1 <= outcomes.count("recorded") <= 4
    with pytest.raises(SwipeLimitError):
        engine.record_swipe("a", "late", "dislike")
