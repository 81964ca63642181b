"""Swipe recording and mutual-match detection.

``SwipeMatchEngine.record_swipe`` is the only write path for swipes and
matches. Correctness under concurrent callers rests entirely on the two
atomic store operations:

* ``SwipeStore.insert_if_absent`` decides which of two identical requests
  records the swipe.
* ``MatchStore.create_if_absent`` decides which of two mutual likes creates
  the match. Both callers still report ``matched=True`` with the same key,
  but only the one that saw ``CREATED`` fires the one-time side effects.

The engine holds no locks of its own. Denormalized list updates and
notifications are handed to a side-effect runner and can never change the
result of ``record_swipe``.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from ..domain import CreateResult, Swipe, SwipeKind, SwipeOutcome
from ..errors import DuplicateSwipeError, StorageError, SwipeError, SwipeLimitError
from ..stores.base import MatchStore, SwipeStore, UserDirectory
from .match_key import derive_match_key, ordered_members
from .notifications import NotificationDispatcher
from .side_effects import InlineSideEffects
from .state_machine import is_first_insert, is_first_transition
from .swipe_quota import check_daily_swipe_quota
from .swipe_validation import validate_swipe

logger = logging.getLogger(__name__)

PHASE_SWIPE_WRITE = "swipe_write"
PHASE_MATCH_DETECTION = "match_detection"


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class SwipeMatchEngine:
    def __init__(
        self,
        swipes: SwipeStore,
        matches: MatchStore,
        users: UserDirectory,
        notifier: NotificationDispatcher,
        *,
        side_effects=None,
        daily_swipe_limit: int = 0,
        clock: Callable[[], datetime] = _now_utc,
    ) -> None:
        self.swipes = swipes
        self.matches = matches
        self.users = users
        self.notifier = notifier
        self.side_effects = side_effects or InlineSideEffects()
        self.daily_swipe_limit = daily_swipe_limit
        self.clock = clock

    def record_swipe(self, swiper_id: str, target_id: str, kind: str, *, is_premium: bool = False) -> SwipeOutcome:
        validate_swipe(swiper_id, target_id, kind)
        swiper_id = str(swiper_id).strip()
        target_id = str(target_id).strip()
        swipe_kind = SwipeKind(kind)

        # soft cap: the count and the insert are separate calls, so concurrent
        # requests from one user can overshoot by the number still in flight
        if self.daily_swipe_limit > 0:
            decision = check_daily_swipe_quota(
                self.swipes,
                swiper_id,
                limit=self.daily_swipe_limit,
                is_premium=is_premium,
                now=self.clock(),
            )
            if not decision.allowed:
                raise SwipeLimitError(limit=self.daily_swipe_limit, remaining=decision.remaining)

        self._write_swipe(swiper_id, target_id, swipe_kind)
        self.side_effects.submit("swiped_list_update", self.users.add_swiped_target, swiper_id, target_id)

        if swipe_kind != SwipeKind.LIKE:
            return SwipeOutcome(matched=False)

        outcome = self._detect_match(swiper_id, target_id)
        if not outcome.matched:
            self.side_effects.submit("like_notification", self._notify_like, target_id, swiper_id)
        return outcome

    def _write_swipe(self, swiper_id: str, target_id: str, kind: SwipeKind) -> None:
        try:
            if self.swipes.find(swiper_id, target_id) is not None:
                raise DuplicateSwipeError(swiper_id, target_id)
            swipe = Swipe(swiper=swiper_id, target=target_id, kind=kind, created_at=self.clock())
            result = self.swipes.insert_if_absent(swipe)
        except StorageError as exc:
            exc.phase = PHASE_SWIPE_WRITE
            raise
        if not is_first_insert(result):
            logger.info("[SWIPE] lost insert race swiper=%s target=%s", swiper_id, target_id)
            raise DuplicateSwipeError(swiper_id, target_id)
        logger.debug("[SWIPE] recorded swiper=%s target=%s kind=%s", swiper_id, target_id, kind.value)

    def _detect_match(self, swiper_id: str, target_id: str) -> SwipeOutcome:
        try:
            reciprocal = self.swipes.find(target_id, swiper_id)
            if reciprocal is None or not reciprocal.is_like:
                return SwipeOutcome(matched=False)

            match_key = derive_match_key(swiper_id, target_id)
            member_low, member_high = ordered_members(swiper_id, target_id)
            result = self.matches.create_if_absent(match_key, member_low, member_high, self.clock())
        except StorageError as exc:
            exc.phase = PHASE_MATCH_DETECTION
            logger.warning("[MATCH] detection failed after swipe was recorded swiper=%s target=%s", swiper_id, target_id)
            raise

        if is_first_transition(result):
            logger.info("[MATCH] created match_id=%s", match_key)
            self._dispatch_match_side_effects(swiper_id, target_id, match_key)
        elif result == CreateResult.ALREADY_EXISTS:
            logger.info("[MATCH] already exists match_id=%s", match_key)
        return SwipeOutcome(matched=True, match_key=match_key)

    def _dispatch_match_side_effects(self, swiper_id: str, target_id: str, match_key: str) -> None:
        self.side_effects.submit("matched_list_update", self.users.add_matched_peer, swiper_id, target_id)
        self.side_effects.submit("matched_list_update", self.users.add_matched_peer, target_id, swiper_id)
        # the target swiped first, so they are the one who has not seen the match yet
        self.side_effects.submit("match_notification", self._notify_match, target_id, swiper_id, match_key)

    def _notify_match(self, recipient_user_id: str, matcher_user_id: str, match_key: str) -> None:
        display_name = self.users.get_display_name(matcher_user_id)
        self.notifier.notify_match(recipient_user_id, display_name, match_key=match_key)

    def _notify_like(self, recipient_user_id: str, liker_user_id: str) -> None:
        display_name = self.users.get_display_name(liker_user_id)
        self.notifier.notify_like(recipient_user_id, display_name, liker_id=liker_user_id)


def outcome_response(outcome: SwipeOutcome) -> dict[str, Any]:
    return {
        "success": True,
        "matched": outcome.matched,
        "match_id": outcome.match_key,
        "error": None,
    }


def error_response(exc: SwipeError) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "success": False,
        "matched": False,
        "match_id": None,
        "error": exc.message,
        "code": exc.code,
    }
    if isinstance(exc, SwipeLimitError):
        payload["limit_exceeded"] = True
        payload["remaining"] = exc.remaining
    return payload


def swipe_response(engine: SwipeMatchEngine, swiper_id: str, target_id: str, kind: str, *, is_premium: bool = False) -> dict[str, Any]:
    """Upstream adapter: never raises for ``SwipeError``, returns a result dict instead."""
    try:
        outcome = engine.record_swipe(swiper_id, target_id, kind, is_premium=is_premium)
    except SwipeError as exc:
        if isinstance(exc, StorageError):
            logger.error("[SWIPE] storage failure phase=%s swiper=%s target=%s", exc.phase, swiper_id, target_id)
        return error_response(exc)
    return outcome_response(outcome)
