import threading
from datetime import datetime

from ..domain import CreateResult, InsertResult, Match, Swipe, SwipeKind
from .base import DEFAULT_DISPLAY_NAME, check_member_order


class InMemorySwipeStore:
    def __init__(self) -> None:
        self._swipes: dict[tuple[str, str], Swipe] = {}
        self._lock = threading.Lock()

    def find(self, swiper_id: str, target_id: str) -> Swipe | None:
        with self._lock:
            return self._swipes.get((swiper_id, target_id))

    def insert_if_absent(self, swipe: Swipe) -> InsertResult:
        key = (swipe.swiper, swipe.target)
        with self._lock:
            if key in self._swipes:
                return InsertResult.ALREADY_EXISTS
            self._swipes[key] = swipe
            return InsertResult.INSERTED

    def list_by_swiper(self, swiper_id: str, limit: int = 100) -> list[Swipe]:
        with self._lock:
            rows = [s for (swiper, _), s in self._swipes.items() if swiper == swiper_id]
        rows.sort(key=lambda s: s.created_at, reverse=True)
        return rows[:limit]

    def list_by_target(self, target_id: str, kind: SwipeKind | None = SwipeKind.LIKE, limit: int = 100) -> list[Swipe]:
        with self._lock:
            rows = [
                s
                for (_, target), s in self._swipes.items()
                if target == target_id and (kind is None or s.kind == kind)
            ]
        rows.sort(key=lambda s: s.created_at, reverse=True)
        return rows[:limit]

    def count_since(self, swiper_id: str, since: datetime) -> int:
        with self._lock:
            return sum(1 for s in self._swipes.values() if s.swiper == swiper_id and s.created_at >= since)

    def count_sent(self, swiper_id: str, kind: SwipeKind | None = None) -> int:
        with self._lock:
            return sum(1 for s in self._swipes.values() if s.swiper == swiper_id and (kind is None or s.kind == kind))

    def count_received(self, target_id: str, kind: SwipeKind | None = None) -> int:
        with self._lock:
            return sum(1 for s in self._swipes.values() if s.target == target_id and (kind is None or s.kind == kind))

    def __len__(self) -> int:
        with self._lock:
            return len(self._swipes)


class InMemoryMatchStore:
    def __init__(self) -> None:
        self._matches: dict[str, Match] = {}
        self._lock = threading.Lock()

    def exists(self, match_key: str) -> bool:
        with self._lock:
            return match_key in self._matches

    def create_if_absent(self, match_key: str, member_low: str, member_high: str, created_at: datetime) -> CreateResult:
        check_member_order(member_low, member_high)
        with self._lock:
            if match_key in self._matches:
                return CreateResult.ALREADY_EXISTS
            self._matches[match_key] = Match(
                match_key=match_key,
                member_low=member_low,
                member_high=member_high,
                created_at=created_at,
            )
            return CreateResult.CREATED

    def get(self, match_key: str) -> Match | None:
        with self._lock:
            return self._matches.get(match_key)

    def list_for_user(self, user_id: str, limit: int = 50) -> list[Match]:
        with self._lock:
            rows = [m for m in self._matches.values() if m.has_member(user_id)]
        rows.sort(key=lambda m: m.created_at, reverse=True)
        return rows[:limit]

    def count_for_user(self, user_id: str) -> int:
        with self._lock:
            return sum(1 for m in self._matches.values() if m.has_member(user_id))

    def __len__(self) -> int:
        with self._lock:
            return len(self._matches)


class InMemoryUserDirectory:
    def __init__(self, users: dict[str, dict] | None = None) -> None:
        self._users: dict[str, dict] = {uid: dict(u, id=uid) for uid, u in (users or {}).items()}
        self._swiped: dict[str, list[str]] = {}
        self._matched: dict[str, list[str]] = {}
        self._lock = threading.Lock()

    def get_user(self, user_id: str) -> dict | None:
        with self._lock:
            user = self._users.get(user_id)
            return dict(user) if user else None

    def get_display_name(self, user_id: str) -> str:
        user = self.get_user(user_id) or {}
        return user.get("display_name") or DEFAULT_DISPLAY_NAME

    def _add(self, lists: dict[str, list[str]], user_id: str, value: str) -> bool:
        with self._lock:
            current = lists.setdefault(user_id, [])
            if value in current:
                return False
            current.append(value)
            return True

    def add_swiped_target(self, user_id: str, target_id: str) -> bool:
        return self._add(self._swiped, user_id, target_id)

    def add_matched_peer(self, user_id: str, peer_id: str) -> bool:
        return self._add(self._matched, user_id, peer_id)

    def swiped_targets(self, user_id: str) -> list[str]:
        with self._lock:
            return list(self._swiped.get(user_id, []))

    def matched_peers(self, user_id: str) -> list[str]:
        with self._lock:
            return list(self._matched.get(user_id, []))
