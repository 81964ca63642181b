from datetime import datetime
from typing import Protocol

from ..domain import CreateResult, InsertResult, Match, Swipe, SwipeKind

DEFAULT_DISPLAY_NAME = "Someone"


class SwipeStore(Protocol):
    def find(self, swiper_id: str, target_id: str) -> Swipe | None: ...

    def insert_if_absent(self, swipe: Swipe) -> InsertResult: ...

    def list_by_swiper(self, swiper_id: str, limit: int = 100) -> list[Swipe]: ...

    def list_by_target(self, target_id: str, kind: SwipeKind | None = SwipeKind.LIKE, limit: int = 100) -> list[Swipe]: ...

    def count_since(self, swiper_id: str, since: datetime) -> int: ...

    def count_sent(self, swiper_id: str, kind: SwipeKind | None = None) -> int: ...

    def count_received(self, target_id: str, kind: SwipeKind | None = None) -> int: ...


class MatchStore(Protocol):
    def exists(self, match_key: str) -> bool: ...

    def create_if_absent(self, match_key: str, member_low: str, member_high: str, created_at: datetime) -> CreateResult: ...

    def get(self, match_key: str) -> Match | None: ...

    def list_for_user(self, user_id: str, limit: int = 50) -> list[Match]: ...

    def count_for_user(self, user_id: str) -> int: ...


class UserDirectory(Protocol):
    def get_user(self, user_id: str) -> dict | None: ...

    def get_display_name(self, user_id: str) -> str: ...

    def add_swiped_target(self, user_id: str, target_id: str) -> bool: ...

    def add_matched_peer(self, user_id: str, peer_id: str) -> bool: ...

    def matched_peers(self, user_id: str) -> list[str]: ...


def check_member_order(member_low: str, member_high: str) -> None:
    if not member_low < member_high:
        raise ValueError(f"member_low must sort before member_high, got {member_low!r} >= {member_high!r}")
