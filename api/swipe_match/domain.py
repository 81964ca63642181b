from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum


class SwipeKind(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"


ALLOWED_KINDS = frozenset(k.value for k in SwipeKind)


class InsertResult(str, Enum):
    INSERTED = "inserted"
    ALREADY_EXISTS = "already_exists"


class CreateResult(str, Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


@dataclass(frozen=True)
class Swipe:
    swiper: str
    target: str
    kind: SwipeKind
    created_at: datetime

    @property
    def is_like(self) -> bool:
        return self.kind == SwipeKind.LIKE

    def to_dict(self) -> dict:
        return {
            "swiper": self.swiper,
            "target": self.target,
            "kind": self.kind.value,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class Match:
    match_key: str
    member_low: str
    member_high: str
    created_at: datetime
    last_message_at: datetime | None = None
    last_message_summary: str | None = None

    def peer_of(self, user_id: str) -> str:
        if user_id == self.member_low:
            return self.member_high
        if user_id == self.member_high:
            return self.member_low
        raise ValueError(f"{user_id} is not a member of match {self.match_key}")

    def has_member(self, user_id: str) -> bool:
        return user_id in (self.member_low, self.member_high)

    def expires_at(self, expiration_days: int) -> datetime:
        return self.created_at + timedelta(days=expiration_days)

    def is_expired(self, now: datetime, expiration_days: int = 14) -> bool:
        return now > self.expires_at(expiration_days)

    def days_until_expiration(self, now: datetime, expiration_days: int = 14) -> int:
        remaining = self.expires_at(expiration_days) - now
        # ceil on whole days, clamped at zero
        days = -(-remaining.total_seconds() // 86400)
        return max(0, int(days))

    def to_dict(self) -> dict:
        return {
            "match_id": self.match_key,
            "member_low": self.member_low,
            "member_high": self.member_high,
            "created_at": self.created_at,
            "last_message_at": self.last_message_at,
            "last_message_summary": self.last_message_summary,
        }


@dataclass(frozen=True)
class SwipeOutcome:
    matched: bool
    match_key: str | None = None
