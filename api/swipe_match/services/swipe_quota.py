from dataclasses import dataclass
from datetime import datetime, time, timezone

from ..stores.base import SwipeStore

UNLIMITED = -1


@dataclass
class QuotaDecision:
    allowed: bool
    remaining: int
    used: int
    limit: int

    def to_dict(self) -> dict:
        return {
            "used": self.used,
            "remaining": self.remaining,
            "limit": self.limit if self.limit != UNLIMITED else "unlimited",
            "is_unlimited": self.limit == UNLIMITED,
        }


def start_of_day_utc(now: datetime) -> datetime:
    now = now.astimezone(timezone.utc) if now.tzinfo else now.replace(tzinfo=timezone.utc)
    return datetime.combine(now.date(), time.min, tzinfo=timezone.utc)


def check_daily_swipe_quota(store: SwipeStore, swiper_id: str, *, limit: int, is_premium: bool, now: datetime) -> QuotaDecision:
    if is_premium or limit <= 0:
        return QuotaDecision(allowed=True, remaining=UNLIMITED, used=0, limit=UNLIMITED)
    used = store.count_since(swiper_id, start_of_day_utc(now))
    remaining = max(0, limit - used)
    return QuotaDecision(allowed=used < limit, remaining=remaining, used=used, limit=limit)
