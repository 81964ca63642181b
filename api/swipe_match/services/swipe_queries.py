from datetime import datetime
from typing import Any

from ..domain import SwipeKind
from ..stores.base import MatchStore, SwipeStore, UserDirectory


def list_pending_likes(swipes: SwipeStore, user_id: str, *, limit: int = 50) -> list[dict[str, Any]]:
    """Likes received that ``user_id`` has not answered with a swipe of their own."""
    pending = []
    for swipe in swipes.list_by_target(user_id, kind=SwipeKind.LIKE, limit=500):
        if swipes.find(user_id, swipe.swiper) is not None:
            continue
        pending.append({"user_id": swipe.swiper, "liked_at": swipe.created_at})
        if len(pending) >= limit:
            break
    return pending


def list_user_matches(
    matches: MatchStore,
    users: UserDirectory,
    user_id: str,
    *,
    now: datetime,
    expiration_days: int,
    limit: int = 50,
) -> list[dict[str, Any]]:
    out = []
    for match in matches.list_for_user(user_id, limit=limit):
        peer_id = match.peer_of(user_id)
        out.append(
            {
                "match_id": match.match_key,
                "matched_at": match.created_at,
                "user": {"id": peer_id, "display_name": users.get_display_name(peer_id)},
                "last_message_at": match.last_message_at,
                "last_message_summary": match.last_message_summary,
                "is_expired": match.is_expired(now, expiration_days),
                "days_until_expiration": match.days_until_expiration(now, expiration_days),
            }
        )
    return out


def swipe_stats(swipes: SwipeStore, matches: MatchStore, user_id: str) -> dict[str, Any]:
    likes_sent = swipes.count_sent(user_id, SwipeKind.LIKE)
    total_matches = matches.count_for_user(user_id)
    match_rate = round(total_matches / likes_sent * 100, 1) if likes_sent else 0.0
    return {
        "sent": {
            "total": swipes.count_sent(user_id),
            "likes": likes_sent,
            "dislikes": swipes.count_sent(user_id, SwipeKind.DISLIKE),
        },
        "received": {
            "total": swipes.count_received(user_id),
            "likes": swipes.count_received(user_id, SwipeKind.LIKE),
        },
        "matches": total_matches,
        "match_rate": match_rate,
    }
