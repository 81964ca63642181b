from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from ..auth.deps import get_current_user
from ..config import MATCH_EXPIRY_DAYS
from ..deps import get_swipe_engine
from ..errors import StorageError
from ..schemas import MatchListResponse
from ..services.engine import SwipeMatchEngine
from ..services.swipe_queries import list_user_matches

router = APIRouter()


@router.get("/matches", response_model=MatchListResponse)
def get_matches(
    limit: int = 50,
    current_user: dict[str, Any] = Depends(get_current_user),
    engine: SwipeMatchEngine = Depends(get_swipe_engine),
) -> dict[str, Any]:
    try:
        rows = list_user_matches(
            engine.matches,
            engine.users,
            current_user["id"],
            now=datetime.now(timezone.utc),
            expiration_days=MATCH_EXPIRY_DAYS,
            limit=limit,
        )
    except StorageError:
        raise HTTPException(status_code=503, detail="Match store unavailable")
    return {"matches": rows, "count": len(rows)}


@router.get("/matches/{match_id}")
def get_match(
    match_id: str,
    current_user: dict[str, Any] = Depends(get_current_user),
    engine: SwipeMatchEngine = Depends(get_swipe_engine),
) -> dict[str, Any]:
    try:
        match = engine.matches.get(match_id)
    except StorageError:
        raise HTTPException(status_code=503, detail="Match store unavailable")
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    if not match.has_member(current_user["id"]):
        raise HTTPException(status_code=403, detail="User is not part of this match")

    now = datetime.now(timezone.utc)
    return {
        **match.to_dict(),
        "peer_id": match.peer_of(current_user["id"]),
        "is_expired": match.is_expired(now, MATCH_EXPIRY_DAYS),
        "days_until_expiration": match.days_until_expiration(now, MATCH_EXPIRY_DAYS),
    }
