import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from ..auth.deps import get_current_user
from ..config import RL_SWIPE_LIMIT, RL_WINDOW_SECONDS
from ..deps import get_swipe_engine
from ..errors import StorageError
from ..schemas import SwipeListResponse, SwipeRequest, SwipeResponse
from ..services.engine import SwipeMatchEngine, swipe_response
from ..services.rate_limit import user_rate_limit
from ..services.swipe_queries import list_pending_likes, swipe_stats
from ..services.swipe_quota import check_daily_swipe_quota

logger = logging.getLogger(__name__)

router = APIRouter()

RL_SWIPE = user_rate_limit("swipe_create", RL_SWIPE_LIMIT, RL_WINDOW_SECONDS)

ERROR_STATUS = {
    "invalid": 400,
    "duplicate": 409,
    "limit_exceeded": 429,
    "storage": 503,
}


@router.post("/swipes", response_model=SwipeResponse, dependencies=[RL_SWIPE])
def create_swipe(
    body: SwipeRequest,
    current_user: dict[str, Any] = Depends(get_current_user),
    engine: SwipeMatchEngine = Depends(get_swipe_engine),
):
    result = swipe_response(
        engine,
        current_user["id"],
        body.target_id,
        body.kind,
        is_premium=bool(current_user.get("is_premium")),
    )
    if not result["success"]:
        return JSONResponse(status_code=ERROR_STATUS.get(result.get("code"), 400), content=result)
    return result


@router.get("/swipes", response_model=SwipeListResponse)
def get_my_swipes(
    limit: int = 100,
    current_user: dict[str, Any] = Depends(get_current_user),
    engine: SwipeMatchEngine = Depends(get_swipe_engine),
) -> dict[str, Any]:
    try:
        rows = engine.swipes.list_by_swiper(current_user["id"], limit=limit)
    except StorageError:
        raise HTTPException(status_code=503, detail="Swipe store unavailable")
    return {"swipes": [s.to_dict() for s in rows], "count": len(rows)}


@router.get("/swipes/received", response_model=SwipeListResponse)
def get_received_likes(
    limit: int = 100,
    current_user: dict[str, Any] = Depends(get_current_user),
    engine: SwipeMatchEngine = Depends(get_swipe_engine),
) -> dict[str, Any]:
    try:
        rows = engine.swipes.list_by_target(current_user["id"], limit=limit)
    except StorageError:
        raise HTTPException(status_code=503, detail="Swipe store unavailable")
    return {"swipes": [s.to_dict() for s in rows], "count": len(rows)}


@router.get("/swipes/pending")
def get_pending_likes(
    limit: int = 50,
    current_user: dict[str, Any] = Depends(get_current_user),
    engine: SwipeMatchEngine = Depends(get_swipe_engine),
) -> dict[str, Any]:
    try:
        likes = list_pending_likes(engine.swipes, current_user["id"], limit=limit)
    except StorageError:
        raise HTTPException(status_code=503, detail="Swipe store unavailable")
    return {"likes": likes, "count": len(likes)}


@router.get("/swipes/quota")
def get_swipe_quota(
    current_user: dict[str, Any] = Depends(get_current_user),
    engine: SwipeMatchEngine = Depends(get_swipe_engine),
) -> dict[str, Any]:
    try:
        decision = check_daily_swipe_quota(
            engine.swipes,
            current_user["id"],
            limit=engine.daily_swipe_limit,
            is_premium=bool(current_user.get("is_premium")),
            now=datetime.now(timezone.utc),
        )
    except StorageError:
        raise HTTPException(status_code=503, detail="Swipe store unavailable")
    return {**decision.to_dict(), "is_premium": bool(current_user.get("is_premium"))}


@router.get("/swipes/stats")
def get_swipe_stats(
    current_user: dict[str, Any] = Depends(get_current_user),
    engine: SwipeMatchEngine = Depends(get_swipe_engine),
) -> dict[str, Any]:
    try:
        return swipe_stats(engine.swipes, engine.matches, current_user["id"])
    except StorageError:
        raise HTTPException(status_code=503, detail="Swipe store unavailable")
