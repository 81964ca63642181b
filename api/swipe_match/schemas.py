from datetime import datetime
from typing import Any

from pydantic import BaseModel


class SwipeRequest(BaseModel):
    target_id: str = ""
    kind: str = ""


class SwipeResponse(BaseModel):
    success: bool
    matched: bool
    match_id: str | None = None
    error: str | None = None


class SwipeRead(BaseModel):
    swiper: str
    target: str
    kind: str
    created_at: datetime


class SwipeListResponse(BaseModel):
    swipes: list[SwipeRead]
    count: int


class MatchListResponse(BaseModel):
    matches: list[dict[str, Any]]
    count: int
