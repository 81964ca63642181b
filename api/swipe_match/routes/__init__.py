from fastapi import APIRouter, FastAPI

from .match import router as match_router
from .swipe import router as swipe_router

health_router = APIRouter()


@health_router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


def include_modular_routers(app: FastAPI) -> None:
    app.include_router(health_router, tags=["health"])
    app.include_router(swipe_router, tags=["swipes"])
    app.include_router(match_router, tags=["matches"])


__all__ = ["include_modular_routers", "APIRouter"]
