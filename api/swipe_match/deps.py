from functools import lru_cache

from . import config
from .services.engine import SwipeMatchEngine
from .services.notifications import build_notification_dispatcher
from .services.side_effects import BackgroundSideEffects
from .stores import SqlMatchStore, SqlSwipeStore, SqlUserDirectory


@lru_cache(maxsize=1)
def get_user_directory() -> SqlUserDirectory:
    return SqlUserDirectory()


@lru_cache(maxsize=1)
def get_side_effects() -> BackgroundSideEffects:
    return BackgroundSideEffects(max_workers=config.SIDE_EFFECT_WORKERS)


@lru_cache(maxsize=1)
def get_swipe_engine() -> SwipeMatchEngine:
    return SwipeMatchEngine(
        swipes=SqlSwipeStore(),
        matches=SqlMatchStore(),
        users=get_user_directory(),
        notifier=build_notification_dispatcher(),
        side_effects=get_side_effects(),
        daily_swipe_limit=config.DAILY_SWIPE_LIMIT_FREE,
    )
