from .base import DEFAULT_DISPLAY_NAME, MatchStore, SwipeStore, UserDirectory
from .memory import InMemoryMatchStore, InMemorySwipeStore, InMemoryUserDirectory
from .sql import SqlMatchStore, SqlSwipeStore, SqlUserDirectory

__all__ = [
    "DEFAULT_DISPLAY_NAME",
    "MatchStore",
    "SwipeStore",
    "UserDirectory",
    "InMemoryMatchStore",
    "InMemorySwipeStore",
    "InMemoryUserDirectory",
    "SqlMatchStore",
    "SqlSwipeStore",
    "SqlUserDirectory",
]
