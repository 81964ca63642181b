class SwipeError(Exception):
    """Base class for every failure ``record_swipe`` can surface."""

    code = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(SwipeError):
    """Malformed swipe request. Never retried."""

    code = "invalid"


class DuplicateSwipeError(SwipeError):
    """The ordered pair already has a recorded swipe."""

    code = "duplicate"

    def __init__(self, swiper_id: str, target_id: str):
        self.swiper_id = swiper_id
        self.target_id = target_id
        super().__init__("Swipe already exists")


class SwipeLimitError(SwipeError):
    code = "limit_exceeded"

    def __init__(self, limit: int, remaining: int = 0):
        self.limit = limit
        self.remaining = remaining
        super().__init__("Daily swipe limit reached")


class StorageError(SwipeError):
    """Transient infrastructure failure in a store.

    ``phase`` tells the caller how far ``record_swipe`` got: ``swipe_write``
    means nothing was persisted, ``match_detection`` means the swipe itself is
    durably recorded and only match creation needs a retry.
    """

    code = "storage"

    def __init__(self, message: str, phase: str | None = None):
        self.phase = phase
        super().__init__(message)


class NotificationError(Exception):
    """Best-effort delivery failure. Logged, never propagated to callers."""
