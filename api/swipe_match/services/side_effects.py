import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

logger = logging.getLogger(__name__)


class _FailureCounter:
    def __init__(self) -> None:
        self._count = 0
        self._lock = threading.Lock()

    def increment(self) -> None:
        with self._lock:
            self._count += 1

    @property
    def value(self) -> int:
        with self._lock:
            return self._count


def _run_logged(label: str, fn: Callable[..., Any], args: tuple, failures: _FailureCounter) -> None:
    try:
        fn(*args)
    except Exception:
        failures.increment()
        logger.exception("[SIDE_EFFECT] %s failed", label)


class InlineSideEffects:
    """Runs side effects on the calling thread. Used by tests and scripts."""

    def __init__(self) -> None:
        self._failures = _FailureCounter()

    @property
    def failure_count(self) -> int:
        return self._failures.value

    def submit(self, label: str, fn: Callable[..., Any], *args: Any) -> None:
        _run_logged(label, fn, args, self._failures)

    def shutdown(self, wait: bool = True) -> None:
        return None


class BackgroundSideEffects:
    """Hands side effects to a worker pool so the caller never waits on them."""

    def __init__(self, max_workers: int = 4) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="swipe-side-effects")
        self._failures = _FailureCounter()

    @property
    def failure_count(self) -> int:
        return self._failures.value

    def submit(self, label: str, fn: Callable[..., Any], *args: Any) -> None:
        self._executor.submit(_run_logged, label, fn, args, self._failures)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
