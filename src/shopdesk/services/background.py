"""Fire-and-forget execution of side effects (audit writes, notifications, repairs)."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class TaskQueue(Protocol):
    """Interface services use to schedule detached work."""

    def submit(self, name: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        ...

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        ...

    def shutdown(self, wait: bool = True) -> None:
        ...


def _run_isolated(name: str, fn: Callable[..., Any], args: tuple, kwargs: dict) -> None:
    try:
        fn(*args, **kwargs)
    except Exception:
        logger.exception("Background task '%s' failed", name)


class BackgroundTaskQueue:
    """
    Thread-pool task queue.

    A failing task is logged with its name and never reaches the caller
    that scheduled it.
    """

    def __init__(self, max_workers: int = 2):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="shopdesk-bg"
        )
        self._pending: set[Future] = set()
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)

    def submit(self, name: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        future = self._executor.submit(_run_isolated, name, fn, args, kwargs)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._done)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until every submitted task has finished. False on timeout."""
        with self._idle:
            return self._idle.wait_for(lambda: not self._pending, timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _done(self, future: Future) -> None:
        with self._idle:
            self._pending.discard(future)
            if not self._pending:
                self._idle.notify_all()


class ImmediateTaskQueue:
    """Runs each task inline, with the same failure isolation."""

    def submit(self, name: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        _run_isolated(name, fn, args, kwargs)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        return True

    def shutdown(self, wait: bool = True) -> None:
        pass
