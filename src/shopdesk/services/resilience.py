"""Timeout and retry wrappers for calls to the remote data service."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from typing import Callable, Optional, TypeVar

from shopdesk.core.exceptions import NetworkError, OperationCancelledError, RemoteTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRIES = 3
DEFAULT_DELAY_SECONDS = 1.0

_NETWORK_MARKERS = ("aborted", "Failed to fetch", "NetworkError")


def is_cancellation(error: BaseException) -> bool:
    return isinstance(error, OperationCancelledError) or type(error).__name__ == "AbortError"


def is_network_error(error: BaseException) -> bool:
    """Transient transport failures worth retrying."""
    if isinstance(error, (NetworkError, ConnectionError)):
        return True
    message = str(error)
    return any(marker in message for marker in _NETWORK_MARKERS)


def with_timeout(
    operation: Callable[[], T],
    timeout_seconds: float,
    message: str = "Request timed out",
) -> T:
    """
    Run ``operation`` and give up waiting after ``timeout_seconds``.

    The operation is not cancelled; its eventual result is discarded.
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="remote-call")
    try:
        future = executor.submit(operation)
        try:
            return future.result(timeout=timeout_seconds)
        except FuturesTimeoutError:
            raise RemoteTimeoutError(message) from None
    finally:
        executor.shutdown(wait=False)


def fetch_with_retry(
    fetcher: Callable[[], T],
    retries: int = DEFAULT_RETRIES,
    delay_seconds: float = DEFAULT_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call ``fetcher``, retrying transient network failures with exponential backoff.

    Waits ``delay``, ``2*delay``, ``4*delay``... between attempts, at most
    ``retries`` times. Cancellations and non-network errors propagate at once.
    """
    delay = delay_seconds
    attempts_left = retries
    while True:
        try:
            return fetcher()
        except Exception as error:
            if is_cancellation(error) or attempts_left <= 0 or not is_network_error(error):
                raise
            logger.warning(
                "Network error detected (%s). Retrying in %.2fs (%d attempts left)",
                error, delay, attempts_left,
            )
            sleep(delay)
            attempts_left -= 1
            delay *= 2


class RemoteCaller:
    """
    Applies the retry policy and a per-attempt timeout to remote calls.

    Timeouts surface immediately and do not use up retries.
    """

    def __init__(
        self,
        retries: int = DEFAULT_RETRIES,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        timeout_seconds: Optional[float] = 15.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._retries = retries
        self._delay = delay_seconds
        self._timeout = timeout_seconds
        self._sleep = sleep

    def __call__(self, operation: Callable[[], T], description: str = "remote call") -> T:
        def attempt() -> T:
            if self._timeout is None:
                return operation()
            return with_timeout(operation, self._timeout, f"Timed out: {description}")

        return fetch_with_retry(attempt, self._retries, self._delay, self._sleep)
