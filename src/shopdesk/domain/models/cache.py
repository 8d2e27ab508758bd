"""Cache entry model."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """
    Cached result of one remote read.

    Created or overwritten on every successful fetch; never partially updated.
    ``timestamp`` is a monotonic clock reading in seconds.
    """

    key: str
    data: Any
    timestamp: float

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        return now - self.timestamp < ttl_seconds
