"""In-process read cache with TTL, prefix invalidation and cross-context sync."""

import logging
import threading
import time
from typing import Callable, Iterable, Optional, TypeVar

from shopdesk.domain.models import CacheEntry
from shopdesk.services.broadcast import CLEAR_CACHE, CacheBroadcaster, Message, NullBroadcaster

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 5 * 60
STATIC_TTL_SECONDS = 30 * 60

DataChangedListener = Callable[[list[str]], None]


class CacheService:
    """
    Cache of remote reads keyed by logical resource name.

    Keys may be parameterized with an underscore suffix
    (``products_{"model":"iphone"}``); clearing ``products`` clears them all.
    Every invalidation is broadcast to other contexts and announced to local
    "data changed" listeners.
    """

    def __init__(
        self,
        broadcaster: Optional[CacheBroadcaster] = None,
        default_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._broadcaster = broadcaster or NullBroadcaster()
        self._default_ttl = default_ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._listeners: list[DataChangedListener] = []
        self._lock = threading.RLock()
        self._broadcaster.listen(self.handle_broadcast)

    def fetch_with_cache(
        self,
        key: str,
        fetcher: Callable[[], T],
        ttl_seconds: Optional[float] = None,
    ) -> T:
        """
        Return cached data for ``key`` while fresh, otherwise call ``fetcher``.

        A failing fetcher leaves the cache untouched and its error propagates.
        """
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_fresh(self._clock(), ttl):
                return entry.data

        data = fetcher()
        with self._lock:
            self._entries[key] = CacheEntry(key=key, data=data, timestamp=self._clock())
        return data

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def clear_cache(self, keys: Iterable[str]) -> list[str]:
        """
        Drop each key and every ``key_*`` entry, then broadcast and notify.

        Returns the cache keys that were actually removed.
        """
        prefixes = list(dict.fromkeys(keys))
        removed = self._remove(prefixes)
        self._broadcaster.post({"type": CLEAR_CACHE, "keys": prefixes, "prefixes": prefixes})
        self._notify(prefixes)
        return removed

    def clear_all(self) -> list[str]:
        """Invalidate every cached key (logout, backup restore)."""
        return self.clear_cache(self.keys())

    def handle_broadcast(self, message: Message) -> None:
        """Apply an invalidation received from another context. Never re-broadcasts."""
        if not message or message.get("type") != CLEAR_CACHE:
            return
        prefixes = list(message.get("prefixes") or message.get("keys") or [])
        if not prefixes:
            return
        self._remove(prefixes)
        self._notify(prefixes)

    def subscribe(self, listener: DataChangedListener) -> Callable[[], None]:
        """Register a "data changed" listener; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        self._broadcaster.close()

    def _remove(self, prefixes: list[str]) -> list[str]:
        with self._lock:
            doomed = [
                key for key in self._entries
                if any(key == p or key.startswith(p + "_") for p in prefixes)
            ]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.debug("Cache cleared: %s", doomed)
        return doomed

    def _notify(self, prefixes: list[str]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(list(prefixes))
            except Exception:
                logger.exception("Data-changed listener failed")
