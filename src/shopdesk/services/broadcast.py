"""
Cache-invalidation broadcasting between application contexts.

Only invalidation signals cross context boundaries; cached data never does.
"""

import logging
import threading
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)

CLEAR_CACHE = "CLEAR_CACHE"

Message = dict[str, Any]
MessageHandler = Callable[[Message], None]


class CacheBroadcaster(Protocol):
    """Publish/subscribe interface the cache service depends on."""

    def post(self, message: Message) -> None:
        """Deliver ``message`` to every other attached context."""
        ...

    def listen(self, handler: MessageHandler) -> None:
        """Register the handler that receives messages from other contexts."""
        ...

    def close(self) -> None:
        """Detach from the channel."""
        ...


class NullBroadcaster:
    """Broadcaster for single-context deployments. Drops everything."""

    def post(self, message: Message) -> None:
        pass

    def listen(self, handler: MessageHandler) -> None:
        pass

    def close(self) -> None:
        pass


class BroadcastHub:
    """
    Registry of named in-process channels.

    Contexts that open a channel with the same name receive each other's
    messages, mirroring same-origin browser broadcast channels.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._members: dict[str, list["LocalBroadcastChannel"]] = {}

    def open(self, name: str) -> "LocalBroadcastChannel":
        channel = LocalBroadcastChannel(name, self)
        with self._lock:
            self._members.setdefault(name, []).append(channel)
        return channel

    def _peers(self, channel: "LocalBroadcastChannel") -> list["LocalBroadcastChannel"]:
        with self._lock:
            return [c for c in self._members.get(channel.name, []) if c is not channel]

    def _detach(self, channel: "LocalBroadcastChannel") -> None:
        with self._lock:
            members = self._members.get(channel.name, [])
            if channel in members:
                members.remove(channel)


class LocalBroadcastChannel:
    """One context's endpoint on a hub channel. Never receives its own posts."""

    def __init__(self, name: str, hub: BroadcastHub):
        self.name = name
        self._hub = hub
        self._handler: Optional[MessageHandler] = None
        self._closed = False

    def post(self, message: Message) -> None:
        if self._closed:
            return
        for peer in self._hub._peers(self):
            peer._deliver(dict(message))

    def listen(self, handler: MessageHandler) -> None:
        self._handler = handler

    def close(self) -> None:
        self._closed = True
        self._hub._detach(self)

    def _deliver(self, message: Message) -> None:
        if self._closed or self._handler is None:
            return
        try:
            self._handler(message)
        except Exception:
            logger.exception("Broadcast handler failed on channel %s", self.name)
