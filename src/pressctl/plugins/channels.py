"""In-process pub/sub for live status channels (``post_<id>_status``)."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Subscriber = Callable[[dict[str, Any]], None]


class ChannelHub:
    """Named channels with any number of live subscribers.

    Publishing to a channel without subscribers is a no-op. A subscriber
    that raises is logged and skipped; the others still receive the message.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: defaultdict[str, list[Subscriber]] = defaultdict(list)

    def subscribe(self, channel: str, callback: Subscriber) -> Callable[[], None]:
        """Register *callback* on *channel*. Returns an unsubscribe function."""
        with self._lock:
            self._subscribers[channel].append(callback)

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._subscribers.get(channel, [])
                if callback in listeners:
                    listeners.remove(callback)
                if not listeners:
                    self._subscribers.pop(channel, None)

        return unsubscribe

    def subscriber_count(self, channel: str) -> int:
        with self._lock:
            return len(self._subscribers.get(channel, []))

    def publish(self, channel: str, message: dict[str, Any]) -> int:
        """Deliver *message* to every subscriber. Returns how many received it."""
        with self._lock:
            listeners = list(self._subscribers.get(channel, []))

        delivered = 0
        for callback in listeners:
            try:
                callback(message)
            except Exception:
                logger.warning("Subscriber on %s failed", channel, exc_info=True)
            else:
                delivered += 1
        return delivered
