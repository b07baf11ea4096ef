"""Multi-subscriber channel for velocity events.

The channel is owned by the caller: sample sources push into it but never
close it, so one channel can be shared by several sources and listened to by
several consumers.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription(Generic[T]):
    """Handle returned by ``VelocityBroadcast.listen``."""

    def __init__(self, channel: VelocityBroadcast[T], callback: Callable[[T], None]) -> None:
        """Initialize the subscription."""
        self._channel = channel
        self.callback = callback

    def cancel(self) -> None:
        """Stop receiving events. Safe to call more than once."""
        self._channel._remove(self)  # noqa: SLF001


class VelocityBroadcast(Generic[T]):
    """Synchronous broadcast channel tolerating zero, one or many subscribers."""

    def __init__(self) -> None:
        """Initialize the channel."""
        self._lock = threading.Lock()
        self._subscriptions: list[Subscription[T]] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def listen(self, callback: Callable[[T], None]) -> Subscription[T]:
        """Register a callback for every future event."""
        sub = Subscription(self, callback)
        with self._lock:
            if self._closed:
                msg = "Cannot listen on a closed broadcast"
                raise RuntimeError(msg)
            self._subscriptions.append(sub)
        return sub

    def add(self, event: T) -> None:
        """Deliver an event to all current subscribers."""
        with self._lock:
            if self._closed:
                msg = "Cannot add events to a closed broadcast"
                raise RuntimeError(msg)
            subs = list(self._subscriptions)

        for sub in subs:
            try:
                sub.callback(event)
            except Exception:
                logger.exception("Broadcast subscriber %r failed", sub.callback)

    def close(self) -> None:
        """Drop all subscribers and reject further events."""
        with self._lock:
            self._closed = True
            self._subscriptions.clear()
        logger.debug("Broadcast closed")

    def _remove(self, sub: Subscription[T]) -> None:
        with self._lock:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)
