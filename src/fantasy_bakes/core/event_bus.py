"""In-process change notification.

Observer pattern: season mutations publish events, views and caches subscribe
with a callback. Delivery is synchronous and in subscription order. Events are
fire-and-forget: with no subscribers they are silently dropped, and a failing
callback never fails the mutation that published the event.
"""

from __future__ import annotations

import contextlib
import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Callback = Callable[[dict[str, Any]], None]


class EventBus:
    """Synchronous pub/sub event bus.

    Usage:
        bus = EventBus()

        with bus.subscribe("week.scores_updated", refresh_leaderboard):
            bus.publish("week.scores_updated", {"week_number": 3})
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Callback]] = defaultdict(list)
        self._wildcard_subscribers: list[Callback] = []

    def publish(self, event_type: str, data: dict[str, Any]) -> int:
        """Deliver an event to subscribers of this type, then to wildcard subscribers.

        Returns the number of callbacks that handled the event without raising.
        """
        envelope = {"type": event_type, "data": data}
        count = 0

        for callback in [*self._subscribers.get(event_type, []), *self._wildcard_subscribers]:
            try:
                callback(envelope)
            except Exception:  # Subscriber faults are isolated from the publisher
                logger.exception("event_subscriber_failed type=%s", event_type)
                continue
            count += 1

        return count

    def subscribe(self, event_type: str | None, callback: Callback) -> Subscription:
        """Register ``callback`` for one event type, or all events if ``event_type`` is None.

        The callback is active immediately. Close the returned Subscription (or use it
        as a context manager) to unregister.
        """
        self._register(callback, event_type)
        return Subscription(self, callback, event_type)

    def _register(self, callback: Callback, event_type: str | None) -> None:
        if event_type is None:
            self._wildcard_subscribers.append(callback)
        else:
            self._subscribers[event_type].append(callback)

    def _unregister(self, callback: Callback, event_type: str | None) -> None:
        if event_type is None:
            with contextlib.suppress(ValueError):
                self._wildcard_subscribers.remove(callback)
        else:
            with contextlib.suppress(ValueError):
                self._subscribers[event_type].remove(callback)

    @property
    def subscriber_count(self) -> int:
        """Total number of active subscriptions."""
        typed = sum(len(subs) for subs in self._subscribers.values())
        return typed + len(self._wildcard_subscribers)


class Subscription:
    """An active registration on the event bus. Close it to stop receiving events."""

    def __init__(self, bus: EventBus, callback: Callback, event_type: str | None) -> None:
        self._bus = bus
        self._callback = callback
        self._event_type = event_type
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def close(self) -> None:
        if self._active:
            self._active = False
            self._bus._unregister(self._callback, self._event_type)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
