"""
splicer.events - Host-subscribable notifications.

Each editor and clock gets its own EventBus; there is no module-level
registry. Callbacks run synchronously in subscription order and any
exception they raise propagates to the code that emitted the event.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from typing import Any

from splicer.logging import get_logger

log = get_logger("events")

TIMELINE_CHANGED = "timeline_changed"
CONFLICTS_CHANGED = "conflicts_changed"
STATE_CHANGED = "state_changed"
CURSOR_MOVED = "cursor_moved"
PLAYBACK_ENDED = "ended"

Callback = Callable[..., Any]


class EventBus:
    def __init__(self) -> None:
        self._subscribers: dict[str, list[Callback]] = defaultdict(list)

    def subscribe(self, event: str, callback: Callback) -> Callable[[], None]:
        """Register callback for event. Returns a function that unsubscribes it."""
        self._subscribers[event].append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers[event]:
                self._subscribers[event].remove(callback)

        return unsubscribe

    def emit(self, event: str, **payload: Any) -> None:
        subscribers = list(self._subscribers.get(event, ()))
        if subscribers:
            log.debug("emit %s to %d subscriber(s)", event, len(subscribers))
        for callback in subscribers:
            callback(**payload)

    def subscriber_count(self, event: str) -> int:
        return len(self._subscribers.get(event, ()))
