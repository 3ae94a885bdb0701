"""
In-process change feed.

Delivers row-change events to subscribers keyed by (table, user_id).
Repositories call `publish` after a committed write; the owning user is
read from the event's `new` row, or `old` for deletes.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID, uuid4

from src.components.notifications import CLOSED, SUBSCRIBED, ChangeEvent

logger = logging.getLogger(__name__)

Callback = Callable[[ChangeEvent], None]
StatusCallback = Callable[[str], None]


@dataclass
class _Subscriber:
    callback: Callback
    on_status: StatusCallback | None
    id: str = field(default_factory=lambda: uuid4().hex)


class InMemorySubscription:
    def __init__(self, feed: InMemoryChangeFeed, key: tuple[str, str], subscriber: _Subscriber):
        self._feed = feed
        self._key = key
        self._subscriber = subscriber
        self._active = True

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._feed._remove(self._key, self._subscriber)


def _owner(row: Any) -> str | None:
    if row is None:
        return None
    value = row.get("user_id") if isinstance(row, dict) else getattr(row, "user_id", None)
    return str(value) if value is not None else None


class InMemoryChangeFeed:
    """Implements ChangeFeedPort for a single process."""

    def __init__(self) -> None:
        self._subscribers: dict[tuple[str, str], list[_Subscriber]] = {}
        self._lock = threading.Lock()

    def subscribe(
        self,
        table: str,
        user_id: UUID,
        callback: Callback,
        on_status: StatusCallback | None = None,
    ) -> InMemorySubscription:
        key = (table, str(user_id))
        subscriber = _Subscriber(callback=callback, on_status=on_status)
        with self._lock:
            self._subscribers.setdefault(key, []).append(subscriber)
        logger.debug("Subscribed %s to %s:%s", subscriber.id, table, user_id)
        if on_status is not None:
            on_status(SUBSCRIBED)
        return InMemorySubscription(self, key, subscriber)

    def _remove(self, key: tuple[str, str], subscriber: _Subscriber) -> None:
        with self._lock:
            subscribers = self._subscribers.get(key, [])
            if subscriber in subscribers:
                subscribers.remove(subscriber)
            if not subscribers:
                self._subscribers.pop(key, None)
        if subscriber.on_status is not None:
            subscriber.on_status(CLOSED)

    def publish(self, table: str, event: ChangeEvent) -> int:
        """Deliver an event. Returns the number of subscribers reached."""
        owner = _owner(event.new) or _owner(event.old)
        if owner is None:
            return 0
        with self._lock:
            targets = list(self._subscribers.get((table, owner), []))
        for subscriber in targets:
            try:
                subscriber.callback(event)
            except Exception:
                logger.exception("Change feed subscriber %s failed", subscriber.id)
        return len(targets)

    def subscriber_count(self, table: str, user_id: UUID) -> int:
        with self._lock:
            return len(self._subscribers.get((table, str(user_id)), []))
