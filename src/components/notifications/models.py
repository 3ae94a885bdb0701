"""
Notification feed models.

Client-side mirror of the `notifications` table, fed by row-change events.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Literal

from src.domain.entities import Notification

ChangeType = Literal["INSERT", "UPDATE", "DELETE"]

SUBSCRIBED = "SUBSCRIBED"
CLOSED = "CLOSED"


@dataclass(frozen=True)
class ChangeEvent:
    """
    One row change from the change feed.

    `new` is set for INSERT and UPDATE, `old` for UPDATE and DELETE.
    """

    table: str
    event_type: ChangeType
    new: Any = None
    old: Any = None


@dataclass(frozen=True)
class NotificationFeedState:
    """Client-side view of a user's notifications, newest first."""

    notifications: tuple[Notification, ...] = ()
    unread_count: int = 0

    @classmethod
    def from_list(cls, notifications: Iterable[Notification]) -> NotificationFeedState:
        items = tuple(notifications)
        return cls(
            notifications=items,
            unread_count=sum(1 for n in items if n.status == "unread"),
        )

    def find(self, notification_id: Any) -> Notification | None:
        for n in self.notifications:
            if n.id == notification_id:
                return n
        return None
