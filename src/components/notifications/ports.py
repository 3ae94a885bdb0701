"""
Notification component port definitions.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol
from uuid import UUID

from src.components.notifications.models import ChangeEvent
from src.domain.entities import Notification


class SubscriptionPort(Protocol):
    def unsubscribe(self) -> None:
        """Stop delivery. Safe to call twice."""
        ...


class ChangeFeedPort(Protocol):
    """Row-change feed scoped to one user's rows of one table."""

    def subscribe(
        self,
        table: str,
        user_id: UUID,
        callback: Callable[[ChangeEvent], None],
        on_status: Callable[[str], None] | None = None,
    ) -> SubscriptionPort:
        ...


class NotificationWriterPort(Protocol):
    def create(self, notification: Notification) -> Notification:
        ...
