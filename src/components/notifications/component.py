"""
Notifications component.

Two halves:
- Notifier: writes templated in-app notifications for booking, order,
  payment and catalog events
- NotificationMirror: keeps a live list and unread counter for one user
  by reducing change-feed events

Reducer rules:
- INSERT prepends; unread inserts bump the counter
- UPDATE replaces by id; unread->read decrements (floor 0), read->unread
  increments
- DELETE removes by id; decrements (floor 0) if the local copy was unread
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Any
from uuid import UUID

from src.components.notifications.models import (
    SUBSCRIBED,
    ChangeEvent,
    NotificationFeedState,
)
from src.components.notifications.ports import (
    ChangeFeedPort,
    NotificationWriterPort,
    SubscriptionPort,
)
from src.domain.entities import Notification, NotificationType

logger = logging.getLogger(__name__)

NOTIFICATIONS_TABLE = "notifications"
PREFERENCES_TABLE = "notification_preferences"


# --- Pure reducer ---


def _as_notification(row: Any) -> Notification:
    if isinstance(row, Notification):
        return row
    return Notification.model_validate(row)


def reduce_notification_event(
    state: NotificationFeedState, event: ChangeEvent
) -> NotificationFeedState:
    """Apply one change event to the feed state."""
    if event.event_type == "INSERT":
        new = _as_notification(event.new)
        return NotificationFeedState(
            notifications=(new, *state.notifications),
            unread_count=state.unread_count + (1 if new.status == "unread" else 0),
        )

    if event.event_type == "UPDATE":
        new = _as_notification(event.new)
        old = _as_notification(event.old) if event.old is not None else None
        items = tuple(new if n.id == new.id else n for n in state.notifications)
        unread = state.unread_count
        if old is not None and old.status != new.status:
            if old.status == "unread" and new.status == "read":
                unread = max(0, unread - 1)
            elif old.status == "read" and new.status == "unread":
                unread += 1
        return NotificationFeedState(notifications=items, unread_count=unread)

    if event.event_type == "DELETE":
        deleted_id = _row_id(event.old)
        local = state.find(deleted_id)
        unread = state.unread_count
        if local is not None and local.status == "unread":
            unread = max(0, unread - 1)
        return NotificationFeedState(
            notifications=tuple(n for n in state.notifications if n.id != deleted_id),
            unread_count=unread,
        )

    return state


def _row_id(row: Any) -> Any:
    if row is None:
        return None
    if isinstance(row, Mapping):
        value = row.get("id")
        return UUID(str(value)) if value is not None else None
    return row.id


# --- Live mirrors ---


class NotificationMirror:
    """
    Live notification list for one user.

    Usage:
        mirror = NotificationMirror(feed, user_id, initial=repo.list_by_user(user_id))
        mirror.connect()
        ...
        mirror.unread_count
        mirror.close()
    """

    def __init__(
        self,
        feed: ChangeFeedPort,
        user_id: UUID,
        initial: Iterable[Notification] = (),
    ) -> None:
        self._feed = feed
        self._user_id = user_id
        self._state = NotificationFeedState.from_list(initial)
        self._lock = threading.Lock()
        self._subscription: SubscriptionPort | None = None
        self.is_connected = False

    def connect(self) -> None:
        if self._subscription is not None:
            return
        self._subscription = self._feed.subscribe(
            NOTIFICATIONS_TABLE,
            self._user_id,
            self._on_event,
            self._on_status,
        )

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self.is_connected = False

    def _on_status(self, status: str) -> None:
        logger.debug("Notification feed for %s: %s", self._user_id, status)
        self.is_connected = status == SUBSCRIBED

    def _on_event(self, event: ChangeEvent) -> None:
        with self._lock:
            self._state = reduce_notification_event(self._state, event)

    @property
    def state(self) -> NotificationFeedState:
        return self._state

    @property
    def notifications(self) -> list[Notification]:
        return list(self._state.notifications)

    @property
    def unread_count(self) -> int:
        return self._state.unread_count


class PreferencesMirror:
    """Latest notification-preferences row for one user."""

    def __init__(self, feed: ChangeFeedPort, user_id: UUID, initial: Any = None) -> None:
        self._feed = feed
        self._user_id = user_id
        self.preferences = initial
        self._subscription: SubscriptionPort | None = None

    def connect(self) -> None:
        if self._subscription is None:
            self._subscription = self._feed.subscribe(
                PREFERENCES_TABLE, self._user_id, self._on_event
            )

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_event(self, event: ChangeEvent) -> None:
        if event.event_type in ("INSERT", "UPDATE"):
            self.preferences = event.new


# --- Notifier ---


class Notifier:
    """Creates templated in-app notifications."""

    def __init__(self, repo: NotificationWriterPort, currency_symbol: str = "₦") -> None:
        self._repo = repo
        self._currency = currency_symbol

    def create(
        self,
        user_id: UUID,
        type: NotificationType,
        title: str,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> Notification:
        return self._repo.create(
            Notification(user_id=user_id, type=type, title=title, message=message, data=data)
        )

    # Bookings

    def notify_booking_confirmed(
        self, user_id: UUID, service_name: str, date: str, time: str, **extra: Any
    ) -> Notification:
        return self.create(
            user_id,
            "booking_confirmed",
            "Booking Confirmed! 🎉",
            f"Your appointment for {service_name} on {date} at {time} has been confirmed.",
            {"service_name": service_name, "date": date, "time": time, **extra},
        )

    def notify_booking_cancelled(
        self, user_id: UUID, service_name: str, date: str, time: str, **extra: Any
    ) -> Notification:
        return self.create(
            user_id,
            "booking_cancelled",
            "Booking Cancelled",
            f"Your appointment for {service_name} on {date} has been cancelled.",
            {"service_name": service_name, "date": date, "time": time, **extra},
        )

    def notify_booking_reminder(
        self, user_id: UUID, service_name: str, date: str, time: str, **extra: Any
    ) -> Notification:
        return self.create(
            user_id,
            "booking_reminder",
            "Appointment Reminder ⏰",
            f"Don't forget! You have an appointment for {service_name} tomorrow at {time}.",
            {"service_name": service_name, "date": date, "time": time, **extra},
        )

    # Orders

    def notify_order_confirmed(
        self, user_id: UUID, order_number: str, **extra: Any
    ) -> Notification:
        return self.create(
            user_id,
            "order_confirmed",
            "Order Confirmed! 📦",
            f"Your order #{order_number} has been confirmed and is being processed.",
            {"order_number": order_number, **extra},
        )

    def notify_order_shipped(self, user_id: UUID, order_number: str, **extra: Any) -> Notification:
        return self.create(
            user_id,
            "order_shipped",
            "Order Shipped! 🚚",
            f"Your order #{order_number} has been shipped and is on its way to you.",
            {"order_number": order_number, **extra},
        )

    def notify_order_delivered(
        self, user_id: UUID, order_number: str, **extra: Any
    ) -> Notification:
        return self.create(
            user_id,
            "order_delivered",
            "Order Delivered! ✅",
            f"Your order #{order_number} has been delivered. Enjoy your new items!",
            {"order_number": order_number, **extra},
        )

    # Payments

    def notify_payment_success(self, user_id: UUID, amount: str, **extra: Any) -> Notification:
        return self.create(
            user_id,
            "payment_success",
            "Payment Successful! 💳",
            f"Your payment of {self._currency}{amount} has been processed successfully.",
            {"amount": amount, **extra},
        )

    def notify_payment_failed(self, user_id: UUID, amount: str, **extra: Any) -> Notification:
        return self.create(
            user_id,
            "payment_failed",
            "Payment Failed ❌",
            f"Your payment of {self._currency}{amount} could not be processed. Please try again.",
            {"amount": amount, **extra},
        )

    # Catalog / announcements

    def notify_new_product(
        self, user_id: UUID, name: str, category: str, **extra: Any
    ) -> Notification:
        return self.create(
            user_id,
            "new_product",
            "New Arrival! ✨",
            f"Check out our new {category}: {name}.",
            {"name": name, "category": category, **extra},
        )

    def notify_sale_announcement(
        self, user_id: UUID, title: str, description: str, **extra: Any
    ) -> Notification:
        return self.create(
            user_id,
            "sale_announcement",
            title,
            description,
            {"title": title, "description": description, **extra},
        )

    def notify_system_announcement(self, user_id: UUID, title: str, message: str) -> Notification:
        return self.create(user_id, "system_announcement", title, message)
