"""
Notifications component.

In-app notification templates and the realtime notification mirror.
"""

from src.components.notifications.component import (
    NOTIFICATIONS_TABLE,
    PREFERENCES_TABLE,
    NotificationMirror,
    Notifier,
    PreferencesMirror,
    reduce_notification_event,
)
from src.components.notifications.models import (
    CLOSED,
    SUBSCRIBED,
    ChangeEvent,
    ChangeType,
    NotificationFeedState,
)
from src.components.notifications.ports import (
    ChangeFeedPort,
    NotificationWriterPort,
    SubscriptionPort,
)

__all__ = [
    # Component
    "NOTIFICATIONS_TABLE",
    "PREFERENCES_TABLE",
    "NotificationMirror",
    "Notifier",
    "PreferencesMirror",
    "reduce_notification_event",
    # Models
    "CLOSED",
    "SUBSCRIBED",
    "ChangeEvent",
    "ChangeType",
    "NotificationFeedState",
    # Ports
    "ChangeFeedPort",
    "NotificationWriterPort",
    "SubscriptionPort",
]
