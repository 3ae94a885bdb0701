"""
Unit tests for the notifications component: reducer, live mirrors,
in-process change feed and the templated Notifier.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from src.adapters.change_feed import InMemoryChangeFeed
from src.components.notifications import (
    CLOSED,
    NOTIFICATIONS_TABLE,
    PREFERENCES_TABLE,
    SUBSCRIBED,
    ChangeEvent,
    NotificationFeedState,
    NotificationMirror,
    Notifier,
    PreferencesMirror,
    reduce_notification_event,
)
from src.domain.entities import Notification, NotificationPreferences


def make(user_id, status="unread", title="Hello") -> Notification:
    return Notification(
        user_id=user_id,
        type="system_announcement",
        title=title,
        message="Body",
        status=status,
    )


def insert(n: Notification) -> ChangeEvent:
    return ChangeEvent(NOTIFICATIONS_TABLE, "INSERT", new=n)


def update(old: Notification, **changes) -> ChangeEvent:
    return ChangeEvent(NOTIFICATIONS_TABLE, "UPDATE", new=old.model_copy(update=changes), old=old)


def delete(old) -> ChangeEvent:
    return ChangeEvent(NOTIFICATIONS_TABLE, "DELETE", old=old)


@pytest.fixture
def user_id():
    return uuid4()


class TestReducer:
    def test_insert_prepends_and_counts_unread(self, user_id):
        first, second = make(user_id, title="1"), make(user_id, title="2")

        state = reduce_notification_event(NotificationFeedState(), insert(first))
        state = reduce_notification_event(state, insert(second))

        assert [n.title for n in state.notifications] == ["2", "1"]
        assert state.unread_count == 2

    def test_insert_of_read_row_does_not_count(self, user_id):
        state = reduce_notification_event(NotificationFeedState(), insert(make(user_id, "read")))
        assert state.unread_count == 0
        assert len(state.notifications) == 1

    def test_update_unread_to_read_decrements(self, user_id):
        n = make(user_id)
        state = NotificationFeedState.from_list([n])

        state = reduce_notification_event(state, update(n, status="read"))

        assert state.unread_count == 0
        assert state.notifications[0].status == "read"

    def test_update_read_to_unread_increments(self, user_id):
        n = make(user_id, status="read")
        state = NotificationFeedState.from_list([n])

        state = reduce_notification_event(state, update(n, status="unread"))

        assert state.unread_count == 1

    def test_counter_never_goes_negative(self, user_id):
        n = make(user_id)
        state = NotificationFeedState(notifications=(n,), unread_count=0)

        state = reduce_notification_event(state, update(n, status="read"))

        assert state.unread_count == 0

    def test_update_without_status_change_keeps_count(self, user_id):
        n = make(user_id)
        state = NotificationFeedState.from_list([n])

        state = reduce_notification_event(state, update(n, title="Edited"))

        assert state.unread_count == 1
        assert state.notifications[0].title == "Edited"

    def test_delete_unread_decrements(self, user_id):
        keep, gone = make(user_id, title="keep"), make(user_id, title="gone")
        state = NotificationFeedState.from_list([keep, gone])

        state = reduce_notification_event(state, delete(gone))

        assert [n.title for n in state.notifications] == ["keep"]
        assert state.unread_count == 1

    def test_delete_read_keeps_count(self, user_id):
        unread, read = make(user_id), make(user_id, status="read")
        state = NotificationFeedState.from_list([unread, read])

        state = reduce_notification_event(state, delete(read))

        assert state.unread_count == 1

    def test_delete_accepts_raw_row(self, user_id):
        n = make(user_id)
        state = NotificationFeedState.from_list([n])

        raw = {"id": str(n.id), "user_id": str(user_id)}

        state = reduce_notification_event(state, delete(raw))

        assert state.notifications == ()
        assert state.unread_count == 0

    def test_delete_of_unknown_row_is_noop(self, user_id):
        state = NotificationFeedState.from_list([make(user_id)])

        after = reduce_notification_event(state, delete(make(user_id)))

        assert after.unread_count == 1
        assert len(after.notifications) == 1

    def test_insert_accepts_raw_row(self, user_id):
        row = make(user_id).model_dump(mode="json")
        state = reduce_notification_event(NotificationFeedState(), insert(row))
        assert isinstance(state.notifications[0], Notification)


class TestChangeFeed:
    def test_routes_by_owner(self, user_id):
        feed = InMemoryChangeFeed()
        mine: list[ChangeEvent] = []
        theirs: list[ChangeEvent] = []
        feed.subscribe(NOTIFICATIONS_TABLE, user_id, mine.append)
        feed.subscribe(NOTIFICATIONS_TABLE, uuid4(), theirs.append)

        reached = feed.publish(NOTIFICATIONS_TABLE, insert(make(user_id)))

        assert reached == 1
        assert len(mine) == 1
        assert theirs == []

    def test_delete_routes_by_old_row(self, user_id):
        feed = InMemoryChangeFeed()
        seen: list[ChangeEvent] = []
        feed.subscribe(NOTIFICATIONS_TABLE, user_id, seen.append)

        feed.publish(NOTIFICATIONS_TABLE, delete(make(user_id)))

        assert len(seen) == 1

    def test_status_callbacks(self, user_id):
        feed = InMemoryChangeFeed()
        statuses: list[str] = []

        sub = feed.subscribe(NOTIFICATIONS_TABLE, user_id, lambda e: None, statuses.append)
        sub.unsubscribe()
        sub.unsubscribe()

        assert statuses == [SUBSCRIBED, CLOSED]
        assert feed.subscriber_count(NOTIFICATIONS_TABLE, user_id) == 0

    def test_failing_subscriber_does_not_block_others(self, user_id):
        feed = InMemoryChangeFeed()
        seen: list[ChangeEvent] = []

        def broken(event):
            raise RuntimeError("subscriber bug")

        feed.subscribe(NOTIFICATIONS_TABLE, user_id, broken)
        feed.subscribe(NOTIFICATIONS_TABLE, user_id, seen.append)

        assert feed.publish(NOTIFICATIONS_TABLE, insert(make(user_id))) == 2
        assert len(seen) == 1

    def test_event_without_owner_reaches_nobody(self, user_id):
        feed = InMemoryChangeFeed()
        feed.subscribe(NOTIFICATIONS_TABLE, user_id, lambda e: None)

        assert feed.publish(NOTIFICATIONS_TABLE, ChangeEvent(NOTIFICATIONS_TABLE, "DELETE")) == 0


class TestNotificationMirror:
    def test_mirror_tracks_feed(self, user_id):
        feed = InMemoryChangeFeed()
        existing = make(user_id, status="read", title="old")
        mirror = NotificationMirror(feed, user_id, initial=[existing])
        mirror.connect()

        fresh = make(user_id, title="new")
        feed.publish(NOTIFICATIONS_TABLE, insert(fresh))

        assert mirror.is_connected
        assert [n.title for n in mirror.notifications] == ["new", "old"]
        assert mirror.unread_count == 1

        feed.publish(NOTIFICATIONS_TABLE, update(fresh, status="read"))
        assert mirror.unread_count == 0

    def test_close_stops_updates(self, user_id):
        feed = InMemoryChangeFeed()
        mirror = NotificationMirror(feed, user_id)
        mirror.connect()
        mirror.close()

        feed.publish(NOTIFICATIONS_TABLE, insert(make(user_id)))

        assert not mirror.is_connected
        assert mirror.notifications == []

    def test_connect_is_idempotent(self, user_id):
        feed = InMemoryChangeFeed()
        mirror = NotificationMirror(feed, user_id)
        mirror.connect()
        mirror.connect()

        assert feed.subscriber_count(NOTIFICATIONS_TABLE, user_id) == 1

    def test_ignores_other_users(self, user_id):
        feed = InMemoryChangeFeed()
        mirror = NotificationMirror(feed, user_id)
        mirror.connect()

        feed.publish(NOTIFICATIONS_TABLE, insert(make(uuid4())))

        assert mirror.unread_count == 0


class TestPreferencesMirror:
    def test_keeps_latest_row(self, user_id):
        feed = InMemoryChangeFeed()
        mirror = PreferencesMirror(feed, user_id)
        mirror.connect()

        prefs = NotificationPreferences(user_id=user_id)
        feed.publish(PREFERENCES_TABLE, ChangeEvent(PREFERENCES_TABLE, "INSERT", new=prefs))
        assert mirror.preferences == prefs

        changed = prefs.model_copy(update={"push_notifications": {"promotions": True}})
        feed.publish(
            PREFERENCES_TABLE, ChangeEvent(PREFERENCES_TABLE, "UPDATE", new=changed, old=prefs)
        )
        assert mirror.preferences == changed

        mirror.close()
        assert feed.subscriber_count(PREFERENCES_TABLE, user_id) == 0


class MemoryNotificationWriter:
    def __init__(self) -> None:
        self.created: list[Notification] = []

    def create(self, notification: Notification) -> Notification:
        self.created.append(notification)
        return notification


class TestNotifier:
    def test_booking_confirmed(self, user_id):
        notifier = Notifier(MemoryNotificationWriter())

        n = notifier.notify_booking_confirmed(user_id, "Bridal Makeup", "2026-04-01", "10:00")

        assert n.type == "booking_confirmed"
        assert n.title == "Booking Confirmed! 🎉"
        assert "Bridal Makeup" in n.message and "2026-04-01" in n.message
        assert n.data["time"] == "10:00"
        assert n.status == "unread"

    def test_payment_uses_currency_symbol(self, user_id):
        notifier = Notifier(MemoryNotificationWriter(), currency_symbol="₦")

        n = notifier.notify_payment_success(user_id, "15000.00", order_number="ABCD1234")

        assert "₦15000.00" in n.message
        assert n.data == {"amount": "15000.00", "order_number": "ABCD1234"}

    @pytest.mark.parametrize(
        "method,kind",
        [
            ("notify_order_confirmed", "order_confirmed"),
            ("notify_order_shipped", "order_shipped"),
            ("notify_order_delivered", "order_delivered"),
        ],
    )
    def test_order_notifications(self, user_id, method, kind):
        writer = MemoryNotificationWriter()
        n = getattr(Notifier(writer), method)(user_id, "ABCD1234")

        assert n.type == kind
        assert "#ABCD1234" in n.message
        assert writer.created == [n]

    def test_announcements(self, user_id):
        notifier = Notifier(MemoryNotificationWriter())

        sale = notifier.notify_sale_announcement(user_id, "Easter Sale", "20% off shoes")
        system = notifier.notify_system_announcement(user_id, "Maintenance", "Back at 6pm")
        product = notifier.notify_new_product(user_id, "Velvet Heels", "shoes")

        assert (sale.title, sale.message) == ("Easter Sale", "20% off shoes")
        assert system.type == "system_announcement"
        assert system.data is None
        assert "Velvet Heels" in product.message
