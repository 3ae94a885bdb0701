import json
import sqlite3
from collections.abc import Callable
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel

from src.components.notifications import (
    NOTIFICATIONS_TABLE,
    PREFERENCES_TABLE,
    ChangeEvent,
)
from src.domain.entities import (
    Booking,
    BookingStatus,
    GalleryItem,
    HomepageContent,
    HomepageSection,
    Notification,
    NotificationPreferences,
    Order,
    OrderItem,
    PaymentStatus,
    Product,
    ProductCategory,
    Service,
    Testimonial,
)

M = TypeVar("M", bound=BaseModel)

# Receives (table, event) after a committed write
ChangePublisher = Callable[[str, ChangeEvent], None]


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _to_db(value: Any) -> Any:
    if isinstance(value, UUID | Decimal):
        return str(value)
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, dict | list):
        return json.dumps(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


class SQLiteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _fetch_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            return conn.execute(sql, params).fetchall()
        finally:
            conn.close()

    def _fetch_one(self, sql: str, params: tuple[Any, ...] = ()) -> dict[str, Any] | None:
        conn = self._get_conn()
        try:
            row: dict[str, Any] | None = conn.execute(sql, params).fetchone()
            return row
        finally:
            conn.close()

    def _execute(self, sql: str, params: tuple[Any, ...] = ()) -> int:
        conn = self._get_conn()
        try:
            cursor = conn.execute(sql, params)
            conn.commit()
            return cursor.rowcount
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _upsert(self, table: str, row: dict[str, Any]) -> None:
        columns = list(row)
        placeholders = ", ".join("?" for _ in columns)
        updates = ", ".join(f"{c}=excluded.{c}" for c in columns if c != "id")
        self._execute(
            f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders}) "
            f"ON CONFLICT(id) DO UPDATE SET {updates}",
            tuple(_to_db(row[c]) for c in columns),
        )


class _TableRepo(SQLiteRepo, Generic[M]):
    """Plain single-table CRUD for models whose fields map 1:1 to columns."""

    table: str
    model: type[M]
    json_columns: tuple[str, ...] = ()
    order_by: str = "created_at DESC"

    def _row_to_model(self, row: dict[str, Any]) -> M:
        for col in self.json_columns:
            if row.get(col) is not None:
                row[col] = json.loads(row[col])
        return self.model.model_validate(row)

    def list_all(self) -> list[M]:
        rows = self._fetch_all(f"SELECT * FROM {self.table} ORDER BY {self.order_by}")
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, item_id: UUID) -> M | None:
        row = self._fetch_one(f"SELECT * FROM {self.table} WHERE id = ?", (str(item_id),))
        return self._row_to_model(row) if row else None

    def create(self, item: M) -> M:
        self._upsert(self.table, item.model_dump())
        return item

    def update(self, item_id: UUID, changes: dict[str, Any]) -> M | None:
        existing = self.get_by_id(item_id)
        if existing is None:
            return None
        updated = self.model.model_validate(
            {**existing.model_dump(), **changes, "id": existing.id}  # type: ignore[attr-defined]
        )
        self._upsert(self.table, updated.model_dump())
        return updated

    def delete(self, item_id: UUID) -> bool:
        return self._execute(f"DELETE FROM {self.table} WHERE id = ?", (str(item_id),)) > 0


# --- Catalog ---


class SQLiteProductRepo(_TableRepo[Product]):
    table = "products"
    model = Product
    json_columns = ("images",)

    def list_by_category(self, category: ProductCategory) -> list[Product]:
        rows = self._fetch_all(
            "SELECT * FROM products WHERE category = ? ORDER BY created_at DESC", (category,)
        )
        return [self._row_to_model(r) for r in rows]


class SQLiteServiceRepo(_TableRepo[Service]):
    table = "services"
    model = Service


# --- Site content ---


class SQLiteGalleryRepo(_TableRepo[GalleryItem]):
    table = "gallery"
    model = GalleryItem


class SQLiteTestimonialRepo(_TableRepo[Testimonial]):
    table = "testimonials"
    model = Testimonial


class SQLiteHomepageRepo(_TableRepo[HomepageContent]):
    table = "homepage_content"
    model = HomepageContent
    json_columns = ("content",)
    order_by = "section ASC, title ASC"

    def list_by_section(self, section: HomepageSection) -> list[HomepageContent]:
        rows = self._fetch_all(
            "SELECT * FROM homepage_content WHERE section = ? ORDER BY title ASC", (section,)
        )
        return [self._row_to_model(r) for r in rows]


# --- Bookings ---


_BOOKING_SELECT = """
    SELECT b.*,
           s.id AS s_id, s.name AS s_name, s.description AS s_description,
           s.price AS s_price, s.duration AS s_duration, s.created_at AS s_created_at
    FROM bookings b
    LEFT JOIN services s ON s.id = b.service_id
"""


class SQLiteBookingRepo(SQLiteRepo):
    def _row_to_booking(self, row: dict[str, Any]) -> Booking:
        service = None
        if row.get("s_id"):
            service = Service(
                id=row["s_id"],
                name=row["s_name"],
                description=row["s_description"],
                price=row["s_price"],
                duration=row["s_duration"],
                created_at=row["s_created_at"],
            )
        return Booking(
            id=row["id"],
            user_id=row["user_id"],
            service_id=row["service_id"],
            booking_date=row["booking_date"],
            booking_time=row["booking_time"],
            status=row["status"],
            created_at=row["created_at"],
            service=service,
        )

    def list_all(self) -> list[Booking]:
        rows = self._fetch_all(_BOOKING_SELECT + " ORDER BY b.created_at DESC")
        return [self._row_to_booking(r) for r in rows]

    def get_by_id(self, booking_id: UUID) -> Booking | None:
        row = self._fetch_one(_BOOKING_SELECT + " WHERE b.id = ?", (str(booking_id),))
        return self._row_to_booking(row) if row else None

    def list_by_user(self, user_id: UUID) -> list[Booking]:
        rows = self._fetch_all(
            _BOOKING_SELECT + " WHERE b.user_id = ? ORDER BY b.created_at DESC",
            (str(user_id),),
        )
        return [self._row_to_booking(r) for r in rows]

    def list_by_date_range(self, start: date, end: date) -> list[Booking]:
        rows = self._fetch_all(
            _BOOKING_SELECT
            + " WHERE b.booking_date >= ? AND b.booking_date <= ?"
            + " ORDER BY b.booking_date ASC, b.booking_time ASC",
            (start.isoformat(), end.isoformat()),
        )
        return [self._row_to_booking(r) for r in rows]

    def create(self, booking: Booking) -> Booking:
        self._upsert("bookings", booking.model_dump(exclude={"service"}))
        return self.get_by_id(booking.id) or booking

    def update_status(self, booking_id: UUID, status: BookingStatus) -> Booking | None:
        changed = self._execute(
            "UPDATE bookings SET status = ? WHERE id = ?", (status, str(booking_id))
        )
        return self.get_by_id(booking_id) if changed else None

    def delete(self, booking_id: UUID) -> bool:
        return self._execute("DELETE FROM bookings WHERE id = ?", (str(booking_id),)) > 0


# --- Orders ---


class SQLiteOrderRepo(SQLiteRepo):
    def _row_to_order(self, row: dict[str, Any], items: list[OrderItem] | None = None) -> Order:
        return Order(
            id=row["id"],
            user_id=row["user_id"],
            total_amount=row["total_amount"],
            payment_status=row["payment_status"],
            created_at=row["created_at"],
            items=items or [],
        )

    def list_all(self) -> list[Order]:
        rows = self._fetch_all("SELECT * FROM orders ORDER BY created_at DESC")
        return [self._row_to_order(r) for r in rows]

    def get_by_id(self, order_id: UUID) -> Order | None:
        row = self._fetch_one("SELECT * FROM orders WHERE id = ?", (str(order_id),))
        return self._row_to_order(row) if row else None

    def get_with_items(self, order_id: UUID) -> Order | None:
        row = self._fetch_one("SELECT * FROM orders WHERE id = ?", (str(order_id),))
        if not row:
            return None
        item_rows = self._fetch_all(
            "SELECT * FROM order_items WHERE order_id = ?", (str(order_id),)
        )
        return self._row_to_order(row, [OrderItem.model_validate(r) for r in item_rows])

    def list_by_user(self, user_id: UUID) -> list[Order]:
        rows = self._fetch_all(
            "SELECT * FROM orders WHERE user_id = ? ORDER BY created_at DESC", (str(user_id),)
        )
        return [self._row_to_order(r) for r in rows]

    def create(self, order: Order) -> Order:
        self._upsert("orders", order.model_dump(exclude={"items"}))
        return order

    def add_item(self, item: OrderItem) -> OrderItem:
        self._upsert("order_items", item.model_dump())
        return item

    def update_payment_status(self, order_id: UUID, status: PaymentStatus) -> Order | None:
        changed = self._execute(
            "UPDATE orders SET payment_status = ? WHERE id = ?", (status, str(order_id))
        )
        return self.get_by_id(order_id) if changed else None


# --- Notifications ---


class SQLiteNotificationRepo(SQLiteRepo):
    """
    Notification rows. When a publisher is given, every committed write is
    also announced as a ChangeEvent on the `notifications` table.
    """

    def __init__(self, db_path: str, publish: ChangePublisher | None = None):
        super().__init__(db_path)
        self._publish = publish

    def _emit(self, event: ChangeEvent) -> None:
        if self._publish is not None:
            self._publish(NOTIFICATIONS_TABLE, event)

    def _row_to_notification(self, row: dict[str, Any]) -> Notification:
        if row.get("data") is not None:
            row["data"] = json.loads(row["data"])
        return Notification.model_validate(row)

    def get_by_id(self, notification_id: UUID) -> Notification | None:
        row = self._fetch_one("SELECT * FROM notifications WHERE id = ?", (str(notification_id),))
        return self._row_to_notification(row) if row else None

    def list_by_user(self, user_id: UUID) -> list[Notification]:
        rows = self._fetch_all(
            "SELECT * FROM notifications WHERE user_id = ? ORDER BY created_at DESC",
            (str(user_id),),
        )
        return [self._row_to_notification(r) for r in rows]

    def list_unread_by_user(self, user_id: UUID) -> list[Notification]:
        rows = self._fetch_all(
            "SELECT * FROM notifications WHERE user_id = ? AND status = 'unread' "
            "ORDER BY created_at DESC",
            (str(user_id),),
        )
        return [self._row_to_notification(r) for r in rows]

    def create(self, notification: Notification) -> Notification:
        self._upsert("notifications", notification.model_dump())
        self._emit(ChangeEvent(NOTIFICATIONS_TABLE, "INSERT", new=notification))
        return notification

    def _set_status(self, notification_id: UUID, status: str) -> Notification | None:
        old = self.get_by_id(notification_id)
        if old is None:
            return None
        read_at = old.read_at
        if status == "read" and read_at is None:
            read_at = datetime.now(UTC)
        new = old.model_copy(update={"status": status, "read_at": read_at})
        self._execute(
            "UPDATE notifications SET status = ?, read_at = ? WHERE id = ?",
            (status, _to_db(read_at), str(notification_id)),
        )
        self._emit(ChangeEvent(NOTIFICATIONS_TABLE, "UPDATE", new=new, old=old))
        return new

    def mark_read(self, notification_id: UUID) -> Notification | None:
        return self._set_status(notification_id, "read")

    def archive(self, notification_id: UUID) -> Notification | None:
        return self._set_status(notification_id, "archived")

    def mark_all_read(self, user_id: UUID) -> int:
        unread = self.list_unread_by_user(user_id)
        for notification in unread:
            self._set_status(notification.id, "read")
        return len(unread)

    def delete(self, notification_id: UUID) -> bool:
        old = self.get_by_id(notification_id)
        if old is None:
            return False
        self._execute("DELETE FROM notifications WHERE id = ?", (str(notification_id),))
        self._emit(ChangeEvent(NOTIFICATIONS_TABLE, "DELETE", old=old))
        return True


class SQLiteNotificationPreferencesRepo(SQLiteRepo):
    _json_columns = ("email_notifications", "push_notifications", "sms_notifications")

    def __init__(self, db_path: str, publish: ChangePublisher | None = None):
        super().__init__(db_path)
        self._publish = publish

    def get_by_user(self, user_id: UUID) -> NotificationPreferences | None:
        row = self._fetch_one(
            "SELECT * FROM notification_preferences WHERE user_id = ?", (str(user_id),)
        )
        if not row:
            return None
        for col in self._json_columns:
            row[col] = json.loads(row[col])
        return NotificationPreferences.model_validate(row)

    def upsert(self, preferences: NotificationPreferences) -> NotificationPreferences:
        existing = self.get_by_user(preferences.user_id)
        if existing is not None:
            preferences = preferences.model_copy(
                update={
                    "id": existing.id,
                    "created_at": existing.created_at,
                    "updated_at": datetime.now(UTC),
                }
            )
        self._upsert("notification_preferences", preferences.model_dump())
        if self._publish is not None:
            event_type = "UPDATE" if existing is not None else "INSERT"
            self._publish(
                PREFERENCES_TABLE,
                ChangeEvent(PREFERENCES_TABLE, event_type, new=preferences, old=existing),
            )
        return preferences
