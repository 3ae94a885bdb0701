"""
Database Adapter Interfaces.

Protocol-based interfaces for the single-table repositories.
Implementations: SQLite (now).

Repositories raise on storage errors; the action layer runs them through
the SafeExecutor. Lookups return None for missing rows.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Any, Protocol
from uuid import UUID

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

# -----------------------------------------------------------------------------
# Catalog
# -----------------------------------------------------------------------------


class ProductRepoPort(Protocol):
    def list_all(self) -> list[Product]: ...

    def get_by_id(self, product_id: UUID) -> Product | None: ...

    def create(self, product: Product) -> Product: ...

    def update(self, product_id: UUID, changes: dict[str, Any]) -> Product | None: ...

    def delete(self, product_id: UUID) -> bool: ...

    def list_by_category(self, category: ProductCategory) -> list[Product]: ...


class ServiceRepoPort(Protocol):
    def list_all(self) -> list[Service]: ...

    def get_by_id(self, service_id: UUID) -> Service | None: ...

    def create(self, service: Service) -> Service: ...

    def update(self, service_id: UUID, changes: dict[str, Any]) -> Service | None: ...

    def delete(self, service_id: UUID) -> bool: ...


# -----------------------------------------------------------------------------
# Bookings
# -----------------------------------------------------------------------------


class BookingRepoPort(Protocol):
    """Bookings are returned with their service joined in."""

    def list_all(self) -> list[Booking]: ...

    def get_by_id(self, booking_id: UUID) -> Booking | None: ...

    def list_by_user(self, user_id: UUID) -> list[Booking]: ...

    def list_by_date_range(self, start: date, end: date) -> list[Booking]: ...

    def create(self, booking: Booking) -> Booking: ...

    def update_status(self, booking_id: UUID, status: BookingStatus) -> Booking | None: ...

    def delete(self, booking_id: UUID) -> bool: ...


# -----------------------------------------------------------------------------
# Orders
# -----------------------------------------------------------------------------


class OrderRepoPort(Protocol):
    def list_all(self) -> list[Order]: ...

    def get_by_id(self, order_id: UUID) -> Order | None: ...

    def get_with_items(self, order_id: UUID) -> Order | None: ...

    def list_by_user(self, user_id: UUID) -> list[Order]: ...

    def create(self, order: Order) -> Order: ...

    def add_item(self, item: OrderItem) -> OrderItem: ...

    def update_payment_status(self, order_id: UUID, status: PaymentStatus) -> Order | None: ...


# -----------------------------------------------------------------------------
# Site content
# -----------------------------------------------------------------------------


class GalleryRepoPort(Protocol):
    def list_all(self) -> list[GalleryItem]: ...

    def get_by_id(self, item_id: UUID) -> GalleryItem | None: ...

    def create(self, item: GalleryItem) -> GalleryItem: ...

    def update(self, item_id: UUID, changes: dict[str, Any]) -> GalleryItem | None: ...

    def delete(self, item_id: UUID) -> bool: ...


class TestimonialRepoPort(Protocol):
    def list_all(self) -> list[Testimonial]: ...

    def get_by_id(self, testimonial_id: UUID) -> Testimonial | None: ...

    def create(self, testimonial: Testimonial) -> Testimonial: ...

    def update(self, testimonial_id: UUID, changes: dict[str, Any]) -> Testimonial | None: ...

    def delete(self, testimonial_id: UUID) -> bool: ...


class HomepageRepoPort(Protocol):
    def list_all(self) -> list[HomepageContent]: ...

    def get_by_id(self, content_id: UUID) -> HomepageContent | None: ...

    def list_by_section(self, section: HomepageSection) -> list[HomepageContent]: ...

    def create(self, content: HomepageContent) -> HomepageContent: ...

    def update(self, content_id: UUID, changes: dict[str, Any]) -> HomepageContent | None: ...

    def delete(self, content_id: UUID) -> bool: ...


# -----------------------------------------------------------------------------
# Notifications
# -----------------------------------------------------------------------------


class NotificationRepoPort(Protocol):
    def get_by_id(self, notification_id: UUID) -> Notification | None: ...

    def list_by_user(self, user_id: UUID) -> list[Notification]: ...

    def list_unread_by_user(self, user_id: UUID) -> list[Notification]: ...

    def create(self, notification: Notification) -> Notification: ...

    def mark_read(self, notification_id: UUID) -> Notification | None: ...

    def mark_all_read(self, user_id: UUID) -> int: ...

    def archive(self, notification_id: UUID) -> Notification | None: ...

    def delete(self, notification_id: UUID) -> bool: ...


class NotificationPreferencesRepoPort(Protocol):
    def get_by_user(self, user_id: UUID) -> NotificationPreferences | None: ...

    def upsert(self, preferences: NotificationPreferences) -> NotificationPreferences: ...


# -----------------------------------------------------------------------------
# Log store (read side; the write side is LogSinkPort)
# -----------------------------------------------------------------------------


class LogStorePort(Protocol):
    def query(
        self,
        filters: dict[str, Any],
        limit: int,
        offset: int,
    ) -> tuple[list[dict[str, Any]], int]:
        """Matching rows newest first, plus the total match count."""
        ...

    def count_by(self, column: str, limit: int | None = None) -> dict[str, int]:
        """Row counts grouped by `column` (non-null values), largest first."""
        ...

    def count(self) -> int: ...

    def delete_ids(self, log_ids: Sequence[int]) -> int: ...

    def clear(self, older_than: str | None = None) -> int: ...
