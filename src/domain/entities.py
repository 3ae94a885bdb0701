from datetime import UTC, date, datetime, time
from decimal import Decimal
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(UTC)


# --- Enums / Literals ---
UserRole = Literal["admin", "customer"]
ProductCategory = Literal["shoes", "clothes", "accessories"]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]
BookingStatus = Literal["pending", "confirmed", "canceled", "completed"]
HomepageSection = Literal["hero", "banner", "newsletter"]
NotificationStatus = Literal["unread", "read", "archived"]
NotificationType = Literal[
    "booking_confirmed",
    "booking_cancelled",
    "booking_reminder",
    "order_confirmed",
    "order_shipped",
    "order_delivered",
    "payment_success",
    "payment_failed",
    "new_product",
    "sale_announcement",
    "appointment_reminder",
    "system_announcement",
]

# --- Identity ---

class Profile(BaseModel):
    """Signed-in user as seen by the application (identity lives elsewhere)."""

    id: UUID
    email: str
    role: UserRole = "customer"
    full_name: str | None = None
    phone_number: str | None = None
    avatar_url: str | None = None
    email_verified: bool = False
    created_at: datetime | None = None
    last_sign_in: datetime | None = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.email

# --- Catalog ---

class Product(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str = Field(min_length=1)
    description: str | None = None
    price: Decimal = Field(ge=0)
    category: ProductCategory
    stock: int = Field(0, ge=0)
    images: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)


class Service(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str = Field(min_length=1)
    description: str | None = None
    price: Decimal = Field(ge=0)
    duration: int = Field(gt=0)  # minutes
    created_at: datetime = Field(default_factory=utc_now)

# --- Bookings ---

class Booking(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    service_id: UUID
    booking_date: date
    booking_time: time
    status: BookingStatus = "pending"
    created_at: datetime = Field(default_factory=utc_now)
    # Joined on read
    service: Service | None = None

# --- Orders ---

class OrderItem(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    order_id: UUID
    product_id: UUID
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)

class Order(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    total_amount: Decimal = Field(ge=0)
    payment_status: PaymentStatus = "pending"
    created_at: datetime = Field(default_factory=utc_now)
    items: list[OrderItem] = Field(default_factory=list)

    @property
    def order_number(self) -> str:
        return str(self.id)[:8].upper()

# --- Site content ---

class GalleryItem(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    image_url: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str | None = None
    created_at: datetime = Field(default_factory=utc_now)

class Testimonial(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    author: str = Field(min_length=1)
    text: str = Field(min_length=1)
    rating: int = Field(ge=1, le=5)
    created_at: datetime = Field(default_factory=utc_now)

class HomepageContent(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    section: HomepageSection
    title: str = Field(min_length=1)
    content: dict[str, Any] | None = None
    image_url: str | None = None

# --- Notifications ---

class Notification(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    type: NotificationType
    title: str
    message: str
    data: dict[str, Any] | None = None
    status: NotificationStatus = "unread"
    read_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)

def _default_channel(**overrides: bool) -> dict[str, bool]:
    channel = {
        "booking_updates": True,
        "order_updates": True,
        "promotions": True,
        "reminders": True,
    }
    channel.update(overrides)
    return channel

class NotificationPreferences(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    email_notifications: dict[str, bool] = Field(default_factory=_default_channel)
    push_notifications: dict[str, bool] = Field(
        default_factory=lambda: _default_channel(promotions=False)
    )
    sms_notifications: dict[str, bool] = Field(
        default_factory=lambda: _default_channel(
            booking_updates=False, order_updates=False, promotions=False
        )
    )
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
