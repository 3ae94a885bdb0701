from datetime import date, datetime, time
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from src.domain.entities import (
    BookingStatus,
    HomepageSection,
    PaymentStatus,
    ProductCategory,
)


# --- Shared ---
class MessageResponse(BaseModel):
    message: str | None = None


class CountResponse(BaseModel):
    count: int
    message: str | None = None


# --- Catalog ---
class ProductCreate(BaseModel):
    name: str
    description: str | None = None
    price: Decimal
    category: ProductCategory
    stock: int = 0
    images: list[str] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    category: ProductCategory | None = None
    stock: int | None = None
    images: list[str] | None = None


class ServiceCreate(BaseModel):
    name: str
    description: str | None = None
    price: Decimal
    duration: int


class ServiceUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    duration: int | None = None


# --- Site content ---
class GalleryItemCreate(BaseModel):
    image_url: str
    title: str
    description: str | None = None


class GalleryItemUpdate(BaseModel):
    image_url: str | None = None
    title: str | None = None
    description: str | None = None


class TestimonialCreate(BaseModel):
    author: str
    text: str
    rating: int


class TestimonialUpdate(BaseModel):
    author: str | None = None
    text: str | None = None
    rating: int | None = None


class HomepageContentCreate(BaseModel):
    section: HomepageSection
    title: str
    content: dict[str, Any] | None = None
    image_url: str | None = None


class HomepageContentUpdate(BaseModel):
    section: HomepageSection | None = None
    title: str | None = None
    content: dict[str, Any] | None = None
    image_url: str | None = None


# --- Bookings ---
class BookingCreate(BaseModel):
    service_id: UUID
    booking_date: date
    booking_time: time


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


# --- Orders ---
class OrderLineCreate(BaseModel):
    product_id: UUID
    quantity: int = Field(gt=0)


class OrderCreate(BaseModel):
    items: list[OrderLineCreate] = Field(min_length=1)


class OrderStatusUpdate(BaseModel):
    status: PaymentStatus


# --- Notifications ---
class PreferencesUpdate(BaseModel):
    email_notifications: dict[str, bool] | None = None
    push_notifications: dict[str, bool] | None = None
    sms_notifications: dict[str, bool] | None = None


# --- Logs ---
class LogIdsRequest(BaseModel):
    ids: list[int]


class ClearLogsRequest(BaseModel):
    older_than: datetime | None = None
