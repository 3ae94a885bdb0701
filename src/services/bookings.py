"""
Booking actions.

Key behaviors:
- Customers create, list and cancel their own bookings
- Admins see and manage every booking
- A new booking triggers a confirmation email and an in-app notification;
  neither failing fails the booking
"""

from __future__ import annotations

import logging
from datetime import date, time
from typing import ClassVar
from uuid import UUID

from src.components.notifications import Notifier
from src.components.safe_exec import RetryPolicyRegistry, SafeExecutor
from src.core.ports.cache import PathInvalidatorPort
from src.core.ports.db import BookingRepoPort, ServiceRepoPort
from src.domain.entities import Booking, BookingStatus, Profile
from src.domain.policy import can_access_resource, require_admin, require_auth
from src.services.base import ActionResult, ActionService
from src.services.email import EmailService

logger = logging.getLogger(__name__)


def _fmt_time(value: time) -> str:
    return value.strftime("%H:%M")


class BookingActions(ActionService):
    area: ClassVar[str] = "bookings"
    paths: ClassVar[tuple[str, ...]] = ("/bookings", "/admin/bookings")

    def __init__(
        self,
        repo: BookingRepoPort,
        services: ServiceRepoPort,
        executor: SafeExecutor,
        policies: RetryPolicyRegistry,
        invalidator: PathInvalidatorPort,
        email: EmailService | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        super().__init__(executor, policies, invalidator)
        self._repo = repo
        self._services = services
        self._email = email
        self._notifier = notifier

    async def list_all(self, user: Profile | None) -> ActionResult[list[Booking]]:
        if require_admin(user) is None:
            return ActionResult.admin_required()

        result = await self._call("list", self._repo.list_all)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        return ActionResult.success(result.value)

    async def list_by_date_range(
        self, user: Profile | None, start: date, end: date
    ) -> ActionResult[list[Booking]]:
        if require_admin(user) is None:
            return ActionResult.admin_required()
        if end < start:
            return ActionResult.invalid("end date must not be before start date")

        result = await self._call("list", self._repo.list_by_date_range, start, end)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        return ActionResult.success(result.value)

    async def list_mine(self, user: Profile | None) -> ActionResult[list[Booking]]:
        if require_auth(user) is None:
            return ActionResult.unauthorized()

        result = await self._call("listByUser", self._repo.list_by_user, user.id)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        return ActionResult.success(result.value)

    async def get(self, user: Profile | None, booking_id: UUID) -> ActionResult[Booking]:
        if require_auth(user) is None:
            return ActionResult.unauthorized()

        result = await self._call("get", self._repo.get_by_id, booking_id)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        booking = result.value
        if booking is None:
            return ActionResult.not_found("Booking")
        if not can_access_resource(user, booking.user_id):
            return ActionResult.forbidden()
        return ActionResult.success(booking)

    async def create(
        self,
        user: Profile | None,
        service_id: UUID,
        booking_date: date,
        booking_time: time,
    ) -> ActionResult[Booking]:
        if require_auth(user) is None:
            return ActionResult.unauthorized()

        service = await self._call("getService", self._services.get_by_id, service_id)
        if not service.ok:
            return ActionResult.failure(service.user_message)
        if service.value is None:
            return ActionResult.not_found("Service")

        booking = Booking(
            user_id=user.id,
            service_id=service_id,
            booking_date=booking_date,
            booking_time=booking_time,
            status="pending",
        )
        result = await self._call("create", self._repo.create, booking)
        if not result.ok:
            return ActionResult.failure(result.user_message)

        created = result.value.model_copy(update={"service": service.value})
        date_text = booking_date.isoformat()
        time_text = _fmt_time(booking_time)

        if self._email is not None:
            await self._email.send_booking_confirmation(
                to=user.email,
                customer_name=user.display_name,
                service_name=service.value.name,
                booking_date=date_text,
                booking_time=time_text,
                booking_id=str(created.id),
            )
        if self._notifier is not None:
            await self._call(
                "notify",
                lambda: self._notifier.notify_booking_confirmed(
                    user.id,
                    service.value.name,
                    date_text,
                    time_text,
                    booking_id=str(created.id),
                ),
            )

        self._revalidate()
        return ActionResult.success(created, "Booking created successfully")

    async def update_status(
        self, user: Profile | None, booking_id: UUID, status: BookingStatus
    ) -> ActionResult[Booking]:
        if require_admin(user) is None:
            return ActionResult.admin_required()

        result = await self._call("updateStatus", self._repo.update_status, booking_id, status)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        if result.value is None:
            return ActionResult.not_found("Booking")

        await self._notify_status(result.value)
        self._revalidate()
        return ActionResult.success(result.value, f"Booking {status}")

    async def cancel(self, user: Profile | None, booking_id: UUID) -> ActionResult[Booking]:
        existing = await self.get(user, booking_id)
        if not existing.ok:
            return existing

        result = await self._call("updateStatus", self._repo.update_status, booking_id, "canceled")
        if not result.ok:
            return ActionResult.failure(result.user_message)
        if result.value is None:
            return ActionResult.not_found("Booking")

        await self._notify_status(result.value)
        self._revalidate()
        return ActionResult.success(result.value, "Booking canceled")

    async def delete(self, user: Profile | None, booking_id: UUID) -> ActionResult[None]:
        if require_admin(user) is None:
            return ActionResult.admin_required()

        result = await self._call("delete", self._repo.delete, booking_id)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        if not result.value:
            return ActionResult.not_found("Booking")

        self._revalidate()
        return ActionResult.success(None, "Booking deleted")

    async def _notify_status(self, booking: Booking) -> None:
        if self._notifier is None or booking.status not in ("confirmed", "canceled"):
            return

        service_name = booking.service.name if booking.service else "your appointment"
        date_text = booking.booking_date.isoformat()
        time_text = _fmt_time(booking.booking_time)
        notify = (
            self._notifier.notify_booking_confirmed
            if booking.status == "confirmed"
            else self._notifier.notify_booking_cancelled
        )
        result = await self._call(
            "notify",
            lambda: notify(
                booking.user_id, service_name, date_text, time_text, booking_id=str(booking.id)
            ),
        )
        if not result.ok:
            logger.warning("Status notification for booking %s not created", booking.id)
