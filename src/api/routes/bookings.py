"""
Booking API routes.

Customers book and cancel their own appointments; admins manage all of
them. Role checks happen in BookingActions.
"""

from datetime import date
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from src.api.deps import get_booking_actions, get_current_user
from src.api.results import unwrap
from src.api.schemas import BookingCreate, BookingStatusUpdate, MessageResponse
from src.domain.entities import Booking, Profile
from src.services.bookings import BookingActions

router = APIRouter()

Actions = Annotated[BookingActions, Depends(get_booking_actions)]
CurrentUser = Annotated[Profile | None, Depends(get_current_user)]


@router.get("", response_model=list[Booking])
async def list_bookings(
    actions: Actions,
    user: CurrentUser,
    start: Annotated[date | None, Query()] = None,
    end: Annotated[date | None, Query()] = None,
) -> Any:
    """All bookings (admin). `start`/`end` narrow to a date range."""
    if start is not None or end is not None:
        return unwrap(
            await actions.list_by_date_range(user, start or date.min, end or date.max)
        )
    return unwrap(await actions.list_all(user))


@router.get("/mine", response_model=list[Booking])
async def list_my_bookings(actions: Actions, user: CurrentUser) -> Any:
    return unwrap(await actions.list_mine(user))


@router.get("/{booking_id}", response_model=Booking)
async def get_booking(booking_id: UUID, actions: Actions, user: CurrentUser) -> Any:
    return unwrap(await actions.get(user, booking_id))


@router.post("", response_model=Booking, status_code=status.HTTP_201_CREATED)
async def create_booking(body: BookingCreate, actions: Actions, user: CurrentUser) -> Any:
    return unwrap(
        await actions.create(user, body.service_id, body.booking_date, body.booking_time)
    )


@router.patch("/{booking_id}/status", response_model=Booking)
async def update_booking_status(
    booking_id: UUID, body: BookingStatusUpdate, actions: Actions, user: CurrentUser
) -> Any:
    return unwrap(await actions.update_status(user, booking_id, body.status))


@router.post("/{booking_id}/cancel", response_model=Booking)
async def cancel_booking(booking_id: UUID, actions: Actions, user: CurrentUser) -> Any:
    return unwrap(await actions.cancel(user, booking_id))


@router.delete("/{booking_id}", response_model=MessageResponse)
async def delete_booking(booking_id: UUID, actions: Actions, user: CurrentUser) -> Any:
    result = await actions.delete(user, booking_id)
    unwrap(result)
    return MessageResponse(message=result.message)
