from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends

from src.api.deps import get_current_user, get_notification_actions
from src.api.results import unwrap
from src.api.schemas import CountResponse, MessageResponse, PreferencesUpdate
from src.domain.entities import Notification, NotificationPreferences, Profile
from src.services.notifications import NotificationActions

router = APIRouter()

Actions = Annotated[NotificationActions, Depends(get_notification_actions)]
CurrentUser = Annotated[Profile | None, Depends(get_current_user)]


@router.get("", response_model=list[Notification])
async def list_notifications(actions: Actions, user: CurrentUser) -> Any:
    return unwrap(await actions.list_mine(user))


@router.get("/unread", response_model=list[Notification])
async def list_unread(actions: Actions, user: CurrentUser) -> Any:
    return unwrap(await actions.list_unread(user))


@router.post("/read-all", response_model=CountResponse)
async def mark_all_read(actions: Actions, user: CurrentUser) -> Any:
    result = await actions.mark_all_read(user)
    return CountResponse(count=unwrap(result), message=result.message)


@router.get("/preferences", response_model=NotificationPreferences)
async def get_preferences(actions: Actions, user: CurrentUser) -> Any:
    return unwrap(await actions.get_preferences(user))


@router.put("/preferences", response_model=NotificationPreferences)
async def update_preferences(body: PreferencesUpdate, actions: Actions, user: CurrentUser) -> Any:
    return unwrap(await actions.update_preferences(user, body.model_dump(exclude_none=True)))


@router.get("/{notification_id}", response_model=Notification)
async def get_notification(notification_id: UUID, actions: Actions, user: CurrentUser) -> Any:
    return unwrap(await actions.get(user, notification_id))


@router.post("/{notification_id}/read", response_model=Notification)
async def mark_read(notification_id: UUID, actions: Actions, user: CurrentUser) -> Any:
    return unwrap(await actions.mark_read(user, notification_id))


@router.post("/{notification_id}/archive", response_model=Notification)
async def archive(notification_id: UUID, actions: Actions, user: CurrentUser) -> Any:
    return unwrap(await actions.archive(user, notification_id))


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(notification_id: UUID, actions: Actions, user: CurrentUser) -> Any:
    result = await actions.delete(user, notification_id)
    unwrap(result)
    return MessageResponse(message=result.message)
