"""
Router factory for catalog and site-content resources.

Every resource gets the same five routes: public list/get and admin
create/update/delete (gated in the action layer).
"""

from collections.abc import Callable
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ValidationError

from src.api.deps import get_current_user
from src.api.results import unwrap
from src.api.schemas import MessageResponse
from src.domain.entities import Profile
from src.services.base import CrudActions, validation_message

CurrentUser = Annotated[Profile | None, Depends(get_current_user)]


def crud_router(
    get_actions: Callable[..., CrudActions[Any]],
    create_model: type[BaseModel],
    update_model: type[BaseModel],
    item_model: type[BaseModel],
) -> APIRouter:
    router = APIRouter()
    Actions = Annotated[CrudActions[Any], Depends(get_actions)]

    @router.get("", response_model=list[item_model])  # type: ignore[valid-type]
    async def list_items(actions: Actions) -> Any:
        return unwrap(await actions.list())

    @router.get("/{item_id}", response_model=item_model)
    async def get_item(item_id: UUID, actions: Actions) -> Any:
        return unwrap(await actions.get(item_id))

    @router.post("", response_model=item_model, status_code=status.HTTP_201_CREATED)
    async def create_item(
        body: create_model,  # type: ignore[valid-type]
        actions: Actions,
        user: CurrentUser,
    ) -> Any:
        try:
            item = item_model.model_validate(body.model_dump())
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=validation_message(e)) from e
        return unwrap(await actions.create(user, item))

    @router.patch("/{item_id}", response_model=item_model)
    async def update_item(
        item_id: UUID,
        body: update_model,  # type: ignore[valid-type]
        actions: Actions,
        user: CurrentUser,
    ) -> Any:
        changes = body.model_dump(exclude_unset=True)
        return unwrap(await actions.update(user, item_id, changes))

    @router.delete("/{item_id}", response_model=MessageResponse)
    async def delete_item(item_id: UUID, actions: Actions, user: CurrentUser) -> Any:
        result = await actions.delete(user, item_id)
        unwrap(result)
        return MessageResponse(message=result.message)

    return router
