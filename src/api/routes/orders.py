"""
Order API routes.

Prices and totals are taken from the catalog; clients send only product
ids and quantities.
"""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from src.api.deps import get_current_user, get_order_actions
from src.api.results import unwrap
from src.api.schemas import OrderCreate, OrderStatusUpdate
from src.domain.entities import Order, Profile
from src.services.orders import OrderActions, OrderLineRequest

router = APIRouter()

Actions = Annotated[OrderActions, Depends(get_order_actions)]
CurrentUser = Annotated[Profile | None, Depends(get_current_user)]


@router.get("", response_model=list[Order])
async def list_orders(actions: Actions, user: CurrentUser) -> Any:
    return unwrap(await actions.list_all(user))


@router.get("/mine", response_model=list[Order])
async def list_my_orders(actions: Actions, user: CurrentUser) -> Any:
    return unwrap(await actions.list_mine(user))


@router.get("/{order_id}", response_model=Order)
async def get_order(
    order_id: UUID,
    actions: Actions,
    user: CurrentUser,
    items: Annotated[bool, Query()] = False,
) -> Any:
    if items:
        return unwrap(await actions.get_with_items(user, order_id))
    return unwrap(await actions.get(user, order_id))


@router.post("", response_model=Order, status_code=status.HTTP_201_CREATED)
async def create_order(body: OrderCreate, actions: Actions, user: CurrentUser) -> Any:
    lines = [OrderLineRequest(item.product_id, item.quantity) for item in body.items]
    return unwrap(await actions.create(user, lines))


@router.patch("/{order_id}/status", response_model=Order)
async def update_order_status(
    order_id: UUID, body: OrderStatusUpdate, actions: Actions, user: CurrentUser
) -> Any:
    return unwrap(await actions.update_status(user, order_id, body.status))
