"""
Order actions.

Key behaviors:
- Unit prices come from the catalog and the total is the sum of the lines
- A new order triggers a confirmation email and an in-app notification
- Payment status changes to paid/failed notify the customer
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar
from uuid import UUID

from src.components.notifications import Notifier
from src.components.safe_exec import RetryPolicyRegistry, SafeExecutor
from src.core.ports.cache import PathInvalidatorPort
from src.core.ports.db import OrderRepoPort, ProductRepoPort
from src.domain.entities import Order, OrderItem, PaymentStatus, Product, Profile
from src.domain.policy import can_access_resource, require_admin, require_auth
from src.services.base import ActionResult, ActionService
from src.services.email import EmailService
from src.services.email_templates import OrderLine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderLineRequest:
    product_id: UUID
    quantity: int


class OrderActions(ActionService):
    area: ClassVar[str] = "orders"
    paths: ClassVar[tuple[str, ...]] = ("/orders", "/admin/orders")

    def __init__(
        self,
        repo: OrderRepoPort,
        products: ProductRepoPort,
        executor: SafeExecutor,
        policies: RetryPolicyRegistry,
        invalidator: PathInvalidatorPort,
        email: EmailService | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        super().__init__(executor, policies, invalidator)
        self._repo = repo
        self._products = products
        self._email = email
        self._notifier = notifier

    async def list_all(self, user: Profile | None) -> ActionResult[list[Order]]:
        if require_admin(user) is None:
            return ActionResult.admin_required()

        result = await self._call("list", self._repo.list_all)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        return ActionResult.success(result.value)

    async def list_mine(self, user: Profile | None) -> ActionResult[list[Order]]:
        if require_auth(user) is None:
            return ActionResult.unauthorized()

        result = await self._call("listByUser", self._repo.list_by_user, user.id)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        return ActionResult.success(result.value)

    async def get(self, user: Profile | None, order_id: UUID) -> ActionResult[Order]:
        return await self._get_owned(user, order_id, self._repo.get_by_id)

    async def get_with_items(self, user: Profile | None, order_id: UUID) -> ActionResult[Order]:
        return await self._get_owned(user, order_id, self._repo.get_with_items)

    async def _get_owned(
        self,
        user: Profile | None,
        order_id: UUID,
        fetch: Callable[[UUID], Order | None],
    ) -> ActionResult[Order]:
        if require_auth(user) is None:
            return ActionResult.unauthorized()

        result = await self._call("get", fetch, order_id)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        order = result.value
        if order is None:
            return ActionResult.not_found("Order")
        if not can_access_resource(user, order.user_id):
            return ActionResult.forbidden()
        return ActionResult.success(order)

    async def create(
        self, user: Profile | None, lines: Sequence[OrderLineRequest]
    ) -> ActionResult[Order]:
        if require_auth(user) is None:
            return ActionResult.unauthorized()
        if not lines:
            return ActionResult.invalid("An order needs at least one item")
        if any(line.quantity <= 0 for line in lines):
            return ActionResult.invalid("Item quantities must be positive")

        products: list[Product] = []
        for line in lines:
            found = await self._call("getProduct", self._products.get_by_id, line.product_id)
            if not found.ok:
                return ActionResult.failure(found.user_message)
            if found.value is None:
                return ActionResult.not_found("Product")
            products.append(found.value)

        total = sum(
            (product.price * line.quantity for product, line in zip(products, lines)),
            Decimal("0"),
        )
        order = Order(user_id=user.id, total_amount=total, payment_status="pending")

        created = await self._call("create", self._repo.create, order)
        if not created.ok:
            return ActionResult.failure(created.user_message)

        items: list[OrderItem] = []
        for product, line in zip(products, lines):
            item = OrderItem(
                order_id=order.id,
                product_id=product.id,
                quantity=line.quantity,
                unit_price=product.price,
            )
            added = await self._call("addItem", self._repo.add_item, item)
            if not added.ok:
                return ActionResult.failure(added.user_message)
            items.append(added.value)

        placed = created.value.model_copy(update={"items": items})
        await self._announce(user, placed, products)

        self._revalidate()
        return ActionResult.success(placed, "Order created successfully")

    async def _announce(self, user: Profile, order: Order, products: Sequence[Product]) -> None:
        if self._email is not None:
            email = self._email
            lines = [
                OrderLine(
                    name=product.name,
                    quantity=item.quantity,
                    price=email.price(item.unit_price * item.quantity),
                )
                for product, item in zip(products, order.items)
            ]
            await email.send_order_confirmation(
                to=user.email,
                customer_name=user.display_name,
                order_number=order.order_number,
                order_date=order.created_at.date().isoformat(),
                items=lines,
                subtotal=email.price(order.total_amount),
                total=email.price(order.total_amount),
            )
        if self._notifier is not None:
            notified = await self._call(
                "notify",
                lambda: self._notifier.notify_order_confirmed(
                    user.id, order.order_number, order_id=str(order.id)
                ),
            )
            if not notified.ok:
                logger.warning("Confirmation notification for order %s not created", order.id)

    async def update_status(
        self, user: Profile | None, order_id: UUID, status: PaymentStatus
    ) -> ActionResult[Order]:
        if require_admin(user) is None:
            return ActionResult.admin_required()

        result = await self._call(
            "updateStatus", self._repo.update_payment_status, order_id, status
        )
        if not result.ok:
            return ActionResult.failure(result.user_message)
        order = result.value
        if order is None:
            return ActionResult.not_found("Order")

        if self._notifier is not None and status in ("paid", "failed"):
            notify = (
                self._notifier.notify_payment_success
                if status == "paid"
                else self._notifier.notify_payment_failed
            )
            amount = f"{order.total_amount:.2f}"
            notified = await self._call(
                "notify",
                lambda: notify(order.user_id, amount, order_number=order.order_number),
            )
            if not notified.ok:
                logger.warning("Payment notification for order %s not created", order.id)

        self._revalidate()
        return ActionResult.success(order, f"Order status updated to {status}")
