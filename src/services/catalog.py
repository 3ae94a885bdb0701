"""
Catalog actions: products and bookable services.

Anyone can browse; only admins change the catalog.
"""

from __future__ import annotations

from typing import ClassVar, get_args

from src.domain.entities import Product, ProductCategory, Service
from src.services.base import ActionResult, CrudActions

PRODUCT_CATEGORIES: tuple[str, ...] = get_args(ProductCategory)


class ProductActions(CrudActions[Product]):
    area: ClassVar[str] = "products"
    paths: ClassVar[tuple[str, ...]] = ("/products", "/admin/products")
    entity: ClassVar[str] = "Product"
    model = Product

    async def by_category(self, category: str) -> ActionResult[list[Product]]:
        """Public listing of one category, newest first."""
        if category not in PRODUCT_CATEGORIES:
            expected = ", ".join(PRODUCT_CATEGORIES)
            return ActionResult.invalid(
                f"Unknown product category {category!r}; expected one of {expected}"
            )

        result = await self._call("listByCategory", self._repo.list_by_category, category)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        return ActionResult.success(result.value)


class ServiceActions(CrudActions[Service]):
    area: ClassVar[str] = "services"
    paths: ClassVar[tuple[str, ...]] = ("/services", "/admin/services")
    entity: ClassVar[str] = "Service"
    model = Service
