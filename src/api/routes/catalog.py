from typing import Annotated, Any

from fastapi import Depends

from src.api.deps import get_product_actions, get_service_actions
from src.api.results import unwrap
from src.api.routes.crud import crud_router
from src.api.schemas import ProductCreate, ProductUpdate, ServiceCreate, ServiceUpdate
from src.domain.entities import Product, Service
from src.services.catalog import ProductActions

products_router = crud_router(get_product_actions, ProductCreate, ProductUpdate, Product)
services_router = crud_router(get_service_actions, ServiceCreate, ServiceUpdate, Service)


@products_router.get("/category/{category}", response_model=list[Product])
async def list_category(
    category: str,
    actions: Annotated[ProductActions, Depends(get_product_actions)],
) -> Any:
    return unwrap(await actions.by_category(category))
