from typing import Annotated, Any

from fastapi import Depends

from src.api.deps import get_gallery_actions, get_homepage_actions, get_testimonial_actions
from src.api.results import unwrap
from src.api.routes.crud import crud_router
from src.api.schemas import (
    GalleryItemCreate,
    GalleryItemUpdate,
    HomepageContentCreate,
    HomepageContentUpdate,
    TestimonialCreate,
    TestimonialUpdate,
)
from src.domain.entities import GalleryItem, HomepageContent, Testimonial
from src.services.content import HomepageActions

gallery_router = crud_router(get_gallery_actions, GalleryItemCreate, GalleryItemUpdate, GalleryItem)
testimonials_router = crud_router(
    get_testimonial_actions, TestimonialCreate, TestimonialUpdate, Testimonial
)
homepage_router = crud_router(
    get_homepage_actions, HomepageContentCreate, HomepageContentUpdate, HomepageContent
)


@homepage_router.get("/sections/{section}", response_model=list[HomepageContent])
async def list_section(
    section: str,
    actions: Annotated[HomepageActions, Depends(get_homepage_actions)],
) -> Any:
    return unwrap(await actions.by_section(section))
