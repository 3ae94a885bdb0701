"""
Site content actions: gallery, testimonials and homepage sections.

Anyone can read; only admins write. Testimonial ratings are 1..5 and
homepage sections are limited to hero, banner and newsletter (both
enforced by the entity models).
"""

from __future__ import annotations

from typing import ClassVar, get_args

from src.domain.entities import GalleryItem, HomepageContent, HomepageSection, Testimonial
from src.services.base import ActionResult, CrudActions

HOMEPAGE_SECTIONS: tuple[str, ...] = get_args(HomepageSection)


class GalleryActions(CrudActions[GalleryItem]):
    area: ClassVar[str] = "gallery"
    paths: ClassVar[tuple[str, ...]] = ("/gallery", "/admin/gallery")
    entity: ClassVar[str] = "Gallery item"
    model = GalleryItem


class TestimonialActions(CrudActions[Testimonial]):
    area: ClassVar[str] = "testimonials"
    paths: ClassVar[tuple[str, ...]] = ("/testimonials", "/admin/testimonials")
    entity: ClassVar[str] = "Testimonial"
    model = Testimonial


class HomepageActions(CrudActions[HomepageContent]):
    area: ClassVar[str] = "homepage"
    paths: ClassVar[tuple[str, ...]] = ("/", "/admin/homepage")
    entity: ClassVar[str] = "Homepage content"
    model = HomepageContent

    async def by_section(self, section: str) -> ActionResult[list[HomepageContent]]:
        if section not in HOMEPAGE_SECTIONS:
            expected = ", ".join(HOMEPAGE_SECTIONS)
            return ActionResult.invalid(
                f"Unknown homepage section {section!r}; expected one of {expected}"
            )

        result = await self._call("listBySection", self._repo.list_by_section, section)
        if not result.ok:
            return ActionResult.failure(result.user_message)
        return ActionResult.success(result.value)
