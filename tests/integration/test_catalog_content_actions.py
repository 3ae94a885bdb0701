"""
Catalog and site-content actions: public reads, admin-only writes.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

import pytest

from src.adapters.sqlite.repos import (
    SQLiteGalleryRepo,
    SQLiteHomepageRepo,
    SQLiteProductRepo,
    SQLiteServiceRepo,
    SQLiteTestimonialRepo,
)
from src.domain.entities import GalleryItem, HomepageContent, Product, Service, Testimonial
from src.services.catalog import ProductActions, ServiceActions
from src.services.content import GalleryActions, HomepageActions, TestimonialActions


class BrokenRepo:
    """Repository whose every call fails, like a lost database connection."""

    def _fail(self, *args):
        raise ConnectionError("database unreachable")

    list_all = get_by_id = create = update = delete = list_by_section = list_by_category = _fail


@pytest.fixture
def products(db_path, executor, policies, invalidator):
    return ProductActions(SQLiteProductRepo(db_path), executor, policies, invalidator)


@pytest.fixture
def services(db_path, executor, policies, invalidator):
    return ServiceActions(SQLiteServiceRepo(db_path), executor, policies, invalidator)


@pytest.fixture
def testimonials(db_path, executor, policies, invalidator):
    return TestimonialActions(SQLiteTestimonialRepo(db_path), executor, policies, invalidator)


@pytest.fixture
def gallery(db_path, executor, policies, invalidator):
    return GalleryActions(SQLiteGalleryRepo(db_path), executor, policies, invalidator)


@pytest.fixture
def homepage(db_path, executor, policies, invalidator):
    return HomepageActions(SQLiteHomepageRepo(db_path), executor, policies, invalidator)


def a_product(**overrides):
    fields = {"name": "Velvet Heels", "price": Decimal("15000"), "category": "shoes"}
    fields.update(overrides)
    return Product(**fields)


class TestProducts:
    def test_admin_creates_and_anyone_reads(self, products, admin, invalidator):
        created = asyncio.run(products.create(admin, a_product(stock=3)))

        assert created.ok
        assert created.message == "Product created successfully"
        assert invalidator.stale_paths == ["/products", "/admin/products"]

        listed = asyncio.run(products.list())
        assert [p.name for p in listed.data] == ["Velvet Heels"]
        fetched = asyncio.run(products.get(created.data.id))
        assert fetched.data.stock == 3
        assert fetched.data.price == Decimal("15000")

    def test_customer_cannot_write(self, products, customer, invalidator):
        result = asyncio.run(products.create(customer, a_product()))

        assert not result.ok
        assert result.code == "unauthorized"
        assert result.error == "Unauthorized: Admin access required"
        assert invalidator.stale_paths == []

    def test_anonymous_cannot_write(self, products):
        assert asyncio.run(products.create(None, a_product())).code == "unauthorized"

    def test_update(self, products, admin):
        product = asyncio.run(products.create(admin, a_product())).data

        result = asyncio.run(products.update(admin, product.id, {"stock": 9}))

        assert result.ok
        assert result.message == "Product updated successfully"
        assert result.data.stock == 9
        assert result.data.name == "Velvet Heels"

    def test_update_rejects_invalid_changes(self, products, admin):
        product = asyncio.run(products.create(admin, a_product())).data

        result = asyncio.run(products.update(admin, product.id, {"category": "hats"}))

        assert result.code == "invalid"
        assert "category" in result.error
        assert asyncio.run(products.get(product.id)).data.category == "shoes"

    def test_delete(self, products, admin):
        product = asyncio.run(products.create(admin, a_product())).data

        result = asyncio.run(products.delete(admin, product.id))

        assert result.ok
        assert result.message == "Product deleted"
        assert asyncio.run(products.get(product.id)).code == "not_found"

    def test_missing_product(self, products, admin):
        missing = uuid4()
        assert asyncio.run(products.get(missing)).error == "Product not found"
        assert asyncio.run(products.update(admin, missing, {"stock": 1})).code == "not_found"
        assert asyncio.run(products.delete(admin, missing)).code == "not_found"

    def test_by_category_lists_newest_first(self, products, admin):
        older = a_product(
            name="Silk Scarf", category="accessories", created_at=datetime(2026, 1, 1, tzinfo=UTC)
        )
        newer = a_product(
            name="Pearl Clutch", category="accessories", created_at=datetime(2026, 2, 1, tzinfo=UTC)
        )
        for product in (older, newer, a_product(name="Ankle Boots")):
            asyncio.run(products.create(admin, product))

        result = asyncio.run(products.by_category("accessories"))

        assert result.ok
        assert [p.name for p in result.data] == ["Pearl Clutch", "Silk Scarf"]

    def test_by_category_empty(self, products):
        result = asyncio.run(products.by_category("clothes"))

        assert result.ok
        assert result.data == []

    def test_unknown_category(self, products):
        result = asyncio.run(products.by_category("hats"))

        assert result.code == "invalid"
        assert "shoes, clothes, accessories" in result.error


class TestServices:
    def test_round_trip(self, services, admin):
        created = asyncio.run(
            services.create(admin, Service(name="Glow Facial", price=Decimal("25000"), duration=60))
        )

        assert created.message == "Service created successfully"
        assert asyncio.run(services.get(created.data.id)).data.duration == 60


class TestTestimonials:
    def test_rating_above_five_is_invalid(self, testimonials, admin):
        testimonial = asyncio.run(
            testimonials.create(admin, Testimonial(author="Ada", text="Lovely", rating=5))
        ).data

        result = asyncio.run(testimonials.update(admin, testimonial.id, {"rating": 6}))

        assert result.code == "invalid"
        assert asyncio.run(testimonials.get(testimonial.id)).data.rating == 5


class TestGallery:
    def test_paths(self, gallery, admin, invalidator):
        asyncio.run(gallery.create(admin, GalleryItem(image_url="/img/1.jpg", title="Bridal")))

        assert invalidator.stale_paths == ["/gallery", "/admin/gallery"]


class TestHomepage:
    def test_by_section(self, homepage, admin):
        asyncio.run(homepage.create(admin, HomepageContent(section="hero", title="Welcome")))
        asyncio.run(homepage.create(admin, HomepageContent(section="banner", title="Sale")))

        result = asyncio.run(homepage.by_section("hero"))

        assert result.ok
        assert [c.title for c in result.data] == ["Welcome"]

    def test_unknown_section(self, homepage):
        result = asyncio.run(homepage.by_section("footer"))

        assert result.code == "invalid"
        assert "hero, banner, newsletter" in result.error

    def test_revalidates_root(self, homepage, admin, invalidator):
        asyncio.run(homepage.create(admin, HomepageContent(section="hero", title="Welcome")))

        assert invalidator.consume() == ["/", "/admin/homepage"]
        assert invalidator.stale_paths == []


class TestRepositoryFailure:
    @pytest.fixture
    def broken(self, executor, policies, invalidator):
        return ProductActions(BrokenRepo(), executor, policies, invalidator)

    def test_read_failure_is_generic(self, broken, recording_log):
        result = asyncio.run(broken.list())

        assert not result.ok
        assert result.code == "failed"
        assert result.error == "Something went wrong. Please try again."
        [logged] = recording_log.at("error")
        assert logged.service == "products-list"
        assert "database unreachable" in logged.message

    def test_write_failure_skips_revalidation(self, broken, admin, invalidator):
        result = asyncio.run(broken.create(admin, a_product()))

        assert result.code == "failed"
        assert invalidator.stale_paths == []

    def test_category_failure_is_logged_under_its_label(self, broken, recording_log):
        result = asyncio.run(broken.by_category("shoes"))

        assert result.code == "failed"
        [logged] = recording_log.at("error")
        assert logged.service == "products-listByCategory"
