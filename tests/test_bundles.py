from decimal import Decimal

import pytest
from pydantic import ValidationError

from fakes import FailingRedis
from shopreco.domain.models.bundle import Bundle, BundleProduct
from shopreco.domain.models.product import Product
from shopreco.domain.repositories.bundle_repo import BundleRepo
from shopreco.domain.services.bundle_svc import BundleService, price_bundle, round_half_up
from shopreco.utils.cache import CacheAside


def product(pid, price, category="other"):
    return Product(product_id=pid, name=pid.title(), slug=pid, price=price, category=category)


@pytest.fixture()
def service(db, products, cache):
    return BundleService(products, BundleRepo(db), cache, ttl=1800)


def assert_price_invariant(bundle, discount=Decimal("0.10")):
    total = Decimal(str(bundle.main_product.price)) + sum(
        (Decimal(str(p.price)) for p in bundle.related_products), Decimal("0")
    )
    assert bundle.individual_total == float(total)
    assert bundle.bundle_price == round_half_up(total * (1 - discount))
    assert bundle.savings == bundle.individual_total - bundle.bundle_price


def test_round_half_up():
    assert round_half_up(Decimal("40.5")) == 41.0
    assert round_half_up(Decimal("40.49")) == 40.0
    assert round_half_up(Decimal("41.5")) == 42.0


@pytest.mark.parametrize("prices", [
    [45.0],
    [45.0, 0.0],
    [19.99, 5.01, 0.5],
    [999.0, 120.0, 35.0],
    [0.1, 0.2],
])
def test_price_bundle_invariant(prices):
    main, *rest = [product(f"p{i}", price) for i, price in enumerate(prices)]
    bundle = price_bundle(bundle_id="b", name="B", main=main, related=rest)
    assert_price_invariant(bundle)
    assert bundle.savings_percentage == 10


def test_half_is_rounded_up():
    bundle = price_bundle(bundle_id="b", name="B", main=product("a", 45.0), related=[])
    assert bundle.bundle_price == 41.0  # 40.5 rounds up
    assert bundle.savings == 4.0


@pytest.mark.asyncio
async def test_synthesized_around_anchor(service, redis):
    bundles = await service.get_bundles(product_id="iphone13", limit=3)

    assert len(bundles) == 1
    bundle = bundles[0]
    assert bundle.bundle_id == "bundle-iphone13"
    assert bundle.is_synthetic
    assert bundle.name == "iPhone 13 Pro Bundle"
    assert bundle.main_product.product_id == "iphone13"
    # only different-category, in-stock, published products within 0.5x..1.5x of 999
    assert bundle.related_products == []
    assert_price_invariant(bundle)
    assert "products:bundles:iphone13::3" in redis.store


@pytest.mark.asyncio
async def test_related_products_are_complementary(service):
    bundles = await service.get_bundles(product_id="novel", limit=3)
    bundle = bundles[0]
    related = [p.product_id for p in bundle.related_products]
    # novel costs 18: band is 9..27, other categories, published and in stock, by rating
    assert related == ["lipstick", "rattle"]
    assert all(p.category != "books" for p in bundle.related_products)
    assert_price_invariant(bundle)


@pytest.mark.asyncio
async def test_synthesized_for_category(service):
    bundles = await service.get_bundles(category="toys", limit=2)
    bundle = bundles[0]
    assert bundle.main_product.product_id == "blocks"
    assert [p.product_id for p in bundle.related_products] == ["lipstick", "novel"]


@pytest.mark.asyncio
async def test_synthesized_from_featured(service):
    bundles = await service.get_bundles(limit=3)
    bundle = bundles[0]
    assert bundle.main_product.product_id == "headphones"
    assert [p.product_id for p in bundle.related_products] == ["novel"]
    assert_price_invariant(bundle)


@pytest.mark.asyncio
async def test_unknown_anchor_gives_no_bundle(service):
    assert await service.get_bundles(product_id="nope") == []


@pytest.mark.asyncio
async def test_curated_bundle_wins(db, service):
    curated = price_bundle(
        bundle_id="curated-1", name="Phone kit",
        main=product("iphone13", 999.0, "electronics"), related=[product("headphones", 120.0, "electronics")],
    )
    db["bundles"].docs.append(curated.model_dump())

    bundles = await service.get_bundles(product_id="iphone13")

    assert [b.bundle_id for b in bundles] == ["curated-1"]
    assert not bundles[0].is_synthetic


@pytest.mark.asyncio
async def test_create_bundle_persists_and_invalidates(db, redis, service):
    await service.get_bundles(product_id="novel")
    assert any(k.startswith("products:bundles:") for k in redis.store)

    bundle = await service.create_bundle(
        name="Reading night", main_product_id="novel", related_product_ids=["lipstick", "rattle"],
        discount_percentage=15,
    )

    assert bundle.savings_percentage == 15
    assert bundle.created_at is not None
    assert_price_invariant(bundle, discount=Decimal("0.15"))
    assert not any(k.startswith("products:bundles:") for k in redis.store)
    assert db["bundles"].inserted[0]["bundle_id"] == bundle.bundle_id

    bundles = await service.get_bundles(product_id="novel")
    assert [b.bundle_id for b in bundles] == [bundle.bundle_id]


@pytest.mark.asyncio
async def test_create_bundle_rejects_unknown_products(service):
    with pytest.raises(LookupError):
        await service.create_bundle(name="x", main_product_id="nope", related_product_ids=["novel"])
    with pytest.raises(LookupError):
        await service.create_bundle(name="x", main_product_id="novel", related_product_ids=["nope"])


def test_snapshot_keeps_display_fields():
    snap = BundleProduct.snapshot(product("lamp", 30.0, "furniture"))
    assert snap.model_dump() == {
        "product_id": "lamp", "name": "Lamp", "price": 30.0, "category": "furniture", "images": [],
    }


@pytest.mark.asyncio
async def test_bundles_served_uncached_when_redis_is_down(db, products):
    service = BundleService(products, BundleRepo(db), CacheAside(FailingRedis()))
    bundles = await service.get_bundles(product_id="novel")
    assert isinstance(bundles[0], Bundle)


def test_products_are_immutable():
    item = product("lamp", 30.0, "furniture")
    with pytest.raises(ValidationError):
        item.price = 1.0
