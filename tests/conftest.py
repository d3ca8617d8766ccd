from datetime import datetime, timedelta, timezone

import pytest

from fakes import FakeDatabase, FakeRedis, order_doc, product_doc
from shopreco.core.config import Settings
from shopreco.domain.repositories.order_repo import OrderRepo
from shopreco.domain.repositories.product_repo import ProductRepo
from shopreco.utils.cache import CacheAside

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def catalog():
    return [
        product_doc(
            "iphone13", name="iPhone 13 Pro", brand="Apple", category="electronics", price=999.0, rating=4.8,
            review_count=120, description="Apple smartphone with a pro camera system",
            specifications={"Display": "6.1 inch", "Storage": "128GB", "Chip": "A15"},
            tags=["phone", "premium"],
        ),
        product_doc(
            "galaxy21", name="Samsung Galaxy S21", brand="Samsung", category="electronics", price=799.0, rating=4.6,
            review_count=90, description="Android smartphone",
            specifications={"Display": "6.2 inch", "Storage": "128GB", "Battery": "4000mAh"},
            tags=["phone"],
        ),
        product_doc(
            "headphones", name="Wireless Headphones", brand="Sony", category="electronics", price=120.0, rating=4.4,
            review_count=60, description="Noise cancelling wireless headphones", tags=["audio", "gift"],
            is_featured=True,
        ),
        product_doc(
            "blocks", name="Building Blocks Set", category="toys", price=35.0, rating=4.7, review_count=40,
            description="Colorful building blocks for creative play", tags=["kids", "gift", "birthday"],
        ),
        product_doc(
            "rattle", name="Baby Rattle", category="toys", price=12.0, rating=4.2, review_count=5,
            tags=["baby", "toddler"],
        ),
        product_doc(
            "novel", name="Mystery Novel", category="books", price=18.0, rating=4.1, review_count=25,
            description="A page turning mystery", is_featured=True, tags=["gift"],
        ),
        product_doc(
            "lipstick", name="Velvet Lipstick", category="beauty", price=25.0, rating=4.5, review_count=0,
            tags=["gift", "valentine"],
        ),
        product_doc(
            "hidden", name="Unreleased Gadget", category="electronics", price=20.0, rating=5.0,
            is_published=False, review_count=500,
        ),
        product_doc(
            "soldout", name="Sold Out Sneakers", category="sports", price=90.0, rating=4.9, stock=0,
            review_count=300,
        ),
    ]


def orders():
    return [
        order_doc("o1", "alice", [("iphone13", 1), ("headphones", 2)], NOW - timedelta(days=2)),
        order_doc("o2", "bob", [("iphone13", 1), ("headphones", 1), ("novel", 1)], NOW - timedelta(days=3)),
        order_doc("o3", "bob", [("blocks", 3)], NOW - timedelta(days=20)),
        order_doc("o4", "carol", [("novel", 1)], NOW - timedelta(days=40)),
    ]


@pytest.fixture()
def db():
    return FakeDatabase(products=catalog(), orders=orders(), bundles=[], chat_queries=[])


@pytest.fixture()
def redis():
    return FakeRedis()


@pytest.fixture()
def cache(redis):
    return CacheAside(redis)


@pytest.fixture()
def products(db):
    return ProductRepo(db)


@pytest.fixture()
def order_repo(db):
    return OrderRepo(db)


@pytest.fixture()
def settings():
    return Settings(_env_file=None, ADMIN_API_KEY="secret", OPENAI_API_KEY="")
