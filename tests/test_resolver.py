import pytest

from fakes import FakeDatabase, FakeRedis, product_doc
from shopreco.domain.models.chat import Classification, ExtractedData
from shopreco.domain.repositories.product_repo import ProductRepo
from shopreco.domain.services.classifier import KeywordClassifier
from shopreco.domain.services.resolver import RecommendationResolver
from shopreco.utils.cache import CacheAside


@pytest.fixture()
def resolver(products, cache):
    return RecommendationResolver(products, cache, ttl=900)


@pytest.fixture()
def sparse_resolver():
    """A catalog with a single featured book and nothing else."""
    db = FakeDatabase(products=[product_doc("book", name="Cookbook", category="books", is_featured=True)])
    return RecommendationResolver(ProductRepo(db), CacheAside(FakeRedis()))


async def ask(resolver, query):
    classification = await KeywordClassifier().classify(query)
    return classification.intent, await resolver.resolve(classification)


def ids(resolution):
    return [p.product_id for p in resolution.products]


@pytest.mark.asyncio
async def test_birthday_gift_for_young_boy_lists_kids_toys(resolver):
    intent, res = await ask(resolver, "I need a birthday gift for a 5-year-old boy")
    assert intent == "gift"
    assert res.type == "product_list"
    assert ids(res) == ["blocks"]
    assert all(p.category == "toys" for p in res.products)
    assert res.message == "Here are some gift ideas for a 5-year-old male for birthday:"


@pytest.mark.asyncio
async def test_compare_two_phones(resolver):
    intent, res = await ask(resolver, "iPhone 13 Pro vs Samsung Galaxy S21")
    assert intent == "compare"
    assert res.type == "comparison"
    assert ids(res) == ["iphone13", "galaxy21"]
    assert res.specification_keys == ["Display", "Storage", "Chip", "Battery"]
    assert res.message == "Here's a comparison of iPhone 13 Pro and Samsung Galaxy S21:"


@pytest.mark.asyncio
async def test_compare_needs_two_matches(resolver):
    _, res = await ask(resolver, "iPhone 13 Pro vs Nokia 3310")
    assert res.type == "text"
    assert res.products == []


@pytest.mark.asyncio
async def test_compare_needs_two_names(resolver):
    res = await resolver.resolve(Classification(query="compare these", intent="compare"))
    assert res.type == "text"
    assert "which products" in res.message


@pytest.mark.asyncio
async def test_compare_names_are_literal_text(resolver):
    res = await resolver.resolve(Classification(query="C++ Primer vs (Deluxe) Edition", intent="compare"))
    assert res.type == "text"


@pytest.mark.asyncio
async def test_budget_without_match_suggests_higher_budget(resolver):
    intent, res = await ask(resolver, "show me electronics under $50")
    assert intent == "budget"
    assert res.type == "text"
    assert res.products == []
    assert res.message == (
        "I couldn't find any electronics products under $50. Would you like to try a higher budget?"
    )


@pytest.mark.asyncio
async def test_budget_lists_cheapest_by_rating(resolver):
    _, res = await ask(resolver, "anything under $30")
    assert res.type == "product_list"
    assert ids(res) == ["lipstick", "rattle", "novel"]
    assert all(p.price <= 30 for p in res.products)


@pytest.mark.asyncio
@pytest.mark.parametrize("intent", ["budget", "category", "age", "occasion"])
async def test_missing_parameter_yields_clarifying_text(resolver, intent):
    res = await resolver.resolve(Classification(query="hmm something nice", intent=intent))
    assert res.type == "text"
    assert res.products == []


@pytest.mark.asyncio
async def test_category_sorted_by_rating(resolver):
    intent, res = await ask(resolver, "show me toys")
    assert intent == "category"
    assert ids(res) == ["blocks", "rattle"]


@pytest.mark.asyncio
async def test_category_without_products_is_text(sparse_resolver):
    res = await sparse_resolver.resolve(Classification(query="show me toys", intent="category"))
    assert res.type == "text"


@pytest.mark.asyncio
async def test_age_primary_filter(resolver):
    intent, res = await ask(resolver, "something fun for a 10 year old")
    assert intent == "age"
    assert ids(res) == ["blocks"]


@pytest.mark.asyncio
async def test_age_fallback_drops_tags(resolver):
    res = await resolver.resolve(Classification(query="for my 16 year old daughter", intent="age"))
    assert res.type == "product_list"
    assert ids(res) == ["lipstick"]
    assert res.message == "Here are some products that might be suitable for a 16-year-old female:"


@pytest.mark.asyncio
async def test_occasion_table(resolver):
    intent, res = await ask(resolver, "ideas for a wedding")
    assert intent == "occasion"
    assert ids(res) == ["iphone13", "headphones"]


@pytest.mark.asyncio
async def test_occasion_falls_back_to_featured(sparse_resolver):
    res = await sparse_resolver.resolve(Classification(query="ideas for a wedding", intent="occasion"))
    assert res.type == "product_list"
    assert ids(res) == ["book"]
    assert res.message.startswith("I couldn't find specific products for wedding")


@pytest.mark.asyncio
async def test_gift_falls_back_to_featured(sparse_resolver):
    intent, res = await ask(sparse_resolver, "a gift for my wife")
    assert intent == "gift"
    assert ids(res) == ["book"]
    assert res.message == "Here are some featured products that would make great gifts:"


@pytest.mark.asyncio
async def test_gift_with_nothing_featured_is_text():
    db = FakeDatabase(products=[product_doc("plain", category="food")])
    resolver = RecommendationResolver(ProductRepo(db), CacheAside(None))
    _, res = await ask(resolver, "a gift for my wife")
    assert res.type == "text"


@pytest.mark.asyncio
async def test_specs_returns_top_match_sheet(resolver):
    intent, res = await ask(resolver, "tell me the specs of the iPhone")
    assert intent == "specs"
    assert res.type == "specs"
    assert ids(res) == ["iphone13"]
    assert res.specifications == {"Display": "6.1 inch", "Storage": "128GB", "Chip": "A15"}


@pytest.mark.asyncio
async def test_specs_without_match_is_text(resolver):
    _, res = await ask(resolver, "tell me the specs of the zzzz")
    assert res.type == "text"


@pytest.mark.asyncio
async def test_search_by_text(resolver):
    intent, res = await ask(resolver, "wireless headphones")
    assert intent == "search"
    assert ids(res) == ["headphones"]
    assert res.message == "Here are some products related to your query:"


@pytest.mark.asyncio
async def test_search_falls_back_to_partial_match(resolver):
    _, res = await ask(resolver, "headphone")
    assert ids(res) == ["headphones"]
    assert res.message == "Here are some products related to your search:"


@pytest.mark.asyncio
async def test_search_never_returns_hidden_products(resolver):
    _, res = await ask(resolver, "unreleased gadget")
    assert res.type == "text"


@pytest.mark.asyncio
async def test_unknown_intent_is_searched(resolver):
    res = await resolver.resolve(Classification(query="wireless headphones", intent="weird"))
    assert ids(res) == ["headphones"]


@pytest.mark.asyncio
async def test_retrieval_is_cached_under_products_prefix(db, redis, cache, resolver):
    await ask(resolver, "show me toys")
    keys = list(redis.store)
    assert keys and all(k.startswith("products:chat:") for k in keys)

    db["products"].docs.clear()
    _, cached = await ask(resolver, "show me toys")
    assert ids(cached) == ["blocks", "rattle"]

    await cache.invalidate("products:*")
    _, fresh = await ask(resolver, "show me toys")
    assert fresh.type == "text"


@pytest.mark.asyncio
async def test_budget_in_thousands(resolver):
    intent, res = await ask(resolver, "anything under $1,000")
    assert intent == "budget"
    assert res.type == "product_list"
    assert res.message == "Here are some great products under $1000:"
    assert "iphone13" in ids(res)
    assert all(p.price <= 1000 for p in res.products)


@pytest.mark.asyncio
async def test_compare_rereads_names_from_query_when_hints_miss(resolver):
    classification = Classification(
        query="iPhone 13 Pro vs Samsung Galaxy S21",
        intent="compare",
        data=ExtractedData(products=["Pixel 9", "Nokia 3310"]),
    )
    res = await resolver.resolve(classification)
    assert res.type == "comparison"
    assert ids(res) == ["iphone13", "galaxy21"]
