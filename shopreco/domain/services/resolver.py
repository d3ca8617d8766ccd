# shopreco/domain/services/resolver.py
from __future__ import annotations

import logging
import re
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional

from shopreco.domain.models.chat import Classification, ExtractedData, Resolution
from shopreco.domain.models.product import Product, ProductList
from shopreco.domain.repositories.product_repo import ProductRepo, PUBLISHED
from shopreco.domain.services import composer
from shopreco.domain.services.constants import (
    COMPARE_LIMIT, RESULT_LIMIT,
    INTENT_COMPARE, INTENT_GIFT, INTENT_BUDGET, INTENT_CATEGORY,
    INTENT_AGE, INTENT_OCCASION, INTENT_SPECS, INTENT_SEARCH,
)
from shopreco.domain.services.extraction import (
    extract_age, extract_budget, extract_category, extract_gender, extract_occasion,
    extract_products_to_compare, extract_search_terms, extract_spec_keywords, split_compare_targets,
)
from shopreco.domain.services.filters import (
    FEATURED, age_fallback_filter, age_filter, gift_filter, occasion_filter,
)
from shopreco.utils.cache import CacheAside, make_key

logger = logging.getLogger(__name__)

BY_RATING = [("rating", -1)]

Strategy = Callable[[str, ExtractedData], Awaitable[Resolution]]


def _partial_match(text: str, fields: List[str]) -> Dict[str, Any]:
    pattern = re.escape(text)
    return {"$or": [{f: {"$regex": pattern, "$options": "i"}} for f in fields]}


class RecommendationResolver:
    """
    Turns a classified query into a reply: one retrieval strategy per intent.

    Zero results are never an error. Branches with a broader option retry once
    (age, occasion, gift, search; compare re-reads the names from the raw query);
    the others answer with a clarifying text.
    Reads go through the cache under `products:chat:*`, so product
    invalidation (`products:*`) also clears them.
    """

    def __init__(self, products: ProductRepo, cache: CacheAside, *, ttl: int = 900):
        self.products = products
        self.cache = cache
        self.ttl = ttl
        self._strategies: Dict[str, Strategy] = {
            INTENT_COMPARE: self._compare,
            INTENT_BUDGET: self._budget,
            INTENT_CATEGORY: self._category,
            INTENT_AGE: self._age,
            INTENT_OCCASION: self._occasion,
            INTENT_GIFT: self._gift,
            INTENT_SPECS: self._specs,
            INTENT_SEARCH: self._search,
        }

    async def resolve(self, classification: Classification, user_id: Optional[str] = None) -> Resolution:
        t0 = time.perf_counter()
        strategy = self._strategies.get(classification.intent, self._search)
        res = await strategy(classification.query, classification.data)
        logger.info(
            "resolve intent=%s user_id=%s type=%s products=%s time=%.3fs",
            classification.intent, user_id, res.type, len(res.products), time.perf_counter() - t0,
        )
        return res

    # ---------- cached retrieval ----------

    async def _find(self, filt: Dict[str, Any], *, sort=BY_RATING, limit: int = RESULT_LIMIT) -> List[Product]:
        key = make_key("products:chat:find", {"f": filt, "s": sort, "l": limit})
        return await self.cache.get_or_compute(
            key, self.ttl,
            lambda: self.products.find(filt, sort=sort, limit=limit),
            codec=ProductList,
        )

    async def _text_search(self, text: str, *, limit: int = RESULT_LIMIT) -> List[Product]:
        key = make_key("products:chat:text", {"q": text, "l": limit})
        return await self.cache.get_or_compute(
            key, self.ttl,
            lambda: self.products.text_search(text, PUBLISHED, limit=limit),
            codec=ProductList,
        )

    async def _find_named(self, names: List[str]) -> List[Product]:
        filt = {
            "$or": [_partial_match(n, ["name", "brand", "description"]) for n in names],
            **PUBLISHED,
        }
        return await self._find(filt, sort=None, limit=COMPARE_LIMIT)

    # ---------- strategies ----------

    async def _compare(self, query: str, data: ExtractedData) -> Resolution:
        names = extract_products_to_compare(query, data)
        if len(names) < 2:
            return composer.text_reply(
                "I'd be happy to compare products for you. Could you specify which products you'd like to compare?"
            )
        products = await self._find_named(names)
        if len(products) < 2:
            raw_names = split_compare_targets(query)
            if len(raw_names) >= 2 and raw_names != names:
                names = raw_names
                products = await self._find_named(names)
        if len(products) < 2:
            return composer.text_reply(
                f'I couldn\'t find enough products to compare based on "{" and ".join(names)}". '
                "Could you try with different product names?"
            )
        return composer.comparison(products)

    async def _budget(self, query: str, data: ExtractedData) -> Resolution:
        budget = extract_budget(query, data)
        if not budget:
            return composer.text_reply(
                "I'd be happy to help you find products within your budget. "
                "Could you specify your budget, like 'under $100'?"
            )
        category = extract_category(query, data)
        filt: Dict[str, Any] = {"price": {"$lte": budget}, **PUBLISHED}
        if category:
            filt["category"] = category
        products = await self._find(filt)
        scope = f"{category} products" if category else "products"
        if not products:
            return composer.text_reply(
                f"I couldn't find any {scope} under {composer.money(budget)}. Would you like to try a higher budget?"
            )
        return composer.product_list(f"Here are some great {scope} under {composer.money(budget)}:", products)

    async def _category(self, query: str, data: ExtractedData) -> Resolution:
        category = extract_category(query, data)
        if not category:
            return composer.text_reply(
                "I'd be happy to show you products from a specific category. Which category are you "
                "interested in? For example: electronics, clothing, furniture, etc."
            )
        products = await self._find({"category": category, **PUBLISHED})
        if not products:
            return composer.text_reply(
                f"I couldn't find any products in the {category} category. Would you like to browse a different category?"
            )
        return composer.product_list(f"Here are some top {category} products:", products)

    async def _age(self, query: str, data: ExtractedData) -> Resolution:
        age = extract_age(query, data)
        gender = extract_gender(query, data)
        if age is None:
            return composer.text_reply(
                "I'd be happy to recommend age-appropriate products. Could you specify the age you're shopping for?"
            )
        primary = age_filter(age, gender)
        products = await self._find(primary)
        if products:
            return composer.product_list(
                f"Here are some great products{composer.audience(age, gender)}:", products
            )
        products = await self._find(age_fallback_filter(age, primary))
        if not products:
            return composer.text_reply(
                f"I couldn't find specific products for a {age}-year-old. "
                "Would you like recommendations for a different age group?"
            )
        return composer.product_list(
            f"Here are some products that might be suitable{composer.audience(age, gender)}:", products
        )

    async def _occasion(self, query: str, data: ExtractedData) -> Resolution:
        occasion = extract_occasion(query, data)
        gender = extract_gender(query, data)
        age = extract_age(query, data)
        if not occasion:
            return composer.text_reply(
                "I'd be happy to suggest gifts for a special occasion. Could you specify which occasion you're shopping for?"
            )
        products = await self._find(occasion_filter(occasion, age, gender))
        if products:
            return composer.product_list(
                f"Here are some great gifts for {occasion}{composer.audience(age, gender)}:", products
            )
        products = await self._find(FEATURED)
        if not products:
            return composer.text_reply(
                f"I couldn't find specific products for {occasion}. Would you like recommendations for a different occasion?"
            )
        return composer.product_list(
            f"I couldn't find specific products for {occasion}, but here are some featured items that might work:",
            products,
        )

    async def _gift(self, query: str, data: ExtractedData) -> Resolution:
        gender = extract_gender(query, data)
        age = extract_age(query, data)
        occasion = extract_occasion(query, data)
        products = await self._find(gift_filter(age, gender, occasion))
        if products:
            message = "Here are some gift ideas" + composer.audience(age, gender)
            if occasion:
                message += f" for {occasion}"
            return composer.product_list(f"{message}:", products)
        products = await self._find(FEATURED)
        if not products:
            return composer.text_reply(
                "I couldn't find gift ideas right now. Could you tell me more about who you're shopping for?"
            )
        return composer.product_list("Here are some featured products that would make great gifts:", products)

    async def _specs(self, query: str, data: ExtractedData) -> Resolution:
        keywords = extract_spec_keywords(query, data)
        products = await self._text_search(" ".join(keywords), limit=1) if keywords else []
        if not products:
            return composer.text_reply(
                "I couldn't find a specific product matching your query. "
                "Could you provide more details about the product you're interested in?"
            )
        return composer.specs_sheet(products[0])

    async def _search(self, query: str, data: ExtractedData) -> Resolution:
        terms = extract_search_terms(query)
        if not terms:
            return composer.text_reply(
                "I'd be happy to help you find products. Could you provide more details about what you're looking for?"
            )
        products = await self._text_search(terms)
        if products:
            return composer.product_list("Here are some products related to your query:", products)
        products = await self._find(
            {**_partial_match(terms, ["name", "description", "brand"]), **PUBLISHED}, sort=None
        )
        if not products:
            return composer.text_reply(
                "I couldn't find specific products matching your query. "
                "Try asking about specific categories, products, or features you're interested in."
            )
        return composer.product_list("Here are some products related to your search:", products)
