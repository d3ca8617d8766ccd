# shopreco/domain/services/recommendation_svc.py
from __future__ import annotations

import logging
import time
from collections import Counter
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from shopreco.core.config import Settings
from shopreco.domain.models.product import Product, ProductList
from shopreco.domain.repositories.order_repo import OrderRepo
from shopreco.domain.repositories.product_repo import ProductRepo, PUBLISHED, IN_STOCK
from shopreco.domain.services.constants import (
    ALL_RECO_KINDS, MAX_RECENTLY_VIEWED_IDS,
    RECO_RECOMMENDED, RECO_RECENTLY_VIEWED, RECO_BOUGHT_TOGETHER,
    RECO_SMART_COLLABORATIVE, RECO_SMART_ITEM, RECO_SMART_TRENDING,
)
from shopreco.domain.services.trending_svc import TrendingService
from shopreco.utils.cache import CacheAside, make_key

logger = logging.getLogger(__name__)

AVAILABLE: Dict[str, Any] = {**PUBLISHED, **IN_STOCK}
BY_RATING = [("rating", -1)]
BY_POPULARITY = [("review_count", -1), ("rating", -1)]

REQUESTS_COUNTER_KEY = "analytics:recommendations:requests"
PRODUCTS_LEADERBOARD_KEY = "analytics:recommendations:products"


class RecommendationService:
    """
    Product lists for the storefront widgets: personal, recently viewed,
    bought together, and the context-picked "smart" variants.
    Every list is served through the cache under `recommendations:*`.
    """

    def __init__(
        self,
        products: ProductRepo,
        orders: OrderRepo,
        trending: TrendingService,
        cache: CacheAside,
        settings: Settings,
    ):
        self.products = products
        self.orders = orders
        self.trending = trending
        self.cache = cache
        self.settings = settings

    async def _cached(self, key: str, ttl: int, compute: Callable[[], Awaitable[List[Product]]]) -> List[Product]:
        return await self.cache.get_or_compute(key, ttl, compute, codec=ProductList)

    async def list_recommendations(
        self,
        kind: str,
        *,
        user_id: Optional[str] = None,
        product_id: Optional[str] = None,
        recently_viewed: Optional[List[str]] = None,
        limit: int = 8,
    ) -> List[Product]:
        """
        Raises ValueError for an unknown kind or a missing required parameter
        (product id for bought-together/item-based, user for collaborative,
        1..50 ids for recently-viewed).
        """
        if kind not in ALL_RECO_KINDS:
            raise ValueError(f"Invalid recommendation type: {kind}")

        t0 = time.perf_counter()
        s = self.settings

        if kind == RECO_RECOMMENDED:
            if user_id:
                result = await self._cached(
                    f"recommendations:user:{user_id}:{limit}", s.reco_user_cache_ttl,
                    lambda: self._for_user(user_id, limit),
                )
            else:
                result = await self._cached(
                    f"recommendations:featured:{limit}", s.reco_featured_cache_ttl,
                    lambda: self._featured(limit),
                )
        elif kind == RECO_RECENTLY_VIEWED:
            ids = [i for i in (recently_viewed or []) if i]
            if not ids or len(ids) > MAX_RECENTLY_VIEWED_IDS:
                raise ValueError(f"recentlyViewed must hold between 1 and {MAX_RECENTLY_VIEWED_IDS} product ids")
            result = await self._cached(
                make_key("recommendations:recently-viewed", {"ids": ids, "limit": limit}),
                s.reco_recently_viewed_cache_ttl,
                lambda: self._recently_viewed(ids, limit),
            )
        elif kind == RECO_BOUGHT_TOGETHER:
            anchor = _required(product_id, "productId")
            result = await self._cached(
                f"recommendations:frequently-bought:{anchor}:{limit}", s.reco_bought_together_cache_ttl,
                lambda: self._bought_together(anchor, limit, require_anchor=False),
            )
        elif kind == RECO_SMART_COLLABORATIVE:
            uid = _required(user_id, "user id")
            result = await self._cached(
                f"recommendations:smart:user:{uid}:{limit}", s.smart_collaborative_cache_ttl,
                lambda: self._collaborative(uid, limit),
            )
        elif kind == RECO_SMART_ITEM:
            anchor = _required(product_id, "productId")
            result = await self._cached(
                f"recommendations:smart:item:{anchor}:{limit}", s.smart_item_cache_ttl,
                lambda: self._bought_together(anchor, limit, require_anchor=True),
            )
        else:
            result = await self._cached(
                f"recommendations:smart:trending:{limit}", s.smart_trending_cache_ttl,
                lambda: self._reviewed(limit),
            )

        logger.info(
            "recommendations kind=%s user_id=%s product_id=%s n=%s time=%.3fs",
            kind, user_id, product_id, len(result), time.perf_counter() - t0,
        )
        return result

    async def smart(
        self,
        *,
        user_id: Optional[str] = None,
        product_id: Optional[str] = None,
        limit: int = 8,
    ) -> Tuple[str, List[Product]]:
        """
        Known user -> collaborative, else anchor product -> item-based, else trending.
        Returns (recommendation_type, products). Analytics counters are best-effort.
        """
        ttl = self.settings.analytics_counter_ttl
        await self.cache.increment(REQUESTS_COUNTER_KEY, ttl)

        if user_id:
            return "collaborative", await self.list_recommendations(
                RECO_SMART_COLLABORATIVE, user_id=user_id, limit=limit
            )
        if product_id:
            await self.cache.bump_member(PRODUCTS_LEADERBOARD_KEY, product_id, ttl)
            return "item-based", await self.list_recommendations(
                RECO_SMART_ITEM, product_id=product_id, limit=limit
            )
        return "trending", await self.list_recommendations(RECO_SMART_TRENDING, limit=limit)

    # ---------- strategies ----------

    async def _featured(self, limit: int) -> List[Product]:
        return await self.products.find({**AVAILABLE, "is_featured": True}, sort=BY_RATING, limit=limit)

    async def _popular(self, limit: int) -> List[Product]:
        return await self.products.find(AVAILABLE, sort=BY_POPULARITY, limit=limit)

    async def _reviewed(self, limit: int) -> List[Product]:
        return await self.products.find({**AVAILABLE, "review_count": {"$gt": 0}}, sort=BY_POPULARITY, limit=limit)

    async def _same_categories(self, purchased: List[str], limit: int) -> List[Product]:
        """Unbought products from the categories of `purchased`, best rated first."""
        bought = await self.products.find_by_ids(purchased)
        categories = sorted({p.category for p in bought})
        if not categories:
            return []
        filt = {"category": {"$in": categories}, "product_id": {"$nin": purchased}, **AVAILABLE}
        return await self.products.find(filt, sort=BY_RATING, limit=limit)

    async def _for_user(self, user_id: str, limit: int) -> List[Product]:
        purchased = await self.orders.product_ids_for_user(user_id)
        if purchased:
            return await self._same_categories(purchased, limit)
        return await self._featured(limit)

    async def _recently_viewed(self, ids: List[str], limit: int) -> List[Product]:
        products = await self.products.find_by_ids(ids, PUBLISHED)
        return products[:limit]

    async def _bought_together(self, anchor: str, limit: int, *, require_anchor: bool) -> List[Product]:
        current = await self.products.get(anchor)
        if current is None and require_anchor:
            return []
        ids = await self.trending.co_occurring_products(anchor, limit)
        if ids:
            products = await self.products.find_by_ids(ids, AVAILABLE)
            if products:
                return products
        if current is None:
            return []
        filt = {"product_id": {"$ne": anchor}, "category": current.category, **AVAILABLE}
        return await self.products.find(filt, sort=BY_RATING, limit=limit)

    async def _collaborative(self, user_id: str, limit: int) -> List[Product]:
        purchased = await self.orders.product_ids_for_user(user_id)
        if not purchased:
            return await self._popular(limit)

        neighbours = await self.orders.users_who_bought(purchased, exclude_user=user_id)
        if not neighbours:
            return await self._same_categories(purchased, limit)

        owned = set(purchased)
        counts = Counter(pid for pid in await self.orders.product_ids_for_users(neighbours) if pid not in owned)
        ids = [pid for pid, _ in counts.most_common(limit)]
        if ids:
            products = await self.products.find_by_ids(ids, AVAILABLE)
            if products:
                return products
        return await self._popular(limit)


def _required(value: Optional[str], name: str) -> str:
    if not value:
        raise ValueError(f"{name} is required")
    return value
