# shopreco/domain/services/trending_svc.py
from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from shopreco.domain.models.product import Product, ProductList
from shopreco.domain.repositories.order_repo import OrderRepo
from shopreco.domain.repositories.product_repo import ProductRepo, PUBLISHED, IN_STOCK
from shopreco.domain.services.constants import TIMEFRAME_DAYS, DEFAULT_TIMEFRAME
from shopreco.utils.cache import CacheAside, make_key

logger = logging.getLogger(__name__)

BY_POPULARITY = [("review_count", -1), ("rating", -1)]


def normalize_timeframe(timeframe: Optional[str]) -> str:
    return timeframe if timeframe in TIMEFRAME_DAYS else DEFAULT_TIMEFRAME


class TrendingService:
    """
    Order-history statistics: best sellers over a lookback window and
    co-purchase ranking around an anchor product.
    """

    def __init__(self, products: ProductRepo, orders: OrderRepo, cache: CacheAside, *, ttl: int = 900):
        self.products = products
        self.orders = orders
        self.cache = cache
        self.ttl = ttl

    async def get_trending(
        self,
        *,
        category: Optional[str] = None,
        timeframe: Optional[str] = DEFAULT_TIMEFRAME,
        limit: int = 10,
        now: Optional[datetime] = None,
    ) -> List[Product]:
        start_time = time.perf_counter()
        timeframe = normalize_timeframe(timeframe)
        logger.info("trending start category=%s timeframe=%s limit=%s", category, timeframe, limit)

        filt: Dict[str, Any] = {**PUBLISHED, **IN_STOCK}
        if category:
            filt["category"] = category

        cache_key = make_key("products:trending", {"filter": filt, "limit": limit, "timeframe": timeframe})

        async def compute() -> List[Product]:
            since = (now or datetime.now(timezone.utc)) - timedelta(days=TIMEFRAME_DAYS[timeframe])
            ranked = await self.orders.units_by_product_since(since)
            ids = [r["product_id"] for r in ranked if r.get("product_id")]
            if ids:
                products = await self.products.find_by_ids(ids, filt)
                if products:
                    return products[:limit]
            logger.info("trending no sales in window since=%s, ranking by reviews", since.isoformat())
            return await self.products.find(filt, sort=BY_POPULARITY, limit=limit)

        result = await self.cache.get_or_compute(cache_key, self.ttl, compute, codec=ProductList)
        logger.info("trending done n=%s total_time=%.3fs", len(result), time.perf_counter() - start_time)
        return result

    async def co_occurring_products(self, anchor_product_id: str, limit: int) -> List[str]:
        """Product ids bought in the same orders as the anchor, most frequent first."""
        rows = await self.orders.co_purchase_counts(anchor_product_id, limit)
        return [r["product_id"] for r in rows if r.get("product_id")]
