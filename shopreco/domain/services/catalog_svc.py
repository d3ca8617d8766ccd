# shopreco/domain/services/catalog_svc.py
from __future__ import annotations

import logging
import math
import time
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, TypeAdapter

from shopreco.domain.models.product import Product, ProductList
from shopreco.domain.repositories.product_repo import ProductRepo, PUBLISHED
from shopreco.domain.services import composer
from shopreco.domain.services.constants import COMPARE_LIMIT
from shopreco.utils.cache import CacheAside, make_key

logger = logging.getLogger(__name__)

SortField = Literal["created_at", "price", "rating", "review_count", "name"]


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class ProductPage(BaseModel):
    products: List[Product]
    pagination: Pagination


class ProductComparison(BaseModel):
    products: List[Product]
    specification_keys: List[str]


_PageCodec = TypeAdapter(ProductPage)


class CatalogService:
    """Paginated, filterable product listing (published products only)."""

    def __init__(self, products: ProductRepo, cache: CacheAside, *, ttl: int = 900):
        self.products = products
        self.cache = cache
        self.ttl = ttl

    async def list_products(
        self,
        *,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        search: Optional[str] = None,
        featured: bool = False,
        sort_field: SortField = "created_at",
        sort_order: Literal["asc", "desc"] = "desc",
        page: int = 1,
        limit: int = 10,
    ) -> ProductPage:
        start_time = time.perf_counter()

        filt: Dict[str, Any] = dict(PUBLISHED)
        if category:
            filt["category"] = category
        price: Dict[str, float] = {}
        if min_price is not None:
            price["$gte"] = min_price
        if max_price is not None:
            price["$lte"] = max_price
        if price:
            filt["price"] = price
        if featured:
            filt["is_featured"] = True
        if search:
            filt["$text"] = {"$search": search}

        sort = [(sort_field, 1 if sort_order == "asc" else -1)]
        skip = (page - 1) * limit

        cache_key = make_key("products", {"filter": filt, "sort": sort, "skip": skip, "limit": limit})
        logger.info("list_products start cache_key=%s", cache_key)

        async def compute() -> ProductPage:
            items = await self.products.find(filt, sort=sort, skip=skip, limit=limit)
            total = await self.products.count(filt)
            return ProductPage(
                products=items,
                pagination=Pagination(total=total, page=page, limit=limit, pages=math.ceil(total / limit)),
            )

        result = await self.cache.get_or_compute(cache_key, self.ttl, compute, codec=_PageCodec)
        logger.info(
            "list_products done n=%s total=%s total_time=%.3fs",
            len(result.products), result.pagination.total, time.perf_counter() - start_time,
        )
        return result

    async def compare_products(self, product_ids: List[str]) -> ProductComparison:
        """
        Side-by-side view of up to COMPARE_LIMIT published products, in the
        requested order. Unknown or unpublished ids are dropped.
        """
        ids = [pid.strip() for pid in product_ids if pid and pid.strip()]
        if not ids:
            raise ValueError("No product IDs provided")
        if len(ids) > COMPARE_LIMIT:
            raise ValueError(f"Maximum {COMPARE_LIMIT} products can be compared at once")

        wanted = sorted(set(ids))
        cache_key = "products:compare:" + ",".join(wanted)
        found = await self.cache.get_or_compute(
            cache_key, self.ttl,
            lambda: self.products.find_by_ids(wanted, PUBLISHED),
            codec=ProductList,
        )
        by_id = {p.product_id: p for p in found}
        products = [by_id[pid] for pid in dict.fromkeys(ids) if pid in by_id]

        res = composer.comparison(products)
        logger.info("compare_products requested=%s found=%s", len(ids), len(products))
        return ProductComparison(products=res.products, specification_keys=res.specification_keys or [])
