# shopreco/domain/services/bundle_svc.py
from __future__ import annotations

import logging
import time
import uuid
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from shopreco.domain.models.bundle import Bundle, BundleList, BundleProduct, SYNTHETIC_BUNDLE_PREFIX
from shopreco.domain.models.product import Product
from shopreco.domain.repositories.bundle_repo import BundleRepo
from shopreco.domain.repositories.product_repo import ProductRepo, PUBLISHED, IN_STOCK
from shopreco.domain.services.constants import BUNDLE_DISCOUNT
from shopreco.utils.cache import CacheAside

logger = logging.getLogger(__name__)

BY_RATING = [("rating", -1)]
AVAILABLE: Dict[str, Any] = {**PUBLISHED, **IN_STOCK}

# Complementary products must be priced within this band around the main product
PRICE_BAND = (0.5, 1.5)


def round_half_up(value: Decimal) -> float:
    """Round to a whole currency unit, halves away from zero."""
    return float(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def price_bundle(
    *,
    bundle_id: str,
    name: str,
    main: Product,
    related: List[Product],
    discount: float = BUNDLE_DISCOUNT,
    description: str = "",
) -> Bundle:
    """
    bundle_price = round(individual_total * (1 - discount)),
    savings = individual_total - bundle_price.
    """
    total = Decimal(str(main.price)) + sum((Decimal(str(p.price)) for p in related), Decimal("0"))
    individual_total = float(total)
    bundle_price = round_half_up(total * (Decimal("1") - Decimal(str(discount))))
    return Bundle(
        bundle_id=bundle_id,
        name=name,
        description=description,
        main_product=BundleProduct.snapshot(main),
        related_products=[BundleProduct.snapshot(p) for p in related],
        individual_total=individual_total,
        bundle_price=bundle_price,
        savings=individual_total - bundle_price,
        savings_percentage=round(discount * 100, 2),
        is_active=True,
    )


class BundleService:
    """
    Curated bundles first; when none match, one bundle is synthesized from the
    catalog (complementary categories, similar price) and only cached, never stored.
    """

    def __init__(self, products: ProductRepo, bundles: BundleRepo, cache: CacheAside, *, ttl: int = 1800):
        self.products = products
        self.bundles = bundles
        self.cache = cache
        self.ttl = ttl

    async def get_bundles(
        self,
        *,
        product_id: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = 3,
    ) -> List[Bundle]:
        start_time = time.perf_counter()
        logger.info("bundles start product_id=%s category=%s limit=%s", product_id, category, limit)

        cache_key = f"products:bundles:{product_id or ''}:{category or ''}:{limit}"
        result = await self.cache.get_or_compute(
            cache_key, self.ttl,
            lambda: self._load(product_id, category, limit),
            codec=BundleList,
        )

        logger.info("bundles done n=%s total_time=%.3fs", len(result), time.perf_counter() - start_time)
        return result

    async def _load(self, product_id: Optional[str], category: Optional[str], limit: int) -> List[Bundle]:
        saved = await self.bundles.find_active(product_id=product_id, category=category, limit=limit)
        if saved:
            logger.info("bundles curated n=%s", len(saved))
            return saved
        bundle = await self._synthesize(product_id, category, limit)
        return [bundle] if bundle else []

    def _complements_filter(self, main: Product) -> Dict[str, Any]:
        low, high = PRICE_BAND
        return {
            "product_id": {"$ne": main.product_id},
            "category": {"$ne": main.category},
            "price": {"$gte": main.price * low, "$lte": main.price * high},
            **AVAILABLE,
        }

    async def _synthesize(self, product_id: Optional[str], category: Optional[str], limit: int) -> Optional[Bundle]:
        if product_id:
            main = await self.products.get(product_id)
            if main is None:
                logger.info("bundles anchor not found product_id=%s", product_id)
                return None
            related = await self.products.find(self._complements_filter(main), sort=BY_RATING, limit=limit)
        elif category:
            top = await self.products.find({"category": category, **AVAILABLE}, sort=BY_RATING, limit=1)
            if not top:
                return None
            main = top[0]
            related = await self.products.find(self._complements_filter(main), sort=BY_RATING, limit=limit)
        else:
            popular = await self.products.find({**AVAILABLE, "is_featured": True}, sort=BY_RATING, limit=limit + 1)
            if not popular:
                return None
            main, related = popular[0], popular[1:]

        logger.info("bundles synthesized main=%s related=%s", main.product_id, len(related))
        return price_bundle(
            bundle_id=f"{SYNTHETIC_BUNDLE_PREFIX}{main.product_id}",
            name=f"{main.name} Bundle",
            main=main,
            related=related,
        )

    async def create_bundle(
        self,
        *,
        name: str,
        main_product_id: str,
        related_product_ids: List[str],
        description: str = "",
        discount_percentage: Optional[float] = None,
    ) -> Bundle:
        """
        Persist an admin-curated bundle from live product snapshots.
        Raises LookupError when the main product or any related product is unknown.
        """
        main = await self.products.get(main_product_id)
        if main is None:
            raise LookupError("Main product not found")
        related = await self.products.find_by_ids(related_product_ids)
        if len(related) != len(set(related_product_ids)):
            raise LookupError("One or more related products not found")

        discount = discount_percentage / 100 if discount_percentage else BUNDLE_DISCOUNT
        bundle = price_bundle(
            bundle_id=uuid.uuid4().hex,
            name=name,
            description=description,
            main=main,
            related=related,
            discount=discount,
        )
        stored = await self.bundles.insert(bundle)
        removed = await self.cache.invalidate("products:bundles:*")
        logger.info("bundle created bundle_id=%s name=%s invalidated=%s", stored.bundle_id, name, removed)
        return stored
