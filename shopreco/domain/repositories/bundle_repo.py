# shopreco/domain/repositories/bundle_repo.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from shopreco.domain.models.bundle import Bundle


class BundleRepo:
    """Admin-curated bundles ('bundles' collection)."""

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "bundles"):
        self.col = db[collection_name]

    async def find_active(
        self,
        *,
        product_id: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = 3,
    ) -> List[Bundle]:
        """
        Active bundles anchored on `product_id` (main product), else on `category`,
        else any active bundle.
        """
        filt: Dict[str, Any] = {"is_active": True}
        if product_id:
            filt["main_product.product_id"] = product_id
        elif category:
            filt["main_product.category"] = category
        docs = await self.col.find(filt, {"_id": 0}).limit(limit).to_list(length=None)
        return [Bundle.model_validate(d) for d in docs]

    async def insert(self, bundle: Bundle) -> Bundle:
        now = datetime.now(timezone.utc)
        stored = bundle.model_copy(update={"created_at": now, "updated_at": now})
        await self.col.insert_one(stored.model_dump())
        return stored
