# shopreco/domain/repositories/product_repo.py

from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence, Tuple
from motor.motor_asyncio import AsyncIOMotorDatabase
from shopreco.domain.models.product import Product

SortSpec = Sequence[Tuple[str, Any]]

# Filters every customer-facing read starts from
PUBLISHED: Dict[str, Any] = {"is_published": True}
IN_STOCK: Dict[str, Any] = {"stock": {"$gt": 0}}

_PROJECTION = {"_id": 0}


class ProductRepo:
    """
    Read-only product catalog backed by the 'products' collection.
    Products are addressed by their string `product_id`; Mongo `_id` never leaves this class.
    The text index covers name, description and tags.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "products"):
        self.col = db[collection_name]

    async def get(self, product_id: str) -> Optional[Product]:
        doc = await self.col.find_one({"product_id": product_id}, _PROJECTION)
        return Product.model_validate(doc) if doc else None

    async def find(
        self,
        filt: Dict[str, Any],
        *,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[Product]:
        cursor = self.col.find(filt, _PROJECTION)
        if sort:
            cursor = cursor.sort(list(sort))
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        docs = await cursor.to_list(length=None)
        return [Product.model_validate(d) for d in docs]

    async def count(self, filt: Dict[str, Any]) -> int:
        return await self.col.count_documents(filt)

    async def text_search(
        self,
        text: str,
        filt: Optional[Dict[str, Any]] = None,
        *,
        limit: int = 10,
    ) -> List[Product]:
        """Full-text search ranked by the store's relevance score (best first)."""
        query = {"$text": {"$search": text}, **(filt or {})}
        projection = {"_id": 0, "score": {"$meta": "textScore"}}
        cursor = (
            self.col.find(query, projection)
            .sort([("score", {"$meta": "textScore"})])
            .limit(limit)
        )
        docs = await cursor.to_list(length=None)
        return [Product.model_validate(d) for d in docs]

    async def find_by_ids(
        self,
        ids: List[str],
        filt: Optional[Dict[str, Any]] = None,
        *,
        limit: int = 0,
    ) -> List[Product]:
        """Products among `ids` matching `filt`, in the order of `ids`. Unknown ids are dropped."""
        if not ids:
            return []
        found = await self.find({"product_id": {"$in": ids}, **(filt or {})}, limit=limit)
        rank = {pid: i for i, pid in enumerate(ids)}
        return sorted(found, key=lambda p: rank.get(p.product_id, len(rank)))
