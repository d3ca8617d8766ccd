# shopreco/domain/repositories/order_repo.py
from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from shopreco.core.logging import json_preview

logger = logging.getLogger(__name__)


class OrderRepo:
    """
    Read-only access to past orders ('orders' collection).
    Only line items and timestamps are read; orders are never modified here.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "orders"):
        self.col = db[collection_name]

    async def _aggregate(self, name: str, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        logger.debug("orders %s pipeline=%s", name, json_preview(pipeline, limit=2000))
        t0 = time.perf_counter()
        docs = await self.col.aggregate(pipeline).to_list(length=None)
        logger.info("orders %s db_ok n=%s db_time=%.3fs", name, len(docs), time.perf_counter() - t0)
        return docs

    async def units_by_product_since(self, since: datetime) -> List[Dict[str, Any]]:
        """
        [{product_id, units}] for orders created at or after `since`,
        units = summed item quantities, most sold first.
        """
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"created_at": {"$gte": since}}},
            {"$unwind": "$items"},
            {"$group": {"_id": "$items.product_id", "units": {"$sum": "$items.quantity"}}},
            {"$sort": {"units": -1}},
            {"$project": {"_id": 0, "product_id": "$_id", "units": 1}},
        ]
        return await self._aggregate("units_by_product", pipeline)

    async def co_purchase_counts(self, product_id: str, limit: int) -> List[Dict[str, Any]]:
        """
        [{product_id, count}] of products appearing in the same orders as `product_id`,
        count = number of line items seen alongside it, most frequent first.
        """
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"items.product_id": product_id}},
            {"$unwind": "$items"},
            {"$match": {"items.product_id": {"$ne": product_id}}},
            {"$group": {"_id": "$items.product_id", "count": {"$sum": 1}}},
            {"$sort": {"count": -1}},
            {"$limit": limit},
            {"$project": {"_id": 0, "product_id": "$_id", "count": 1}},
        ]
        return await self._aggregate("co_purchase", pipeline)

    async def product_ids_for_user(self, user_id: str) -> List[str]:
        return await self.col.distinct("items.product_id", {"user_id": user_id})

    async def users_who_bought(self, product_ids: List[str], exclude_user: Optional[str] = None) -> List[str]:
        filt: Dict[str, Any] = {"items.product_id": {"$in": product_ids}}
        if exclude_user:
            filt["user_id"] = {"$ne": exclude_user}
        return await self.col.distinct("user_id", filt)

    async def product_ids_for_users(self, user_ids: List[str]) -> List[str]:
        """Every purchased line-item product id for these users, one entry per line item."""
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"user_id": {"$in": user_ids}}},
            {"$unwind": "$items"},
            {"$project": {"_id": 0, "product_id": "$items.product_id"}},
        ]
        docs = await self._aggregate("product_ids_for_users", pipeline)
        return [d["product_id"] for d in docs if d.get("product_id")]
