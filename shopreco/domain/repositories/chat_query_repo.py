# shopreco/domain/repositories/chat_query_repo.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from shopreco.domain.models.chat import ChatQuery


class ChatQueryRepo:
    """
    Append-only chatbot audit log ('chat_queries' collection) and its analytics.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "chat_queries"):
        self.col = db[collection_name]

    async def insert(self, record: ChatQuery) -> None:
        await self.col.insert_one(record.model_dump())

    async def count_since(self, since: datetime) -> int:
        return await self.col.count_documents({"created_at": {"$gte": since}})

    async def _group_count(self, since: datetime, field: str, limit: int = 0) -> List[Dict[str, Any]]:
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"created_at": {"$gte": since}}},
            {"$group": {"_id": f"${field}", "count": {"$sum": 1}}},
            {"$sort": {"count": -1}},
        ]
        if limit:
            pipeline.append({"$limit": limit})
        pipeline.append({"$project": {"_id": 0, field: "$_id", "count": 1}})
        return await self.col.aggregate(pipeline).to_list(length=None)

    async def intent_distribution(self, since: datetime) -> List[Dict[str, Any]]:
        return await self._group_count(since, "intent")

    async def response_type_distribution(self, since: datetime) -> List[Dict[str, Any]]:
        return await self._group_count(since, "response_type")

    async def common_queries(self, since: datetime, limit: int = 10) -> List[Dict[str, Any]]:
        return await self._group_count(since, "query", limit)

    async def top_products(self, since: datetime, limit: int = 10) -> List[Dict[str, Any]]:
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"created_at": {"$gte": since}, "matched_products": {"$exists": True, "$ne": []}}},
            {"$unwind": "$matched_products"},
            {"$group": {"_id": "$matched_products", "count": {"$sum": 1}}},
            {"$sort": {"count": -1}},
            {"$limit": limit},
            {"$lookup": {
                "from": "products",
                "localField": "_id",
                "foreignField": "product_id",
                "as": "product",
            }},
            {"$unwind": "$product"},
            {"$project": {
                "_id": 0,
                "product_id": "$_id",
                "count": 1,
                "name": "$product.name",
                "category": "$product.category",
            }},
        ]
        return await self.col.aggregate(pipeline).to_list(length=None)

    async def queries_by_hour(self, since: datetime) -> List[Dict[str, Any]]:
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"created_at": {"$gte": since}}},
            {"$group": {
                "_id": {
                    "year": {"$year": "$created_at"},
                    "month": {"$month": "$created_at"},
                    "day": {"$dayOfMonth": "$created_at"},
                    "hour": {"$hour": "$created_at"},
                },
                "count": {"$sum": 1},
            }},
            {"$sort": {"_id.year": 1, "_id.month": 1, "_id.day": 1, "_id.hour": 1}},
            {"$project": {"_id": 0, "bucket": "$_id", "count": 1}},
        ]
        return await self.col.aggregate(pipeline).to_list(length=None)
