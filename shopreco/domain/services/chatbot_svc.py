# shopreco/domain/services/chatbot_svc.py
from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from shopreco.domain.models.chat import ChatQuery, ChatResponse
from shopreco.domain.repositories.chat_query_repo import ChatQueryRepo
from shopreco.domain.services import composer
from shopreco.domain.services.classifier import Classifier
from shopreco.domain.services.resolver import RecommendationResolver

logger = logging.getLogger(__name__)

ANALYTICS_PERIOD_DAYS = {"day": 1, "week": 7, "month": 30, "year": 365}
DEFAULT_ANALYTICS_PERIOD = "week"


class ChatbotService:
    """
    Shopping assistant: classify the question, resolve it against the catalog,
    compose the reply, then record one audit entry.
    """

    def __init__(self, classifier: Classifier, resolver: RecommendationResolver, audit: ChatQueryRepo):
        self.classifier = classifier
        self.resolver = resolver
        self.audit = audit

    async def classify_and_respond(self, query: str, user_id: Optional[str] = None) -> ChatResponse:
        query = (query or "").strip()
        if not query:
            raise ValueError("Query is required")

        start_time = time.perf_counter()
        classification = await self.classifier.classify(query)
        logger.info(
            "chatbot classified intent=%s source=%s data=%s",
            classification.intent, classification.source, classification.data.model_dump(exclude_defaults=True),
        )

        resolution = await self.resolver.resolve(classification, user_id)
        response = composer.compose(classification.intent, resolution)
        await self._record(query, user_id, response)

        logger.info(
            "chatbot done intent=%s type=%s products=%s total_time=%.3fs",
            response.intent, response.type, len(response.products), time.perf_counter() - start_time,
        )
        return response

    async def _record(self, query: str, user_id: Optional[str], response: ChatResponse) -> None:
        record = ChatQuery(
            user_id=user_id,
            query=query,
            intent=response.intent,
            matched_products=[p.product_id for p in response.products],
            response_type=response.type,
        )
        try:
            await self.audit.insert(record)
        except Exception as e:
            logger.warning("chatbot audit insert failed intent=%s err=%s", response.intent, e)

    async def chat_analytics(self, period: str = DEFAULT_ANALYTICS_PERIOD, *, now: Optional[datetime] = None) -> Dict[str, Any]:
        if period not in ANALYTICS_PERIOD_DAYS:
            period = DEFAULT_ANALYTICS_PERIOD
        since = (now or datetime.now(timezone.utc)) - timedelta(days=ANALYTICS_PERIOD_DAYS[period])

        t0 = time.perf_counter()
        result = {
            "period": period,
            "total_queries": await self.audit.count_since(since),
            "intent_distribution": await self.audit.intent_distribution(since),
            "response_type_distribution": await self.audit.response_type_distribution(since),
            "common_queries": await self.audit.common_queries(since),
            "top_products": await self.audit.top_products(since),
            "queries_by_time": await self.audit.queries_by_hour(since),
        }
        logger.info("chatbot analytics period=%s total=%s time=%.3fs", period, result["total_queries"], time.perf_counter() - t0)
        return result
