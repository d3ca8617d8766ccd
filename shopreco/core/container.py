# shopreco/core/container.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from redis.asyncio import Redis

from shopreco.core.config import Settings
from shopreco.domain.repositories.bundle_repo import BundleRepo
from shopreco.domain.repositories.chat_query_repo import ChatQueryRepo
from shopreco.domain.repositories.order_repo import OrderRepo
from shopreco.domain.repositories.product_repo import ProductRepo
from shopreco.domain.services.bundle_svc import BundleService
from shopreco.domain.services.catalog_svc import CatalogService
from shopreco.domain.services.chatbot_svc import ChatbotService
from shopreco.domain.services.classifier import Classifier, build_classifier
from shopreco.domain.services.recommendation_svc import RecommendationService
from shopreco.domain.services.resolver import RecommendationResolver
from shopreco.domain.services.trending_svc import TrendingService
from shopreco.utils.cache import CacheAside


@dataclass
class Container:
    """Everything a request needs, built once at startup."""
    settings: Settings
    db: AsyncIOMotorDatabase
    cache: CacheAside
    chatbot: ChatbotService
    bundles: BundleService
    trending: TrendingService
    recommendations: RecommendationService
    catalog: CatalogService


def build_container(
    settings: Settings,
    db: AsyncIOMotorDatabase,
    redis: Optional[Redis],
    classifier: Optional[Classifier] = None,
) -> Container:
    cache = CacheAside(redis)
    products = ProductRepo(db)
    orders = OrderRepo(db)

    if classifier is None:
        classifier = build_classifier(
            settings.OPENAI_API_KEY,
            model=settings.OPENAI_CLASSIFIER_MODEL,
            timeout_s=settings.classifier_timeout_s,
            max_tokens=settings.classifier_max_tokens,
        )

    resolver = RecommendationResolver(products, cache, ttl=settings.chat_cache_ttl)
    trending = TrendingService(products, orders, cache, ttl=settings.trending_cache_ttl)

    return Container(
        settings=settings,
        db=db,
        cache=cache,
        chatbot=ChatbotService(classifier, resolver, ChatQueryRepo(db)),
        bundles=BundleService(products, BundleRepo(db), cache, ttl=settings.bundles_cache_ttl),
        trending=trending,
        recommendations=RecommendationService(products, orders, trending, cache, settings),
        catalog=CatalogService(products, cache, ttl=settings.products_cache_ttl),
    )
