from fastapi import FastAPI
from shopreco.core.config import get_settings
from shopreco.core.lifespan import lifespan
from shopreco.api.v1.routers.health import router as health_router
from shopreco.api.v1.routers.chatbot import router as chatbot_router
from shopreco.api.v1.routers.products import router as products_router
from shopreco.api.v1.routers.recommendations import router as recommendations_router
from shopreco.api.v1.routers.cache import router as cache_router
from shopreco.core.logging import configure_logging

from fastapi.middleware.cors import CORSMiddleware
import logging, os

settings = get_settings()
configure_logging(level=logging.DEBUG if settings.DEBUG else logging.INFO)


def create_app() -> FastAPI:
    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

    # ------- CORS -------
    # ALLOWED_ORIGINS is a CSV, e.g. "https://shop.example.com,https://www.shop.example.com"
    allowed_origins_env = os.getenv("ALLOWED_ORIGINS", "")
    allowed_origins = [o.strip() for o in allowed_origins_env.split(",") if o.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["http://localhost:3000"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        max_age=86400,
    )

    # ------- Routes -------
    app.include_router(health_router)
    app.include_router(chatbot_router)           # chatbot + analytics
    app.include_router(products_router)          # listing, bundles, trending
    app.include_router(recommendations_router)   # recommendations + smart
    app.include_router(cache_router)             # admin cache clear
    return app


app = create_app()
