# shopreco/core/lifespan.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from shopreco.core.config import get_settings
from shopreco.core.container import build_container
from shopreco.db import mongo, redis as r

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # --- Startup ---
    # Mongo is required
    try:
        await mongo.connect()
    except Exception as e:
        logger.error("Mongo connection failed: %s", e)
        raise

    # Redis is optional
    await r.connect()

    app.state.container = build_container(settings, mongo.get_db(), r.get_redis())
    logger.info("%s started env=%s", settings.APP_NAME, settings.APP_ENV)

    yield

    # --- Shutdown ---
    try:
        await r.disconnect()
    except Exception as e:
        logger.warning("Redis disconnect failed: %s", e)

    await mongo.disconnect()
    logger.info("Mongo disconnected")
