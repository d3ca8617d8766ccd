# shopreco/db/mongo.py
import logging

import certifi
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from shopreco.core.config import get_settings

logger = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None


def get_client() -> AsyncIOMotorClient:
    assert _client is not None, "Mongo client not initialized"
    return _client


def get_db() -> AsyncIOMotorDatabase:
    assert _db is not None, "Mongo DB not initialized"
    return _db


def _new_client() -> AsyncIOMotorClient:
    settings = get_settings()
    kwargs = dict(
        uuidRepresentation="standard",
        serverSelectionTimeoutMS=settings.mongo_timeout_ms,
        connectTimeoutMS=settings.mongo_timeout_ms,
        socketTimeoutMS=settings.mongo_timeout_ms,  # no query blocks longer than this
    )
    if settings.MONGO_TLS:
        kwargs.update(tls=True, tlsCAFile=certifi.where())
    return AsyncIOMotorClient(settings.MONGO_URI, **kwargs)


async def connect():
    """
    Create the Motor client.
    The initial ping is soft: on failure a lazy client is kept so that
    requests can succeed once the cluster becomes reachable.
    """
    global _client, _db
    settings = get_settings()

    _client = _new_client()
    _db = _client[settings.MONGO_DB]
    try:
        await _client.admin.command("ping")
        logger.info("Mongo connected (ping ok) db=%s", settings.MONGO_DB)
    except Exception as e:
        logger.warning("Mongo ping at startup failed, will connect lazily on first query: %s", e)


async def disconnect():
    global _client, _db
    if _client:
        _client.close()
    _client = None
    _db = None
