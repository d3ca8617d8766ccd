# shopreco/utils/cache.py
from __future__ import annotations

import hashlib
import json
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import TypeAdapter
from redis.asyncio import Redis

logger = logging.getLogger(__name__)


def make_key(prefix: str, params: Dict[str, Any]) -> str:
    """
    Deterministic cache key: `prefix` + md5 of the sorted JSON of every
    parameter that affects the result.
    """
    raw = json.dumps(params, sort_keys=True, separators=(",", ":"), default=str)
    return f"{prefix}:{hashlib.md5(raw.encode()).hexdigest()}"


class CacheAside:
    """
    Read-through cache over Redis with pattern invalidation.

    Values are stored as JSON. Lookups fail open: if Redis or
    (de)serialization breaks, the value is computed directly and the
    error only shows up in logs and in `stats`.
    """

    def __init__(self, redis: Optional[Redis]):
        self.redis = redis
        self.stats: Dict[str, int] = {"hits": 0, "misses": 0, "errors": 0}

    @property
    def enabled(self) -> bool:
        return self.redis is not None

    def _error(self, op: str, key: str, e: Exception) -> None:
        self.stats["errors"] += 1
        logger.warning("cache %s error key=%s err=%s", op, key, e)

    async def get_or_compute(
        self,
        key: str,
        ttl: int,
        compute: Callable[[], Awaitable[Any]],
        codec: Optional[TypeAdapter] = None,
    ) -> Any:
        """
        Return the cached value for `key`, or compute, store (TTL seconds) and return it.

        Presence is what counts: a cached `null`, `[]` or `0` is a hit.
        `compute` exceptions propagate; `compute` runs at most once per call.
        """
        if self.redis is None:
            return await compute()

        raw = None
        try:
            raw = await self.redis.get(key)
        except Exception as e:
            self._error("get", key, e)

        if raw is not None:
            try:
                data = json.loads(raw)
                value = codec.validate_python(data) if codec else data
                self.stats["hits"] += 1
                logger.debug("cache_hit key=%s", key)
                return value
            except Exception as e:
                self._error("decode", key, e)

        self.stats["misses"] += 1
        t0 = time.perf_counter()
        value = await compute()
        logger.debug("cache_miss key=%s compute_time=%.3fs", key, time.perf_counter() - t0)

        try:
            data = codec.dump_python(value, mode="json") if codec else value
            payload = json.dumps(data, default=str)
            await self.redis.set(key, payload, ex=ttl)
            logger.debug("cache_set key=%s ttl=%ss bytes=%s", key, ttl, len(payload))
        except Exception as e:
            self._error("set", key, e)
        return value

    async def invalidate(self, pattern: str) -> int:
        """
        Delete every key matching the glob `pattern`. Returns the number removed.
        Raises on Redis errors: callers invoke this explicitly after a write.
        """
        if self.redis is None:
            return 0
        keys = [k async for k in self.redis.scan_iter(match=pattern, count=500)]
        if not keys:
            logger.info("cache invalidate pattern=%s removed=0", pattern)
            return 0
        removed = await self.redis.delete(*keys)
        logger.info("cache invalidate pattern=%s removed=%s", pattern, removed)
        return int(removed)

    async def increment(self, key: str, ttl: int) -> int:
        """Best-effort counter; sets the TTL when the key is new. Returns 0 on failure."""
        if self.redis is None:
            return 0
        try:
            count = await self.redis.incr(key)
            if count == 1:
                await self.redis.expire(key, ttl)
            return int(count)
        except Exception as e:
            self._error("incr", key, e)
            return 0

    async def bump_member(self, key: str, member: str, ttl: int) -> None:
        """Best-effort sorted-set score increment (analytics leaderboards)."""
        if self.redis is None:
            return
        try:
            await self.redis.zincrby(key, 1, member)
            await self.redis.expire(key, ttl)
        except Exception as e:
            self._error("zincrby", key, e)

    async def ping(self) -> str:
        if self.redis is None:
            return "skipped"
        try:
            await self.redis.ping()
            return "ok"
        except Exception as e:
            return f"error: {e}"
