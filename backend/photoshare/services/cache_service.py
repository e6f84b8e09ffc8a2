"""
PhotoShare Backend — Photo Read Cache (Redis)
===============================================

What:  Optional key/value cache for photo list pages and single-photo reads.
Why:   The list query aggregates four tables per page; serving repeat reads
       from Redis keeps the gallery cheap under load.
How:   JSON values with a fixed TTL via redis.asyncio. Disabled entirely when
       REDIS_URL is unset.

Keys:
    photos:list:page:{page}:limit:{limit}   list pages
    photos:single:{id}                      anonymous single-photo reads

Invalidation:
    Only photo create/delete calls clear_photo_cache(), which removes every
    key matching photos:*. Ratings, likes and comments do not invalidate, so
    counts may lag by up to CACHE_TTL_SECONDS.

Failure policy:
    Every operation logs and swallows errors. A cache outage degrades to
    "always miss"; it never fails a request and nothing is retried.
"""

import json
import logging
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from photoshare.config import settings

logger = logging.getLogger(__name__)

PHOTO_KEY_PATTERN = "photos:*"


def photo_list_key(page: int, limit: int) -> str:
    return f"photos:list:page:{page}:limit:{limit}"


def photo_single_key(photo_id: Any) -> str:
    return f"photos:single:{photo_id}"


class CacheService:
    """Thin fire-and-forget wrapper around a redis.asyncio client."""

    def __init__(self, url: Optional[str] = None, client: Optional[redis.Redis] = None):
        self.url = url if url is not None else settings.redis_url
        self._client = client

    @property
    def enabled(self) -> bool:
        return self._client is not None or bool(self.url)

    def _get_client(self) -> Optional[redis.Redis]:
        if self._client is None and self.url:
            # No connection is made here; redis-py connects on first command
            self._client = redis.from_url(
                self.url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
        return self._client

    async def get(self, key: str) -> Optional[Any]:
        client = self._get_client()
        if client is None:
            return None
        try:
            data = await client.get(key)
        except RedisError as e:
            logger.warning("Cache get failed for %s: %s", key, str(e))
            return None
        if not data:
            return None
        try:
            return json.loads(data)
        except ValueError:
            logger.warning("Discarding undecodable cache entry %s", key)
            return None

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        client = self._get_client()
        if client is None:
            return
        try:
            await client.set(
                key,
                json.dumps(value, default=str),
                ex=ttl_seconds or settings.cache_ttl_seconds,
            )
        except RedisError as e:
            logger.warning("Cache set failed for %s: %s", key, str(e))

    async def clear_photo_cache(self) -> int:
        """Deletes every photos:* key; returns how many were removed."""
        client = self._get_client()
        if client is None:
            return 0
        try:
            keys = [key async for key in client.scan_iter(match=PHOTO_KEY_PATTERN, count=500)]
            if keys:
                await client.delete(*keys)
                logger.info("Cleared %d photo cache entries", len(keys))
            return len(keys)
        except RedisError as e:
            logger.warning("Clearing photo cache failed: %s", str(e))
            return 0

    async def ping(self) -> str:
        """connected | disconnected | disabled, for the health endpoint."""
        client = self._get_client()
        if client is None:
            return "disabled"
        try:
            await client.ping()
            return "connected"
        except RedisError as e:
            logger.warning("Cache ping failed: %s", str(e))
            return "disconnected"

    async def close(self) -> None:
        if self._client is not None:
            try:
                await self._client.aclose()
            except RedisError as e:
                logger.warning("Closing cache client failed: %s", str(e))
            self._client = None


# ── Singleton Instance ────────────────────────────────────────────────────
cache_service = CacheService()
