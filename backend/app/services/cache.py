"""
Redis Embedding Cache

Caches embedding vectors so repeated retrieval queries for the same job
description (proposal retries, chat re-asks) do not pay for another
embedding call.

Cache Key Pattern:
    - emb:{model}:{content_hash} - Embedding vectors (24hr TTL)

Every operation degrades to a miss when Redis is unavailable; the cache
never raises into the caller.

Usage:
    cache = get_embedding_cache()
    vector = await cache.get(model, text)
    if vector is None:
        vector = await embed(text)
        await cache.set(model, text, vector)
"""

import json
import hashlib
import logging
from typing import Any, List, Optional

import redis.asyncio as redis

from app.middleware.metrics import record_cache_hit, record_cache_miss

logger = logging.getLogger(__name__)

EMBEDDING_TTL = 86400  # 24 hours


def hash_content(*args: Any) -> str:
    """
    Generate a 16-character hex hash from content.

    Dict keys are sorted for consistent hashing.
    """
    content = json.dumps(args, sort_keys=True, default=str)
    return hashlib.sha256(content.encode()).hexdigest()[:16]


class EmbeddingCache:
    """
    Redis-backed embedding cache with graceful degradation.

    Hit and miss counts are exported as Prometheus counters.

    Attributes:
        redis: Async Redis client (connected lazily)
    """

    def __init__(self, redis_url: str, ttl: int = EMBEDDING_TTL):
        self.redis_url = redis_url
        self.ttl = ttl
        self.redis: Optional[redis.Redis] = None

    async def _ensure_connected(self) -> Optional[redis.Redis]:
        if self.redis is None:
            try:
                self.redis = redis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True
                )
            except Exception as e:
                logger.warning(f"Failed to connect to Redis: {e}")
                return None
        return self.redis

    @staticmethod
    def _key(model: str, text: str) -> str:
        return f"emb:{model}:{hash_content(text)}"

    async def get(self, model: str, text: str) -> Optional[List[float]]:
        """Return the cached vector for (model, text), or None on miss/error."""
        try:
            client = await self._ensure_connected()
            if not client:
                record_cache_miss("embedding")
                return None

            cached = await client.get(self._key(model, text))
            if cached:
                record_cache_hit("embedding")
                return json.loads(cached)

            record_cache_miss("embedding")
            return None

        except Exception as e:
            logger.warning(f"Redis get error (embedding cache): {e}")
            record_cache_miss("embedding")
            return None

    async def set(self, model: str, text: str, embedding: List[float]) -> bool:
        """Cache a vector. Returns False when Redis is unavailable."""
        try:
            client = await self._ensure_connected()
            if not client:
                return False

            await client.setex(self._key(model, text), self.ttl, json.dumps(embedding))
            return True

        except Exception as e:
            logger.warning(f"Redis set error (embedding cache): {e}")
            return False

    async def close(self) -> None:
        if self.redis:
            await self.redis.close()
            self.redis = None


# ==================== Factory Function ====================

_cache_instance: Optional[EmbeddingCache] = None


def get_embedding_cache(redis_url: Optional[str] = None) -> EmbeddingCache:
    """Get or create the embedding cache singleton."""
    global _cache_instance

    if _cache_instance is None:
        from app.config import get_settings

        url = redis_url or get_settings().redis_url
        _cache_instance = EmbeddingCache(redis_url=url)

    return _cache_instance
