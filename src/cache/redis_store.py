# src/cache/redis_store.py - v1
"""Redis-based recipe cache (CACHE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Suitable for multi-instance deployments; insert-if-absent maps to SET NX.
"""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from alchemy4d.cache.base_cache_store import BaseRecipeCache
from alchemy4d.core.models import Recipe

logger = logging.getLogger(__name__)

_KEY_PREFIX = "alchemy4d:recipe:"
_INDEX_KEY = "alchemy4d:recipe:__index__"


class RedisRecipeCache(BaseRecipeCache):
    """Redis-backed recipe cache."""

    def __init__(self, redis_url: str) -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = redis.Redis.from_url(redis_url, decode_responses=True)

    async def get(self, fingerprint: str) -> Recipe | None:
        data = self._client.get(f"{_KEY_PREFIX}{fingerprint}")
        if data is None:
            return None
        try:
            return Recipe(**json.loads(data))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Failed to deserialize cache entry %s: %s", fingerprint, e)
            return None

    async def put_if_absent(self, fingerprint: str, recipe: Recipe) -> bool:
        inserted = self._client.set(
            f"{_KEY_PREFIX}{fingerprint}", recipe.model_dump_json(), nx=True
        )
        if not inserted:
            return False
        # Index of all fingerprints for list_entries
        self._client.sadd(_INDEX_KEY, fingerprint)
        return True

    async def list_entries(self) -> list[Recipe]:
        entries: list[Recipe] = []
        for fingerprint in sorted(self._client.smembers(_INDEX_KEY)):
            recipe = await self.get(fingerprint)
            if recipe is not None:
                entries.append(recipe)
        return entries

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
