# src/cache/cache_factory.py - v1
"""Factory for recipe cache instantiation.

Called once at process start; the resulting cache is injected into the
craft coordinator.
"""

from __future__ import annotations

from alchemy4d.cache.base_cache_store import BaseRecipeCache
from alchemy4d.config.settings import Settings


def create_recipe_cache(settings: Settings | None = None) -> BaseRecipeCache:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to an unbounded in-memory cache.

    Returns:
        Configured BaseRecipeCache implementation.
    """
    backend = "memory" if settings is None else settings.cache_backend

    if backend == "memory":
        from alchemy4d.cache.memory_store import MemoryRecipeCache
        max_entries = 0 if settings is None else settings.cache_max_entries
        return MemoryRecipeCache(max_entries=max_entries)

    assert settings is not None

    if backend == "json":
        from alchemy4d.cache.json_store import JsonRecipeCache
        return JsonRecipeCache(cache_root=settings.cache_root)

    if backend == "sqlite":
        from alchemy4d.cache.sqlite_store import SqliteRecipeCache
        return SqliteRecipeCache(db_path=settings.cache_root / "recipes.db")

    if backend == "redis":
        from alchemy4d.cache.redis_store import RedisRecipeCache
        if not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        return RedisRecipeCache(redis_url=settings.cache_redis_url)

    raise ValueError(f"Unsupported cache backend: {backend!r}")
