# src/cache/memory_store.py - v1
"""In-memory recipe cache (CACHE_BACKEND=memory, the default).

Process-local. Optionally bounded: with ``max_entries`` > 0 the least
recently used entry is evicted once the cap is exceeded.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from threading import Lock

from alchemy4d.cache.base_cache_store import BaseRecipeCache
from alchemy4d.core.models import Recipe

logger = logging.getLogger(__name__)


class MemoryRecipeCache(BaseRecipeCache):
    """Dict-backed cache with insert-if-absent semantics and optional LRU cap."""

    def __init__(self, max_entries: int = 0) -> None:
        if max_entries < 0:
            raise ValueError("max_entries must be >= 0")
        self._max_entries = max_entries
        self._lock = Lock()
        self._data: OrderedDict[str, Recipe] = OrderedDict()

    async def get(self, fingerprint: str) -> Recipe | None:
        with self._lock:
            recipe = self._data.get(fingerprint)
            if recipe is not None:
                self._data.move_to_end(fingerprint)
            return recipe

    async def put_if_absent(self, fingerprint: str, recipe: Recipe) -> bool:
        with self._lock:
            if fingerprint in self._data:
                return False
            self._data[fingerprint] = recipe
            if self._max_entries and len(self._data) > self._max_entries:
                evicted, _ = self._data.popitem(last=False)
                logger.debug("Evicted recipe %s (cap=%d)", evicted[:12], self._max_entries)
            return True

    async def list_entries(self) -> list[Recipe]:
        with self._lock:
            return list(self._data.values())

    def __len__(self) -> int:
        return len(self._data)
