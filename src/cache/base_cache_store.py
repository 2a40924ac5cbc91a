# src/cache/base_cache_store.py - v1
"""Abstract recipe cache interface.

Every backend honours the same contract: a fingerprint maps to at most one
stored recipe, and stored recipes are never overwritten.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from alchemy4d.core.models import Recipe


class BaseRecipeCache(ABC):
    """Unified interface for recipe cache backends."""

    @abstractmethod
    async def get(self, fingerprint: str) -> Recipe | None:
        """Retrieve the recipe stored under a fingerprint."""

    @abstractmethod
    async def put_if_absent(self, fingerprint: str, recipe: Recipe) -> bool:
        """Store a recipe unless one already exists.

        Returns:
            True if inserted, False if an entry already existed (left untouched).
        """

    @abstractmethod
    async def list_entries(self) -> list[Recipe]:
        """List all stored recipes."""

    def close(self) -> None:
        """Release backend resources."""
