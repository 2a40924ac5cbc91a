# src/cache/json_store.py - v1
"""JSON file-based recipe cache (CACHE_BACKEND=json).

Stores one JSON file per fingerprint under the cache root. Inserts are
written to a temporary file and hard-linked into place, so a reader never
sees a partial file and an existing entry is never replaced.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from alchemy4d.cache.base_cache_store import BaseRecipeCache
from alchemy4d.core.models import Recipe

logger = logging.getLogger(__name__)


class JsonRecipeCache(BaseRecipeCache):
    """File-based cache store using JSON files."""

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    async def get(self, fingerprint: str) -> Recipe | None:
        """Retrieve a recipe by fingerprint."""
        path = self._entry_path(fingerprint)
        if not path.exists():
            return None
        try:
            return Recipe(**json.loads(path.read_text(encoding="utf-8")))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Failed to read cache entry %s: %s", fingerprint, e)
            return None

    async def put_if_absent(self, fingerprint: str, recipe: Recipe) -> bool:
        """Store a recipe unless the fingerprint file already exists."""
        path = self._entry_path(fingerprint)
        if path.exists():
            return False
        fd, tmp_name = tempfile.mkstemp(dir=self._root, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(recipe.model_dump_json(indent=2))
            os.link(tmp_name, path)
        except FileExistsError:
            return False
        finally:
            os.unlink(tmp_name)
        return True

    async def list_entries(self) -> list[Recipe]:
        """List all cached recipes."""
        entries: list[Recipe] = []
        for path in sorted(self._root.glob("*.json")):
            try:
                entries.append(Recipe(**json.loads(path.read_text(encoding="utf-8"))))
            except (json.JSONDecodeError, ValidationError) as e:
                logger.warning("Skipping unreadable cache file %s: %s", path.name, e)
        return entries

    def _entry_path(self, fingerprint: str) -> Path:
        """Return file path for a fingerprint."""
        safe_key = fingerprint.replace("/", "_").replace("\\", "_")
        return self._root / f"{safe_key}.json"
