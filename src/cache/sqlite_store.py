# src/cache/sqlite_store.py - v1
"""SQLite-based recipe cache (CACHE_BACKEND=sqlite).

Uses stdlib sqlite3, no external dependency. Insert-if-absent maps to
``INSERT OR IGNORE`` on the fingerprint primary key.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from threading import Lock

from pydantic import ValidationError

from alchemy4d.cache.base_cache_store import BaseRecipeCache
from alchemy4d.core.models import Recipe

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS recipes (
    fingerprint TEXT PRIMARY KEY,
    data TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


class SqliteRecipeCache(BaseRecipeCache):
    """SQLite-backed recipe cache."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = Lock()
        # Served from the event loop thread and from test client threads.
        self._conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def get(self, fingerprint: str) -> Recipe | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT data FROM recipes WHERE fingerprint = ?", (fingerprint,)
            ).fetchone()
        if row is None:
            return None
        try:
            return Recipe(**json.loads(row[0]))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Failed to deserialize cache entry %s: %s", fingerprint, e)
            return None

    async def put_if_absent(self, fingerprint: str, recipe: Recipe) -> bool:
        with self._lock:
            cursor = self._conn.execute(
                "INSERT OR IGNORE INTO recipes (fingerprint, data) VALUES (?, ?)",
                (fingerprint, recipe.model_dump_json()),
            )
            self._conn.commit()
            return cursor.rowcount == 1

    async def list_entries(self) -> list[Recipe]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT data FROM recipes ORDER BY created_at, rowid"
            ).fetchall()
        entries: list[Recipe] = []
        for row in rows:
            try:
                entries.append(Recipe(**json.loads(row[0])))
            except (json.JSONDecodeError, ValidationError):
                continue
        return entries

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
