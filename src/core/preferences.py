"""
Key-value preference stores for saved table settings.

A preference store maps ``(persistence_key, field)`` to a JSON-compatible
value. ``set`` merges the given fields into what is already stored for the
key. Stores are best-effort: callers treat any exception as a failed
operation and keep their in-memory state.
"""
from __future__ import annotations

import copy
import json
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol

from core.timestamps import utc_now

logger = logging.getLogger(__name__)

__all__ = [
    "MemoryPreferenceStore",
    "PreferenceStore",
    "SqlitePreferenceStore",
]


class PreferenceStore(Protocol):
    """Opaque get/set store for persisted table preferences."""

    def get(self, persistence_key: str, field: str) -> Optional[Any]:
        """Return the stored value, or None when nothing is saved."""
        ...

    def set(self, persistence_key: str, values: Mapping[str, Any]) -> None:
        """Merge ``values`` into the fields stored under ``persistence_key``."""
        ...


class MemoryPreferenceStore:
    """In-process store, mainly for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[Mapping[str, Mapping[str, Any]]] = None):
        self._data: Dict[str, Dict[str, Any]] = {
            key: copy.deepcopy(dict(fields)) for key, fields in (initial or {}).items()
        }
        self.writes: List[tuple[str, Dict[str, Any]]] = []

    def get(self, persistence_key: str, field: str) -> Optional[Any]:
        value = self._data.get(persistence_key, {}).get(field)
        return copy.deepcopy(value)

    def set(self, persistence_key: str, values: Mapping[str, Any]) -> None:
        payload = copy.deepcopy(dict(values))
        self.writes.append((persistence_key, payload))
        self._data.setdefault(persistence_key, {}).update(payload)

    def keys(self) -> List[str]:
        return sorted(self._data)


class SqlitePreferenceStore:
    """
    Preference store backed by a SQLite file.

    Each call opens its own connection so the store can be used from
    worker threads.
    """

    TABLE = "table_preferences"

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _ensure_schema(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with closing(self._connect()) as conn, conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self.TABLE} (
                    persistence_key TEXT NOT NULL,
                    field TEXT NOT NULL,
                    value_json TEXT NOT NULL,
                    updated_at_utc TEXT NOT NULL,
                    PRIMARY KEY (persistence_key, field)
                )
                """
            )

    def get(self, persistence_key: str, field: str) -> Optional[Any]:
        with closing(self._connect()) as conn:
            row = conn.execute(
                f"SELECT value_json FROM {self.TABLE} WHERE persistence_key = ? AND field = ?",
                (persistence_key, field),
            ).fetchone()
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError:
            logger.warning("Discarding corrupt preference %s/%s", persistence_key, field)
            return None

    def set(self, persistence_key: str, values: Mapping[str, Any]) -> None:
        stamp = utc_now()
        rows = [
            (persistence_key, field, json.dumps(value, sort_keys=True), stamp)
            for field, value in values.items()
        ]
        with closing(self._connect()) as conn, conn:
            conn.executemany(
                f"""
                INSERT INTO {self.TABLE} (persistence_key, field, value_json, updated_at_utc)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(persistence_key, field)
                DO UPDATE SET value_json = excluded.value_json,
                              updated_at_utc = excluded.updated_at_utc
                """,
                rows,
            )

    def keys(self) -> List[str]:
        with closing(self._connect()) as conn:
            rows = conn.execute(
                f"SELECT DISTINCT persistence_key FROM {self.TABLE} ORDER BY persistence_key"
            ).fetchall()
        return [row[0] for row in rows]
