from __future__ import annotations

import json
import logging
import os
import sqlite3
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from .ranking import RankingEntry, entries_from_json, entries_to_json

logger = logging.getLogger(__name__)

RANKINGS_NAMESPACE = 'memory-match:rankings'


def _open(db_path: str) -> sqlite3.Connection:
    """Connects to db_path, creating its parent directory on first use."""
    directory = os.path.dirname(db_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return sqlite3.connect(db_path)


def _ensure_db(conn: sqlite3.Connection) -> None:
    """Ensures the key/value table used for namespaced blobs exists."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS kv (
            namespace TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """
    )
    conn.commit()


def db_load_value(db_path: str, namespace: str) -> Optional[str]:
    """Returns the raw stored text for a namespace, or None when absent."""
    conn = _open(db_path)
    try:
        _ensure_db(conn)
        row = conn.execute("SELECT value FROM kv WHERE namespace = ?", (namespace,)).fetchone()
        return row[0] if row else None
    finally:
        conn.close()


def db_store_value(db_path: str, namespace: str, value: str) -> None:
    conn = _open(db_path)
    try:
        _ensure_db(conn)
        conn.execute(
            "INSERT OR REPLACE INTO kv (namespace, value, updated_at) VALUES (?, ?, ?)",
            (
                namespace,
                value,
                datetime.now(timezone.utc).isoformat(timespec='seconds').replace('+00:00', 'Z'),
            ),
        )
        conn.commit()
    finally:
        conn.close()


def db_load_rankings(db_path: str, namespace: str = RANKINGS_NAMESPACE) -> List[RankingEntry]:
    """Loads the stored table; missing or malformed data yields an empty list."""
    try:
        raw = db_load_value(db_path, namespace)
    except sqlite3.Error as exc:
        logger.warning("rankings db unreadable at %s: %s", db_path, exc)
        return []
    if raw is None:
        return []
    try:
        return entries_from_json(json.loads(raw))
    except (ValueError, TypeError) as exc:
        # json.JSONDecodeError is a ValueError
        logger.warning("discarding malformed rankings in %s: %s", db_path, exc)
        return []


def db_store_rankings(db_path: str, entries: Iterable[RankingEntry], namespace: str = RANKINGS_NAMESPACE) -> None:
    db_store_value(db_path, namespace, json.dumps(entries_to_json(entries), ensure_ascii=False))


class SqliteRankingStorage:
    """Storage adapter for RankingStore backed by a single SQLite file."""

    def __init__(self, db_path: str, namespace: str = RANKINGS_NAMESPACE) -> None:
        self.db_path = db_path
        self.namespace = namespace

    def load(self) -> List[RankingEntry]:
        return db_load_rankings(self.db_path, self.namespace)

    def save(self, entries: Iterable[RankingEntry]) -> None:
        db_store_rankings(self.db_path, entries, self.namespace)

    def __repr__(self) -> str:
        return f"SqliteRankingStorage({self.db_path!r}, {self.namespace!r})"


def open_storage(db_path: Optional[str]) -> Optional[Any]:
    """Returns a storage for a configured path, or None for in-memory play."""
    if not db_path:
        return None
    return SqliteRankingStorage(db_path)
