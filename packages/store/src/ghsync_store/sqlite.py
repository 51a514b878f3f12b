"""SQLiteStore: mapping table in a local SQLite database file.

Selected with `store: sqlite` in config.yml. Same contract as JSONFileStore,
but each mutation is a single committed statement instead of a whole-file
rewrite, so a crash mid-write cannot truncate the table.

Schema:
  mappings     one row per tracked reconciliation key.
  sync_status  a single row (id = 1) holding last_sync_at / last_error.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from pathlib import Path

from ghsync_store.base import BaseStore, utc_now
from ghsync_store.models import MappingTable, TaskMapping

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS mappings (
    reconciliation_key  TEXT PRIMARY KEY,
    task_id             TEXT NOT NULL,
    category            TEXT,
    title               TEXT,
    url                 TEXT,
    created_at          TEXT,
    completed_at        TEXT
);
CREATE TABLE IF NOT EXISTS sync_status (
    id              INTEGER PRIMARY KEY CHECK (id = 1),
    last_sync_at    TEXT,
    last_error      TEXT
);
INSERT OR IGNORE INTO sync_status (id, last_sync_at, last_error) VALUES (1, NULL, NULL);
"""


class SQLiteStore(BaseStore):
    """Stores the mapping table in a SQLite database file."""

    def __init__(self, db_path: str | Path):
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = self._connect()
        except sqlite3.DatabaseError as e:
            corrupt = self._db_path.with_name(self._db_path.name + ".corrupt")
            logger.warning("Unreadable database %s (%s); moved to %s, starting empty", self._db_path, e, corrupt)
            os.replace(self._db_path, corrupt)
            self._conn = self._connect()
        os.chmod(self._db_path, 0o600)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path))
        conn.row_factory = sqlite3.Row
        try:
            conn.executescript(_SCHEMA)
            conn.commit()
        except sqlite3.DatabaseError:
            conn.close()
            raise
        return conn

    def load_table(self) -> MappingTable:
        rows = self._conn.execute("SELECT * FROM mappings ORDER BY created_at").fetchall()
        status = self._conn.execute("SELECT last_sync_at, last_error FROM sync_status WHERE id = 1").fetchone()
        return MappingTable(
            mappings={r["reconciliation_key"]: self._row_to_mapping(r) for r in rows},
            last_sync_at=status["last_sync_at"] if status else None,
            last_error=status["last_error"] if status else None,
        )

    def has(self, key: str) -> bool:
        row = self._conn.execute("SELECT 1 FROM mappings WHERE reconciliation_key=?", (key,)).fetchone()
        return row is not None

    def get(self, key: str) -> TaskMapping | None:
        row = self._conn.execute("SELECT * FROM mappings WHERE reconciliation_key=?", (key,)).fetchone()
        return self._row_to_mapping(row) if row else None

    def upsert(self, mapping: TaskMapping) -> None:
        self._conn.execute(
            """
            INSERT OR REPLACE INTO mappings
              (reconciliation_key, task_id, category, title, url, created_at, completed_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                mapping.reconciliation_key,
                mapping.task_id,
                mapping.category,
                mapping.title,
                mapping.url,
                mapping.created_at,
                mapping.completed_at,
            ),
        )
        self._conn.commit()

    def remove(self, key: str) -> None:
        self._conn.execute("DELETE FROM mappings WHERE reconciliation_key=?", (key,))
        self._conn.commit()

    def mark_sync_success(self) -> None:
        self._conn.execute("UPDATE sync_status SET last_sync_at=?, last_error=NULL WHERE id = 1", (utc_now(),))
        self._conn.commit()

    def mark_sync_failure(self, message: str) -> None:
        self._conn.execute("UPDATE sync_status SET last_error=? WHERE id = 1", (message,))
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    @staticmethod
    def _row_to_mapping(row: sqlite3.Row) -> TaskMapping:
        return TaskMapping(
            reconciliation_key=row["reconciliation_key"],
            task_id=row["task_id"],
            category=row["category"] or "",
            title=row["title"] or "",
            url=row["url"] or "",
            created_at=row["created_at"] or "",
            completed_at=row["completed_at"],
        )
