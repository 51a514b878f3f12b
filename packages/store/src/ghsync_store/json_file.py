"""JSONFileStore: the default single-file mapping table.

Data format: one JSON object per user, normally ~/.ghsync/state.json:

    {"mappings": {"pr:123": {...}}, "lastSyncAt": "...", "lastError": null}

Every call re-reads the file and every mutation rewrites it in full. Nothing
is cached between calls, so an ad hoc `ghsync sync` and the daemon see each
other's writes (but can still lose updates if they interleave).
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from ghsync_store.base import BaseStore, utc_now
from ghsync_store.models import MappingTable, TaskMapping

logger = logging.getLogger(__name__)

_FILE_MODE = 0o600


class JSONFileStore(BaseStore):
    """Stores the mapping table in a single JSON file.

    The file sits next to the credential config, so it is written with
    owner-only permissions.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load_table(self) -> MappingTable:
        if not self._path.exists():
            return MappingTable()
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(payload, dict):
                raise ValueError("state file is not a JSON object")
            return MappingTable.from_dict(payload)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            # json.JSONDecodeError is a ValueError.
            logger.warning("Unreadable state file %s, starting from an empty table: %s", self._path, e)
            return MappingTable()

    def upsert(self, mapping: TaskMapping) -> None:
        table = self.load_table()
        table.mappings[mapping.reconciliation_key] = mapping
        self._save(table)

    def remove(self, key: str) -> None:
        table = self.load_table()
        if table.mappings.pop(key, None) is not None:
            self._save(table)

    def mark_sync_success(self) -> None:
        table = self.load_table()
        table.last_sync_at = utc_now()
        table.last_error = None
        self._save(table)

    def mark_sync_failure(self, message: str) -> None:
        table = self.load_table()
        table.last_error = message
        self._save(table)

    def _save(self, table: MappingTable) -> None:
        """Write the table to a temp file in the same directory, then swap it in."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=str(self._path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(table.to_dict(), f, indent=2)
            os.chmod(tmp_name, _FILE_MODE)
            os.replace(tmp_name, self._path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
