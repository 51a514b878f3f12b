"""In-memory store, used by tests and `ghsync sync --dry-run`.

Holds the table as a serialised dict so that callers get fresh copies on
every read, just like the file-backed stores.
"""

from __future__ import annotations

import copy

from ghsync_store.base import BaseStore, utc_now
from ghsync_store.models import MappingTable, TaskMapping


class InMemoryStore(BaseStore):
    """Mapping table that lives only as long as the process."""

    def __init__(self, table: MappingTable | None = None):
        self._data = (table or MappingTable()).to_dict()

    def load_table(self) -> MappingTable:
        return MappingTable.from_dict(copy.deepcopy(self._data))

    def upsert(self, mapping: TaskMapping) -> None:
        self._data["mappings"][mapping.reconciliation_key] = mapping.to_dict()

    def remove(self, key: str) -> None:
        self._data["mappings"].pop(key, None)

    def mark_sync_success(self) -> None:
        self._data["lastSyncAt"] = utc_now()
        self._data["lastError"] = None

    def mark_sync_failure(self, message: str) -> None:
        self._data["lastError"] = message
