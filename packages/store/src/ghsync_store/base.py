"""Abstract mapping store interface.

Every backend (JSON file, SQLite, in-memory) implements this interface. The
reconciler and the daemon depend on BaseStore, not on a concrete backend, so
tests can run against InMemoryStore with the exact same contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ghsync_store.models import MappingTable, TaskMapping


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class BaseStore(ABC):
    """Durable key/value table of reconciliation key -> TaskMapping.

    Each mutating call is a full read-modify-write of the persisted table;
    no state is cached between calls. After a call returns, the table reflects
    that one operation fully or not at all.
    """

    @abstractmethod
    def load_table(self) -> MappingTable:
        """Return the whole persisted table.

        An unreadable or malformed backing file reads as an empty table;
        never raises for corruption.
        """

    @abstractmethod
    def upsert(self, mapping: TaskMapping) -> None:
        """Insert or replace the mapping for mapping.reconciliation_key."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete the mapping for key. Removing an absent key is a no-op."""

    @abstractmethod
    def mark_sync_success(self) -> None:
        """Set last_sync_at to now and clear last_error."""

    @abstractmethod
    def mark_sync_failure(self, message: str) -> None:
        """Record message as last_error. last_sync_at is left untouched."""

    def has(self, key: str) -> bool:
        return key in self.load_table().mappings

    def get(self, key: str) -> TaskMapping | None:
        return self.load_table().mappings.get(key)

    def list_mappings(self) -> list[TaskMapping]:
        return list(self.load_table().mappings.values())

    def close(self) -> None:
        """Release any resources held by the store.

        Default is a no-op so callers can always call close() safely.
        """
