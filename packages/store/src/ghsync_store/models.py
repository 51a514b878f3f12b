"""Mapping table data models.

Decoupled from ghsync_core so the store layer can be used independently:
a mapping only records what was created, never how items were fetched.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class TaskMapping:
    """Link between a reconciliation key and the task created for it.

    title/url/category are a snapshot taken at creation time and are never
    re-synced from the remote item.
    """

    reconciliation_key: str  # "pr:<id>" | "issue:<id>"
    task_id: str
    category: str
    title: str
    url: str
    created_at: str  # ISO-8601 UTC timestamp
    completed_at: str | None = None

    def to_dict(self) -> dict:
        return {
            "reconciliationKey": self.reconciliation_key,
            "taskId": self.task_id,
            "category": self.category,
            "title": self.title,
            "url": self.url,
            "createdAt": self.created_at,
            "completedAt": self.completed_at,
        }

    @classmethod
    def from_dict(cls, d: dict, key: str | None = None) -> TaskMapping:
        """Build a mapping from its JSON form; key, when given, wins over the embedded field."""
        task_id = d.get("taskId")
        return cls(
            reconciliation_key=key or d.get("reconciliationKey") or "",
            task_id="" if task_id is None else str(task_id),
            category=d.get("category", ""),
            title=d.get("title", ""),
            url=d.get("url", ""),
            created_at=d.get("createdAt", ""),
            completed_at=d.get("completedAt"),
        )


@dataclass
class MappingTable:
    """The full persisted state: active mappings plus last-sync bookkeeping."""

    mappings: dict[str, TaskMapping] = field(default_factory=dict)
    last_sync_at: str | None = None
    last_error: str | None = None

    def to_dict(self) -> dict:
        return {
            "mappings": {key: m.to_dict() for key, m in self.mappings.items()},
            "lastSyncAt": self.last_sync_at,
            "lastError": self.last_error,
        }

    @classmethod
    def from_dict(cls, d: dict) -> MappingTable:
        raw = d.get("mappings") or {}
        if not isinstance(raw, dict):
            raise ValueError("mappings must be an object")
        return cls(
            mappings={key: TaskMapping.from_dict(m, key=key) for key, m in raw.items()},
            last_sync_at=d.get("lastSyncAt"),
            last_error=d.get("lastError"),
        )
