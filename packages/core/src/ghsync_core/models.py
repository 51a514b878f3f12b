"""Remote item model and reconciliation key."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ItemCategory(str, Enum):
    PR_REVIEW = "pr-review"  # PR where you're requested as reviewer
    PR_CREATED = "pr-created"  # PR you opened
    ISSUE_ASSIGNED = "issue-assigned"  # issue assigned to you
    ISSUE_CREATED = "issue-created"  # issue you opened

    @property
    def is_pr(self) -> bool:
        return self.value.startswith("pr-")


# Config-facing sync type -> category it produces.
SYNC_TYPES: dict[str, ItemCategory] = {
    "pr-reviews": ItemCategory.PR_REVIEW,
    "prs-created": ItemCategory.PR_CREATED,
    "issues-assigned": ItemCategory.ISSUE_ASSIGNED,
    "issues-created": ItemCategory.ISSUE_CREATED,
}
ALL_SYNC_TYPES: list[str] = list(SYNC_TYPES)


@dataclass
class RemoteItem:
    """An open pull request or issue matching the sync filters."""

    id: int
    category: ItemCategory
    title: str
    url: str
    repo: str  # "owner/name"
    number: int
    state: str = "open"
    created_at: str = ""
    updated_at: str = ""


def reconciliation_key(item: RemoteItem) -> str:
    """Return the mapping-table key for item: "pr:<id>" or "issue:<id>".

    The bucket, not the full category, is part of the key so a PR that is
    both authored by me and awaiting my review is tracked once.
    """
    bucket = "pr" if ItemCategory(item.category).is_pr else "issue"
    return f"{bucket}:{item.id}"


@dataclass
class ReconcileResult:
    """Counts and item-level errors from one reconciliation pass."""

    created: int = 0
    completed: int = 0
    unchanged: int = 0
    errors: list[str] = field(default_factory=list)
