"""Base task sink implementing the Template Method pattern.

All sinks render a remote item the same way:
    create_task() → format_title() + format_notes() + format_tags()
                  → _create()   ← only this differs per task manager

Subclasses implement two things only:
  - _create: make the task and return its durable identifier
  - complete_task: mark a previously created task as done

The reconciler only relies on the public pair create_task / complete_task:
either a usable task id comes back, or the call raises.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ghsync_core.models import ItemCategory, RemoteItem

_TITLE_PREFIXES = {
    ItemCategory.PR_REVIEW: "Review",
    ItemCategory.PR_CREATED: "PR",
    ItemCategory.ISSUE_ASSIGNED: "Issue",
    ItemCategory.ISSUE_CREATED: "My Issue",
}


class TaskSinkError(RuntimeError):
    """Raised when the task manager rejects or fails a create/complete call."""


class BaseTaskSink(ABC):
    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def create_task(self, item: RemoteItem) -> str:
        """Create a task for item and return its id."""
        return self._create(
            title=self.format_title(item),
            notes=self.format_notes(item),
            tags=self.format_tags(item),
        )

    @abstractmethod
    def complete_task(self, task_id: str) -> None:
        """Mark the task identified by task_id as done. Raise on failure."""

    # ------------------------------------------------------------------ #
    # Abstract: implement in each sink                                    #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _create(self, title: str, notes: str, tags: list[str]) -> str:
        """Create one task and return its id. Raise on failure."""

    # ------------------------------------------------------------------ #
    # Shared formatting                                                    #
    # ------------------------------------------------------------------ #

    @staticmethod
    def format_title(item: RemoteItem) -> str:
        prefix = _TITLE_PREFIXES[ItemCategory(item.category)]
        short_repo = item.repo.split("/")[-1] or item.repo
        return f"{prefix}: {item.title} ({short_repo})"

    @staticmethod
    def format_notes(item: RemoteItem) -> str:
        return f"{item.url}\n\nRepo: {item.repo}\n#{item.number}"

    @staticmethod
    def format_tags(item: RemoteItem) -> list[str]:
        category = ItemCategory(item.category)
        tags = ["github", "pr" if category.is_pr else "issue"]
        if category == ItemCategory.PR_REVIEW:
            tags.append("review")
        return tags
