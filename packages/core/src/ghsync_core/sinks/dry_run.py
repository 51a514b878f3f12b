"""Dry-run sink: records what would be created/completed without touching Things."""

from __future__ import annotations

import itertools

from ghsync_core.sinks.base import BaseTaskSink


class DryRunSink(BaseTaskSink):
    def __init__(self):
        self._ids = itertools.count(1)
        self.created: list[str] = []
        self.completed: list[str] = []

    def _create(self, title: str, notes: str, tags: list[str]) -> str:
        self.created.append(title)
        return f"dry-run-{next(self._ids)}"

    def complete_task(self, task_id: str) -> None:
        self.completed.append(task_id)
