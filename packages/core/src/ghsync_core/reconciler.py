"""Core reconciliation between open remote items and the mapping table."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from ghsync_core.models import ReconcileResult, RemoteItem, reconciliation_key
from ghsync_store.base import utc_now
from ghsync_store.models import TaskMapping

if TYPE_CHECKING:
    from ghsync_core.sinks.base import BaseTaskSink
    from ghsync_store.base import BaseStore

logger = logging.getLogger(__name__)


class ItemSource(Protocol):
    def fetch_open_items(self) -> list[RemoteItem]: ...


class Reconciler:
    """Three-way diff of open items against the mapping table.

    new       → create a task, record the mapping immediately
    unchanged → skip, the snapshot is never refreshed
    stale     → complete the task, then drop the mapping

    Item-level failures are collected in ReconcileResult.errors and never
    raised; the failed key is simply left for the next pass.
    """

    def __init__(self, store: BaseStore, sink: BaseTaskSink):
        self._store = store
        self._sink = sink

    def reconcile(self, open_items: list[RemoteItem]) -> ReconcileResult:
        result = ReconcileResult()
        open_keys = {reconciliation_key(item) for item in open_items}

        for item in open_items:
            self._create_pass_item(item, result)

        # Reload so mappings written above are visible to the completion pass.
        for mapping in self._store.list_mappings():
            if mapping.reconciliation_key in open_keys:
                continue
            self._complete_pass_item(mapping, result)

        return result

    def _create_pass_item(self, item: RemoteItem, result: ReconcileResult) -> None:
        key = reconciliation_key(item)
        if self._store.has(key):
            result.unchanged += 1
            logger.debug("Already tracked: %s", item.title)
            return

        try:
            task_id = self._sink.create_task(item)
        except Exception as e:
            msg = f"Failed to create task for {item.title}: {e}"
            result.errors.append(msg)
            logger.warning(msg)
            return

        self._store.upsert(
            TaskMapping(
                reconciliation_key=key,
                task_id=task_id,
                category=getattr(item.category, "value", item.category),
                title=item.title,
                url=item.url,
                created_at=utc_now(),
            )
        )
        result.created += 1
        logger.info("Created task: %s", item.title)

    def _complete_pass_item(self, mapping: TaskMapping, result: ReconcileResult) -> None:
        try:
            self._sink.complete_task(mapping.task_id)
        except Exception as e:
            msg = f"Failed to complete task {mapping.title}: {e}"
            result.errors.append(msg)
            logger.warning(msg)
            return

        self._store.remove(mapping.reconciliation_key)
        result.completed += 1
        logger.info("Completed task: %s", mapping.title)


def run_sync(source: ItemSource, sink: BaseTaskSink, store: BaseStore) -> ReconcileResult:
    """Perform exactly one reconciliation pass.

    Used by both `ghsync sync` and every daemon tick. Any exception that
    escapes the pass (a fetch failure, a store write error) is recorded as
    the store's last_error and re-raised; last_sync_at is left as it was.
    A failed fetch leaves the mapping table untouched.
    """
    try:
        open_items = source.fetch_open_items()
        logger.info("Found %d open items", len(open_items))
        result = Reconciler(store, sink).reconcile(open_items)
        store.mark_sync_success()
    except Exception as e:
        _record_failure(store, e)
        raise
    return result


def _record_failure(store: BaseStore, error: Exception) -> None:
    try:
        store.mark_sync_failure(f"Sync failed: {error}")
    except Exception as store_error:
        # The caller re-raises the original error.
        logger.warning("Could not record sync failure: %s", store_error)
