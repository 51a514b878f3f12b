"""Builds the store, item source and task sink from config.yml settings.

This lives in the CLI package so neither ghsync_core nor ghsync_store know
about the config format's store selection.
"""

from __future__ import annotations

from ghsync_core.config import default_store_path
from ghsync_core.gh.items import GitHubItemSource
from ghsync_core.sinks.things import ThingsSink
from ghsync_store.base import BaseStore


def build_store(config: dict) -> BaseStore:
    """Instantiate the configured mapping store.

    Store selection:
      store: json   → JSONFileStore (default, <data dir>/state.json)
      store: sqlite → SQLiteStore   (<data dir>/state.db)
    store_path overrides the file location for either backend.
    """
    path = default_store_path(config)
    if config.get("store") == "sqlite":
        from ghsync_store.sqlite import SQLiteStore

        return SQLiteStore(db_path=path)

    from ghsync_store.json_file import JSONFileStore

    return JSONFileStore(path)


def build_source(config: dict, token: str) -> GitHubItemSource:
    return GitHubItemSource(
        token=token,
        sync_types=config.get("sync_types"),
        repo_filter=config.get("repo_filter"),
    )


def build_sink(config: dict) -> ThingsSink:
    return ThingsSink(project=config.get("things_project") or "GitHub", auth_token=config.get("things_auth_token"))
