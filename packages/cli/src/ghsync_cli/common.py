"""Helpers shared by commands that need a configured installation."""

from __future__ import annotations

import click

from ghsync_store.base import BaseStore


def require_config(ctx: click.Context) -> dict:
    """Load and validate config.yml or abort the command.

    No config is fatal (exit 1); an invalid value is a usage error (exit 2).
    """
    from ghsync_core.config import NotConfiguredError, require_config as load_required

    config_path = ctx.obj.get("config_path") if ctx.obj else None
    try:
        return load_required(config_path)
    except NotConfiguredError as e:
        raise click.ClickException(str(e))
    except ValueError as e:
        raise click.UsageError(f"Invalid configuration: {e}")


def open_store(ctx: click.Context, config: dict) -> BaseStore:
    """Build the configured store once per invocation and close it on exit."""
    from ghsync_cli import factory

    store = ctx.obj.get("store") if ctx.obj else None
    if store is None:
        store = factory.build_store(config)
        ctx.obj["store"] = store
        ctx.call_on_close(store.close)
    return store


def require_token(config: dict) -> str:
    from ghsync_cli.auth import resolve_github_token

    token = resolve_github_token(config)
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN, run `ghsync init`, or run `gh auth login` first."
        )
    return token
