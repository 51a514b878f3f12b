"""sync command: run one reconciliation pass and report counts."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.markup import escape

from ghsync_core.reconciler import run_sync

console = Console()


@click.command("sync")
@click.option("--verbose", "-v", is_flag=True, help="Show per-item progress.")
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would be created/completed without touching Things or the state file.",
)
@click.pass_context
def sync_cmd(ctx, verbose: bool, dry_run: bool):
    """Run a single sync (no daemon)."""
    from ghsync_cli import factory
    from ghsync_cli.common import open_store, require_config, require_token
    from ghsync_cli.logging_setup import setup_logging

    setup_logging(logging.INFO if verbose else logging.WARNING)

    config = require_config(ctx)
    token = require_token(config)
    store = open_store(ctx, config)
    source = factory.build_source(config, token)

    if dry_run:
        from ghsync_core.sinks.dry_run import DryRunSink
        from ghsync_store.memory import InMemoryStore

        sink = DryRunSink()
        store = InMemoryStore(store.load_table())
    else:
        sink = factory.build_sink(config)

    console.print("[cyan]Syncing...[/cyan]\n")

    try:
        result = run_sync(source, sink, store)
    except Exception as e:
        raise click.ClickException(f"Sync failed: {e}")

    console.print("[green]Sync complete[/green]" + (" [yellow](dry run)[/yellow]" if dry_run else ""))
    console.print(f"[dim]   Created:   [/dim]{result.created} tasks")
    console.print(f"[dim]   Completed: [/dim]{result.completed} tasks")
    console.print(f"[dim]   Unchanged: [/dim]{result.unchanged} tasks")

    if dry_run:
        for title in sink.created:
            console.print(f"[dim]     + [/dim]{escape(title)}")

    if result.errors:
        console.print(f"[dim]   Errors:    [/dim][yellow]{len(result.errors)}[/yellow]")
        for err in result.errors:
            console.print(f"[dim]     • [/dim][red]{escape(err)}[/red]")
