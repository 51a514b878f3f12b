"""status command: daemon state, last sync and tracked tasks."""

from __future__ import annotations

from datetime import datetime, timezone

import click
from rich.console import Console
from rich.markup import escape

from ghsync_cli.commands.daemon import is_running, read_pid

console = Console()

_SECTIONS = [
    ("pr-review", "PR Reviews"),
    ("pr-created", "Your PRs"),
    ("issue-assigned", "Assigned Issues"),
    ("issue-created", "Your Issues"),
]
_SHOWN_PER_SECTION = 5


def format_time_ago(seconds: int) -> str:
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{round(seconds / 60)}m ago"
    if seconds < 86400:
        return f"{round(seconds / 3600)}h ago"
    return f"{round(seconds / 86400)}d ago"


def _seconds_since(iso_ts: str, now: datetime | None = None) -> int:
    then = datetime.fromisoformat(iso_ts)
    if then.tzinfo is None:
        then = then.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return max(0, int((now - then).total_seconds()))


@click.command("status")
@click.pass_context
def status_cmd(ctx):
    """Show sync status and tracked tasks."""
    from ghsync_cli.common import open_store, require_config
    from ghsync_cli.launchagent import is_launch_agent_installed

    config = require_config(ctx)
    table = open_store(ctx, config).load_table()

    console.print("\n[bold]ghsync status[/bold]\n")
    console.print("[bold]Daemon[/bold]")

    pid = read_pid()
    if pid is not None and is_running(pid):
        console.print(f"[dim]Status:    [/dim][green]● Running[/green] [dim](PID: {pid})[/dim]")
    else:
        console.print("[dim]Status:    [/dim][red]○ Stopped[/red]")
    console.print(f"[dim]Interval:  [/dim]{config['poll_interval']}s")
    console.print(f"[dim]Project:   [/dim]{escape(str(config.get('things_project')))}")
    console.print(f"[dim]Autostart: [/dim]{'on' if is_launch_agent_installed() else 'off'}")

    console.print("\n[bold]Sync[/bold]")
    if table.last_sync_at:
        try:
            ago = format_time_ago(_seconds_since(table.last_sync_at))
        except (TypeError, ValueError):
            ago = escape(str(table.last_sync_at))
        console.print(f"[dim]Last sync:  [/dim]{ago}")
    else:
        console.print("[dim]Last sync:  [/dim]Never")
    if table.last_error:
        console.print(f"[dim]Last error: [/dim][red]{escape(table.last_error)}[/red]")

    mappings = list(table.mappings.values())
    console.print(f"\n[bold]Tracked Tasks: [/bold]{len(mappings)}")

    for category, heading in _SECTIONS:
        group = [m for m in mappings if m.category == category]
        if not group:
            continue
        console.print(f"\n[cyan]{heading} ({len(group)})[/cyan]")
        for m in group[:_SHOWN_PER_SECTION]:
            console.print(f"[dim]   • [/dim]{escape(m.title)}")

    console.print("")
