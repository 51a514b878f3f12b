"""config command: view and update settings in config.yml."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ghsync_core.config import MIN_POLL_INTERVAL
from ghsync_core.models import ALL_SYNC_TYPES, SYNC_TYPES

console = Console()

_TRUE = ("true", "on", "yes", "1")
_FALSE = ("false", "off", "no", "0")


def parse_sync_types(value: str) -> list[str]:
    """Parse "all" or a comma-separated list of sync types."""
    if value.strip().lower() == "all":
        return list(ALL_SYNC_TYPES)
    types = [t.strip() for t in value.split(",") if t.strip()]
    unknown = [t for t in types if t not in SYNC_TYPES]
    if unknown or not types:
        raise click.BadParameter(
            f"Unknown sync type(s): {', '.join(unknown) or '(none)'}. Choose from: {', '.join(ALL_SYNC_TYPES)} or 'all'",
            param_hint="--sync-types",
        )
    return types


def parse_repo_filter(value: str) -> dict:
    """Parse "all" or a comma-separated list of owner/name slugs."""
    if value.strip().lower() == "all":
        return {"mode": "all", "repos": []}
    repos = [r.strip() for r in value.split(",") if r.strip()]
    bad = [r for r in repos if r.count("/") != 1]
    if bad or not repos:
        raise click.BadParameter("Use owner/name slugs separated by commas, or 'all'.", param_hint="--repos")
    return {"mode": "selected", "repos": repos}


def _mask(token: str | None) -> str:
    if not token:
        return "[red]not set[/red]"
    return f"{token[:4]}…{token[-4:]}" if len(token) > 8 else "****"


def _show(config: dict) -> None:
    table = Table(title="ghsync configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    repo_filter = config.get("repo_filter") or {"mode": "all"}
    repos = "all" if repo_filter.get("mode", "all") == "all" else ", ".join(repo_filter.get("repos") or [])

    table.add_row("GitHub token", _mask(config.get("github_token")))
    table.add_row("Things token", _mask(config.get("things_auth_token")))
    table.add_row("Things project", escape(str(config.get("things_project"))))
    table.add_row("Poll interval", f"{config.get('poll_interval')}s")
    table.add_row("Autostart", "on" if config.get("auto_start") else "off")
    table.add_row("Sync types", ", ".join(config.get("sync_types") or ALL_SYNC_TYPES))
    table.add_row("Repos", escape(repos))
    table.add_row("Store", str(config.get("store", "json")))
    console.print(table)


def _verify(config: dict) -> None:
    from github import GithubException

    from ghsync_cli import factory
    from ghsync_cli.common import require_token

    token = require_token(config)
    try:
        username = factory.build_source(config, token).get_username()
        console.print(f"[green]GitHub token valid[/green] [dim](user: {escape(username)})[/dim]")
    except GithubException as e:
        raise click.ClickException(f"GitHub token rejected: {e}")

    if config.get("things_auth_token"):
        console.print("[green]Things token set[/green] [dim](Things does not report invalid tokens)[/dim]")
    else:
        console.print("[yellow]Things token not set: tasks can be created but not completed.[/yellow]")


@click.command("config")
@click.option("--show", is_flag=True, help="Show current config (default).")
@click.option("--interval", type=int, default=None, help=f"Set poll interval in seconds (min: {MIN_POLL_INTERVAL}).")
@click.option("--autostart", default=None, help="Enable/disable autostart (true/false).")
@click.option("--project", default=None, help="Set Things project name.")
@click.option("--github-token", default=None, help='Update GitHub token (use "prompt" for interactive).')
@click.option("--things-token", default=None, help='Update Things token (use "prompt" for interactive).')
@click.option("--sync-types", default=None, help='Set sync types (comma-separated or "all").')
@click.option("--repos", default=None, help='Limit sync to repos (comma-separated owner/name or "all").')
@click.option("--verify", is_flag=True, help="Verify tokens work.")
@click.pass_context
def config_cmd(
    ctx,
    show: bool,
    interval: int | None,
    autostart: str | None,
    project: str | None,
    github_token: str | None,
    things_token: str | None,
    sync_types: str | None,
    repos: str | None,
    verify: bool,
):
    """View and update settings."""
    from ghsync_cli.common import require_config
    from ghsync_cli.launchagent import install_launch_agent, uninstall_launch_agent
    from ghsync_core.config import load_file_config, save_config

    config = require_config(ctx)

    if verify:
        _verify(config)
        return

    updates: dict = {}
    if interval is not None:
        if interval < MIN_POLL_INTERVAL:
            raise click.BadParameter(f"Interval must be at least {MIN_POLL_INTERVAL} seconds", param_hint="--interval")
        updates["poll_interval"] = interval
    if autostart is not None:
        value = autostart.strip().lower()
        if value not in _TRUE + _FALSE:
            raise click.BadParameter("Use --autostart=true or --autostart=false", param_hint="--autostart")
        updates["auto_start"] = value in _TRUE
    if project is not None:
        updates["things_project"] = project
    if github_token is not None:
        updates["github_token"] = (
            click.prompt("GitHub token", hide_input=True) if github_token == "prompt" else github_token
        )
    if things_token is not None:
        updates["things_auth_token"] = (
            click.prompt("Things auth token", hide_input=True) if things_token == "prompt" else things_token
        )
    if sync_types is not None:
        updates["sync_types"] = parse_sync_types(sync_types)
    if repos is not None:
        updates["repo_filter"] = parse_repo_filter(repos)

    if show or not updates:
        _show(config)
        return

    # Write back only what the file had plus the changes, so env-provided
    # tokens are never persisted by accident.
    config_path = ctx.obj.get("config_path") if ctx.obj else None
    file_config = load_file_config(config_path) or {}
    file_config.update(updates)
    save_config(file_config, config_path)

    if "auto_start" in updates:
        if updates["auto_start"]:
            path = install_launch_agent(config_path)
            console.print(f"[green]Autostart enabled[/green] [dim]({path})[/dim]")
        else:
            uninstall_launch_agent()
            console.print("[green]Autostart disabled[/green]")

    for key in updates:
        if key in ("github_token", "things_auth_token"):
            console.print(f"[green]Updated {key}[/green]")
        elif key != "auto_start":
            console.print(f"[green]Updated {key}:[/green] {escape(str(updates[key]))}")

    console.print("[dim]Restart the daemon (ghsync stop && ghsync start) to apply changes.[/dim]")
