"""init command: interactive setup wizard.

Writes ~/.ghsync/config.yml (mode 0600, it holds tokens), optionally limits
the sync to selected repositories and installs the macOS LaunchAgent.
"""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape

console = Console()


@click.command("init")
@click.pass_context
def init_cmd(ctx):
    """Interactive setup wizard."""
    from github import GithubException

    from ghsync_cli import factory
    from ghsync_cli.auth import resolve_github_token
    from ghsync_cli.commands.config import parse_repo_filter, parse_sync_types
    from ghsync_cli.launchagent import install_launch_agent
    from ghsync_core.config import DEFAULT_CONFIG, MIN_POLL_INTERVAL, load_file_config, save_config

    console.print("\n[bold cyan]ghsync init[/bold cyan]: GitHub → Things setup\n")

    config_path = ctx.obj.get("config_path") if ctx.obj else None
    if load_file_config(config_path) is not None:
        if not click.confirm("A configuration already exists. Overwrite it?", default=False):
            console.print("[yellow]Aborted. Use `ghsync config` to change individual settings.[/yellow]")
            return

    # --- GitHub ---
    detected = resolve_github_token()
    if detected:
        console.print("[dim]Found a GitHub token in GITHUB_TOKEN or the gh CLI session.[/dim]")
    token = click.prompt("GitHub token", default=detected or None, hide_input=True, show_default=False)

    config: dict = {"github_token": token}
    source = factory.build_source(config, token)
    try:
        username = source.get_username()
    except GithubException as e:
        raise click.ClickException(f"GitHub token rejected: {e}")
    console.print(f"[green]Authenticated as {escape(username)}[/green]\n")

    # --- Things ---
    config["things_project"] = click.prompt("Things project", default=DEFAULT_CONFIG["things_project"])
    console.print("[dim]The Things auth token is under Settings → General → Enable Things URLs → Manage.[/dim]")
    things_token = click.prompt("Things auth token (optional)", default="", hide_input=True, show_default=False)
    if things_token:
        config["things_auth_token"] = things_token

    # --- What to sync ---
    config["poll_interval"] = click.prompt(
        "Poll interval (seconds)",
        type=click.IntRange(min=MIN_POLL_INTERVAL),
        default=DEFAULT_CONFIG["poll_interval"],
    )
    config["sync_types"] = click.prompt(
        "Sync types (pr-reviews, prs-created, issues-assigned, issues-created)",
        default="all",
        value_proc=parse_sync_types,
    )

    if click.confirm("Sync items from all repositories?", default=True):
        config["repo_filter"] = {"mode": "all", "repos": []}
    else:
        grouped = source.list_repos_grouped()
        for owner, repos in grouped.items():
            console.print(f"\n[bold]{escape(owner)}[/bold]")
            for repo in repos:
                lock = " [dim](private)[/dim]" if repo.is_private else ""
                console.print(f"  {escape(repo.full_name)}{lock}")
        config["repo_filter"] = click.prompt("\nRepositories (comma-separated owner/name)", value_proc=parse_repo_filter)

    # --- Autostart ---
    config["auto_start"] = click.confirm("Start the daemon automatically at login (macOS)?", default=False)

    path = save_config(config, config_path)
    console.print(f"\n[green]Saved configuration to {path}[/green]")

    if config["auto_start"]:
        plist = install_launch_agent(config_path)
        console.print(f"[green]Installed LaunchAgent {plist}[/green]")

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("Run a sync now with: [bold]ghsync sync[/bold], or start the daemon: [bold]ghsync start[/bold]")
