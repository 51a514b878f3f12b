"""start / stop / run commands for the background daemon.

`run` is the daemon itself: the poll loop in the foreground. `start` spawns
`run` as a detached process with output appended to ~/.ghsync/daemon.log and
records its PID; `stop` signals that PID.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import sys
from pathlib import Path

import click
from rich.console import Console

from ghsync_core.config import get_data_dir

console = Console()
logger = logging.getLogger(__name__)


def pid_file() -> Path:
    return get_data_dir() / "daemon.pid"


def log_file() -> Path:
    return get_data_dir() / "daemon.log"


def read_pid() -> int | None:
    try:
        return int(pid_file().read_text().strip())
    except (OSError, ValueError):
        return None


def is_running(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists but owned by someone else.
        return True
    return True


@click.command("run")
@click.pass_context
def run_cmd(ctx):
    """Run the sync daemon in the foreground until interrupted."""
    from ghsync_cli import factory
    from ghsync_cli.common import open_store, require_config, require_token
    from ghsync_cli.logging_setup import setup_logging
    from ghsync_core.reconciler import run_sync
    from ghsync_core.scheduler import Daemon, install_signal_handlers

    setup_logging(logging.INFO)

    config = require_config(ctx)
    token = require_token(config)
    store = open_store(ctx, config)
    source = factory.build_source(config, token)
    sink = factory.build_sink(config)

    daemon = Daemon(lambda: run_sync(source, sink, store), interval_seconds=config["poll_interval"])
    install_signal_handlers()

    logger.info("Daemon started")
    logger.info("Poll interval: %ss", daemon.interval_seconds)
    logger.info("Things project: %s", config.get("things_project"))
    daemon.run_forever()


@click.command("start")
@click.pass_context
def start_cmd(ctx):
    """Start the background daemon."""
    from ghsync_cli.common import require_config
    from ghsync_core.config import ensure_data_dir

    config = require_config(ctx)

    pid = read_pid()
    if pid is not None:
        if is_running(pid):
            console.print(f"[yellow]Daemon already running (PID: {pid})[/yellow]")
            console.print("[dim]   Use 'ghsync stop' to stop it first.[/dim]")
            return
        pid_file().unlink(missing_ok=True)

    ensure_data_dir()
    args = [sys.executable, "-m", "ghsync_cli.cli"]
    if ctx.obj and ctx.obj.get("config_path"):
        args += ["--config", ctx.obj["config_path"]]
    args.append("run")

    with open(log_file(), "a") as out:
        child = subprocess.Popen(
            args,
            stdin=subprocess.DEVNULL,
            stdout=out,
            stderr=out,
            start_new_session=True,
            env=dict(os.environ),
        )

    pid_file().write_text(str(child.pid))
    console.print(f"[green]Daemon started[/green] [dim](PID: {child.pid})[/dim]")
    console.print(f"[dim]   Polling every {config['poll_interval']} seconds[/dim]")
    console.print(f"[dim]   Logs: {log_file()}[/dim]")


@click.command("stop")
def stop_cmd():
    """Stop the background daemon."""
    pid = read_pid()
    if pid is None:
        console.print("[cyan]Daemon is not running[/cyan]")
        return

    try:
        os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
        pid_file().unlink(missing_ok=True)
        console.print("[cyan]Daemon was not running (cleaned up stale PID file)[/cyan]")
        return
    except OSError as e:
        raise click.ClickException(f"Failed to stop daemon: {e}")

    pid_file().unlink(missing_ok=True)
    console.print(f"[green]Daemon stopped[/green] [dim](PID: {pid})[/dim]")
