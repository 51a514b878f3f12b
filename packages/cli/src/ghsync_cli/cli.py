"""CLI entry point for ghsync.

Commands:
  init     interactive setup wizard
  sync     run a single sync (no daemon)
  start    start the background daemon
  stop     stop the background daemon
  run      run the daemon loop in the foreground (used by start / autostart)
  status   show daemon state, last sync and tracked tasks
  config   view and update settings
"""

from __future__ import annotations

import importlib.metadata

import click

from ghsync_cli.commands.config import config_cmd
from ghsync_cli.commands.daemon import run_cmd, start_cmd, stop_cmd
from ghsync_cli.commands.init import init_cmd
from ghsync_cli.commands.status import status_cmd
from ghsync_cli.commands.sync import sync_cmd


def _version() -> str:
    try:
        return importlib.metadata.version("ghsync")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0"


@click.group()
@click.version_option(version=_version(), prog_name="ghsync")
@click.option(
    "--config",
    "config_path",
    default=None,
    help="Path to the configuration file. Defaults to ~/.ghsync/config.yml.",
    envvar="GHSYNC_CONFIG",
)
@click.pass_context
def main(ctx: click.Context, config_path: str | None):
    """Sync GitHub PRs and issues to Things 3."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(init_cmd)
main.add_command(sync_cmd)
main.add_command(start_cmd)
main.add_command(stop_cmd)
main.add_command(run_cmd)
main.add_command(status_cmd)
main.add_command(config_cmd)


if __name__ == "__main__":
    main()
