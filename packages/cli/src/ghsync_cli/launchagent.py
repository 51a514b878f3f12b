"""macOS LaunchAgent management for starting the daemon at login."""

from __future__ import annotations

import logging
import os
import plistlib
import subprocess
import sys
from pathlib import Path

from ghsync_core.config import get_data_dir

logger = logging.getLogger(__name__)

LABEL = "com.ghsync.daemon"


def plist_path() -> Path:
    return Path.home() / "Library" / "LaunchAgents" / f"{LABEL}.plist"


def build_plist(config_path: str | None = None) -> dict:
    """Describe a login job that runs `ghsync run` against the same config and data dir as now."""
    log_path = str(get_data_dir() / "daemon.log")
    args = [sys.executable, "-m", "ghsync_cli.cli"]
    if config_path:
        args += ["--config", str(Path(config_path).expanduser().resolve())]
    args.append("run")

    env = {"PATH": "/usr/local/bin:/usr/bin:/bin:/opt/homebrew/bin"}
    if os.environ.get("GHSYNC_HOME"):
        env["GHSYNC_HOME"] = str(get_data_dir().resolve())

    return {
        "Label": LABEL,
        "ProgramArguments": args,
        "RunAtLoad": True,
        "KeepAlive": False,
        "StandardOutPath": log_path,
        "StandardErrorPath": log_path,
        "EnvironmentVariables": env,
    }


def install_launch_agent(config_path: str | None = None) -> Path:
    """Write the plist and (re)load it with launchctl.

    A launchctl failure is logged, not raised: the agent still loads at next login.
    """
    path = plist_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        plistlib.dump(build_plist(config_path), f)

    try:
        subprocess.run(["launchctl", "unload", str(path)], capture_output=True)
        result = subprocess.run(["launchctl", "load", str(path)], capture_output=True, text=True)
    except FileNotFoundError:
        logger.warning("launchctl not found; LaunchAgent written but not loaded")
        return path
    if result.returncode != 0:
        logger.warning("Could not load LaunchAgent: %s", result.stderr.strip())
    return path


def uninstall_launch_agent() -> None:
    path = plist_path()
    if not path.exists():
        return
    try:
        subprocess.run(["launchctl", "unload", str(path)], capture_output=True)
    except FileNotFoundError:
        pass
    path.unlink()


def is_launch_agent_installed() -> bool:
    return plist_path().exists()
