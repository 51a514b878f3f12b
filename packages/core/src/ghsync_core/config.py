import os
from pathlib import Path
from typing import Optional

import yaml

from ghsync_core.models import ALL_SYNC_TYPES, SYNC_TYPES

MIN_POLL_INTERVAL = 60

DEFAULT_CONFIG: dict = {
    "github_token": None,
    "things_project": "GitHub",
    "things_auth_token": None,  # required by Things to mark to-dos complete
    "poll_interval": 300,  # seconds
    "auto_start": False,
    "sync_types": list(ALL_SYNC_TYPES),
    "repo_filter": {"mode": "all", "repos": []},
    "store": "json",  # "json" | "sqlite"
    "store_path": None,  # None = <data dir>/state.json or state.db
}


class NotConfiguredError(RuntimeError):
    """Raised when no configuration file exists. Run `ghsync init` first."""


def get_data_dir() -> Path:
    """Directory holding config.yml, the state file, PID file and daemon log."""
    override = os.environ.get("GHSYNC_HOME")
    if override:
        return Path(override)
    return Path.home() / ".ghsync"


def get_config_path() -> Path:
    return get_data_dir() / "config.yml"


def ensure_data_dir() -> Path:
    data_dir = get_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def load_file_config(config_path: Optional[str] = None) -> Optional[dict]:
    """Return the raw contents of config.yml, without defaults or env overrides."""
    path = Path(config_path) if config_path else get_config_path()
    if not path.exists():
        return None
    try:
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return None
    return file_config if isinstance(file_config, dict) else None


def load_config(config_path: Optional[str] = None, cli_overrides: Optional[dict] = None) -> Optional[dict]:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. config.yml in the data directory (or config_path)
      3. CLI argument overrides
      4. GITHUB_TOKEN / THINGS_AUTH_TOKEN environment variables

    Returns None when the file does not exist or cannot be parsed; the tool
    has not been set up yet in that case.
    """
    file_config = load_file_config(config_path)
    if file_config is None:
        return None

    config = {
        **DEFAULT_CONFIG,
        "sync_types": list(DEFAULT_CONFIG["sync_types"]),
        "repo_filter": dict(DEFAULT_CONFIG["repo_filter"]),
    }
    config.update(file_config)

    # Older configs may carry an explicit null; treat it as "all types".
    if not config.get("sync_types"):
        config["sync_types"] = list(ALL_SYNC_TYPES)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    for key, env_var in (("github_token", "GITHUB_TOKEN"), ("things_auth_token", "THINGS_AUTH_TOKEN")):
        value = os.environ.get(env_var)
        if value:
            config[key] = value

    return config


def require_config(config_path: Optional[str] = None) -> dict:
    """Load and validate configuration, raising NotConfiguredError if absent."""
    config = load_config(config_path)
    if config is None:
        raise NotConfiguredError("Not configured. Run `ghsync init` first.")
    validate_config(config)
    return config


def validate_config(config: dict) -> None:
    """Raise ValueError for settings the daemon cannot run with."""
    interval = config.get("poll_interval")
    if not isinstance(interval, int) or isinstance(interval, bool) or interval < MIN_POLL_INTERVAL:
        raise ValueError(f"poll_interval must be an integer of at least {MIN_POLL_INTERVAL} seconds, got {interval!r}")

    unknown = [t for t in config.get("sync_types", []) if t not in SYNC_TYPES]
    if unknown:
        raise ValueError(f"Unknown sync type(s): {', '.join(unknown)}. Choose from: {', '.join(ALL_SYNC_TYPES)}")

    repo_filter = config.get("repo_filter") or {"mode": "all"}
    if repo_filter.get("mode", "all") not in ("all", "selected"):
        raise ValueError(f"repo_filter.mode must be 'all' or 'selected', got {repo_filter.get('mode')!r}")

    if config.get("store", "json") not in ("json", "sqlite"):
        raise ValueError(f"Unknown store backend: {config.get('store')!r}. Choose 'json' or 'sqlite'.")


def save_config(config: dict, config_path: Optional[str] = None) -> Path:
    """Write config.yml with owner-only permissions since it holds tokens."""
    path = Path(config_path) if config_path else get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    to_write = {k: v for k, v in config.items() if v is not None}
    path.write_text(yaml.dump(to_write, default_flow_style=False, sort_keys=False))
    path.chmod(0o600)
    return path


def default_store_path(config: dict) -> Path:
    if config.get("store_path"):
        return Path(config["store_path"]).expanduser()
    filename = "state.db" if config.get("store") == "sqlite" else "state.json"
    return get_data_dir() / filename
