"""Tests for configuration loading."""

import stat

import pytest

from ghsync_core.config import (
    NotConfiguredError,
    default_store_path,
    get_data_dir,
    load_config,
    load_file_config,
    require_config,
    save_config,
    validate_config,
)
from ghsync_core.models import ALL_SYNC_TYPES


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("THINGS_AUTH_TOKEN", raising=False)
    monkeypatch.setenv("GHSYNC_HOME", str(tmp_path / "home"))


def test_missing_config_returns_none(tmp_path):
    assert load_config(config_path=str(tmp_path / "nonexistent.yml")) is None


def test_require_config_raises_when_missing(tmp_path):
    with pytest.raises(NotConfiguredError, match="ghsync init"):
        require_config(config_path=str(tmp_path / "nonexistent.yml"))


def test_malformed_config_returns_none(tmp_path):
    cfg = tmp_path / "config.yml"
    cfg.write_text("github_token: [unclosed\n")
    assert load_config(config_path=str(cfg)) is None


def test_non_mapping_config_returns_none(tmp_path):
    cfg = tmp_path / "config.yml"
    cfg.write_text("- just\n- a list\n")
    assert load_config(config_path=str(cfg)) is None


def test_defaults_applied(tmp_path):
    cfg = tmp_path / "config.yml"
    cfg.write_text("github_token: tok\n")
    config = load_config(config_path=str(cfg))
    assert config["github_token"] == "tok"
    assert config["things_project"] == "GitHub"
    assert config["poll_interval"] == 300
    assert config["auto_start"] is False
    assert config["sync_types"] == ALL_SYNC_TYPES
    assert config["repo_filter"] == {"mode": "all", "repos": []}
    assert config["store"] == "json"


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / "config.yml"
    cfg.write_text("poll_interval: 120\nthings_project: Work\nsync_types: [pr-reviews]\n")
    config = load_config(config_path=str(cfg))
    assert config["poll_interval"] == 120
    assert config["things_project"] == "Work"
    assert config["sync_types"] == ["pr-reviews"]


def test_null_sync_types_means_all(tmp_path):
    cfg = tmp_path / "config.yml"
    cfg.write_text("sync_types: null\n")
    assert load_config(config_path=str(cfg))["sync_types"] == ALL_SYNC_TYPES


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / "config.yml"
    cfg.write_text("poll_interval: 120\n")
    config = load_config(config_path=str(cfg), cli_overrides={"poll_interval": 600, "things_project": None})
    assert config["poll_interval"] == 600
    assert config["things_project"] == "GitHub"


def test_env_vars_override_file(monkeypatch, tmp_path):
    cfg = tmp_path / "config.yml"
    cfg.write_text("github_token: file-token\nthings_auth_token: file-things\n")
    monkeypatch.setenv("GITHUB_TOKEN", "env-token")
    monkeypatch.setenv("THINGS_AUTH_TOKEN", "env-things")
    config = load_config(config_path=str(cfg))
    assert config["github_token"] == "env-token"
    assert config["things_auth_token"] == "env-things"


def test_default_lists_are_not_shared(tmp_path):
    cfg = tmp_path / "config.yml"
    cfg.write_text("github_token: tok\n")
    config_a = load_config(config_path=str(cfg))
    config_b = load_config(config_path=str(cfg))
    config_a["sync_types"].append("bogus")
    config_a["repo_filter"]["mode"] = "selected"
    assert config_b["sync_types"] == ALL_SYNC_TYPES
    assert config_b["repo_filter"]["mode"] == "all"


def test_default_config_path_uses_data_dir(tmp_path):
    save_config({"github_token": "tok"})
    assert (tmp_path / "home" / "config.yml").exists()
    assert load_config()["github_token"] == "tok"


def test_save_config_restricts_permissions(tmp_path):
    path = save_config({"github_token": "tok", "things_auth_token": None}, str(tmp_path / "config.yml"))
    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    assert load_file_config(str(path)) == {"github_token": "tok"}


def test_data_dir_override(tmp_path):
    assert get_data_dir() == tmp_path / "home"


class TestValidateConfig:
    def _config(self, **overrides):
        config = {"poll_interval": 300, "sync_types": list(ALL_SYNC_TYPES), "repo_filter": {"mode": "all"}}
        config.update(overrides)
        return config

    def test_valid(self):
        validate_config(self._config())

    @pytest.mark.parametrize("interval", [59, 0, -5, "300", None, True])
    def test_bad_interval(self, interval):
        with pytest.raises(ValueError, match="poll_interval"):
            validate_config(self._config(poll_interval=interval))

    def test_unknown_sync_type(self):
        with pytest.raises(ValueError, match="prs-reviewed"):
            validate_config(self._config(sync_types=["prs-reviewed"]))

    def test_bad_repo_filter_mode(self):
        with pytest.raises(ValueError, match="repo_filter"):
            validate_config(self._config(repo_filter={"mode": "some"}))

    def test_unknown_store(self):
        with pytest.raises(ValueError, match="store"):
            validate_config(self._config(store="postgres"))

    def test_require_config_validates(self, tmp_path):
        cfg = tmp_path / "config.yml"
        cfg.write_text("poll_interval: 30\n")
        with pytest.raises(ValueError):
            require_config(config_path=str(cfg))


class TestDefaultStorePath:
    def test_json_default(self, tmp_path):
        assert default_store_path({"store": "json"}) == tmp_path / "home" / "state.json"

    def test_sqlite_default(self, tmp_path):
        assert default_store_path({"store": "sqlite"}) == tmp_path / "home" / "state.db"

    def test_explicit_path(self, tmp_path):
        assert default_store_path({"store_path": str(tmp_path / "x.json")}) == tmp_path / "x.json"
