from __future__ import annotations

import pytest

from orchestrator.settings import resolve_settings
from project_config import CONFIG_ENV_VAR, get_section, project_root, reload as reload_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    reload_config()
    for key in (
        "PLUGINS_DIRECTORY",
        "PLUGINS_NAMESPACE",
        "PLUGINS_POLL_INTERVAL_S",
        "PLUGINS_SETTLE_DELAY_S",
        "PLUGINS_JOURNAL_ENABLED",
        "PLUGINS_JOURNAL_DIR",
    ):
        monkeypatch.delenv(key, raising=False)
        monkeypatch.delenv(f"CLI_{key}", raising=False)
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    yield
    reload_config()


def test_defaults_come_from_config_toml():
    settings = resolve_settings()
    assert settings.directory == project_root() / "plugins"
    assert settings.namespace == get_section("PLUGINS.namespace")
    assert settings.defaults == ("defaults/*",)
    assert settings.poll_interval == 1.0
    assert settings.settle_delay == 1.0
    assert settings.journal_enabled is False
    assert settings.journal_dir == project_root() / "logs" / "plugins"


def test_environment_overrides_toml(monkeypatch):
    monkeypatch.setenv("PLUGINS_SETTLE_DELAY_S", "0.5")
    monkeypatch.setenv("PLUGINS_JOURNAL_ENABLED", "yes")
    settings = resolve_settings()
    assert settings.settle_delay == 0.5
    assert settings.journal_enabled is True


def test_cli_overrides_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("PLUGINS_POLL_INTERVAL_S", "3")
    monkeypatch.setenv("PLUGINS_DIRECTORY", "/somewhere/else")
    settings = resolve_settings(
        {"CLI_PLUGINS_POLL_INTERVAL_S": "0.25", "CLI_PLUGINS_DIRECTORY": str(tmp_path)}
    )
    assert settings.poll_interval == 0.25
    assert settings.directory == tmp_path


def test_bad_numbers_fall_back_and_negatives_clamp():
    settings = resolve_settings(
        {"CLI_PLUGINS_POLL_INTERVAL_S": "soon", "CLI_PLUGINS_SETTLE_DELAY_S": "-2"}
    )
    assert settings.poll_interval == 1.0
    assert settings.settle_delay == 0.0


def test_relative_directory_resolves_against_project_root():
    settings = resolve_settings({"CLI_PLUGINS_DIRECTORY": "custom/plugins"})
    assert settings.directory == project_root() / "custom" / "plugins"


def test_config_file_can_be_selected_by_environment(tmp_path, monkeypatch):
    config = tmp_path / "alt.toml"
    config.write_text(
        '[PLUGINS]\ndirectory = "ext"\nnamespace = "alt_plugins"\nsettle_delay_s = 0.2\n\n'
        '[JOURNAL]\nenabled = true\ndirectory = "journal"\n',
        "utf-8",
    )
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config))
    reload_config()

    settings = resolve_settings()
    base = tmp_path.resolve()
    assert settings.directory == base / "ext"
    assert settings.namespace == "alt_plugins"
    assert settings.settle_delay == 0.2
    assert settings.poll_interval == 1.0
    assert settings.journal_enabled is True
    assert settings.journal_dir == base / "journal"


def test_missing_selected_config_is_an_error(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "absent.toml"))
    reload_config()
    with pytest.raises(RuntimeError, match=CONFIG_ENV_VAR):
        resolve_settings()


def test_malformed_config_is_reported_with_its_path(tmp_path, monkeypatch):
    config = tmp_path / "bad.toml"
    config.write_text("[PLUGINS\n", "utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config))
    reload_config()
    with pytest.raises(RuntimeError, match="not valid TOML"):
        resolve_settings()


def test_get_section_accepts_none_as_default():
    assert get_section("PLUGINS.not_a_key", None) is None
    with pytest.raises(KeyError):
        get_section("PLUGINS.not_a_key")
