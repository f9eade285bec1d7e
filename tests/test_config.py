"""Tests for layered configuration loading."""

from pathlib import Path

import pytest

from taskboard.config import Config, load_config

ENV_VARS = (
    "TASKBOARD_CONFIG_PATH",
    "TASKBOARD_DB_PATH",
    "TASKBOARD_HOST",
    "TASKBOARD_PORT",
    "TASKBOARD_DEBUG",
    "TASKBOARD_LOG_LEVEL",
    "TASKBOARD_LOG_DIR",
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


def test_package_defaults():
    config = Config.load_config()

    assert config.server.port == 8000
    assert config.server.debug is False
    assert config.logging.level == "INFO"
    assert config.database.path == Path("taskboard.db")


def test_project_config_overrides_user_config(tmp_path):
    user_config = tmp_path / "xdg" / "taskboard" / "config.yml"
    user_config.parent.mkdir(parents=True)
    user_config.write_text("server:\n  port: 9000\n  host: 127.0.0.1\n")
    project_config = tmp_path / ".taskboard" / "config.yml"
    project_config.parent.mkdir()
    project_config.write_text("server:\n  port: 9100\n")

    merged = load_config()

    assert merged["server"]["port"] == 9100
    assert merged["server"]["host"] == "127.0.0.1"
    assert merged["database"]["path"] == "./taskboard.db"


def test_explicit_config_path_wins(tmp_path, monkeypatch):
    explicit = tmp_path / "custom.yml"
    explicit.write_text("database:\n  path: /tmp/custom.db\nlogging:\n  level: debug\n")
    monkeypatch.setenv("TASKBOARD_CONFIG_PATH", str(explicit))

    config = Config.load_config()

    assert config.database.path == Path("/tmp/custom.db")
    assert config.logging.level == "DEBUG"


def test_environment_overrides_files(tmp_path, monkeypatch):
    monkeypatch.setenv("TASKBOARD_PORT", "9001")
    monkeypatch.setenv("TASKBOARD_DB_PATH", str(tmp_path / "env.db"))
    monkeypatch.setenv("TASKBOARD_DEBUG", "true")

    config = Config.load_config()

    assert config.server.port == 9001
    assert config.server.debug is True
    assert config.database.path == tmp_path / "env.db"


def test_unreadable_explicit_file_falls_back_to_defaults(tmp_path):
    config = Config.load_config(tmp_path / "missing.yml")

    assert config.server.port == 8000


def test_invalid_yaml_is_skipped(tmp_path):
    project_config = tmp_path / ".taskboard" / "config.yml"
    project_config.parent.mkdir()
    project_config.write_text("server: [unclosed\n")

    merged = load_config()

    assert merged["server"]["port"] == 8000
