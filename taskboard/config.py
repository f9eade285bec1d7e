"""Configuration loading for Taskboard.

Settings come from YAML files merged with increasing precedence, then from
environment variables (``.env`` is loaded first via python-dotenv).
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml  # type: ignore
from dotenv import load_dotenv  # type: ignore

from taskboard.constants import DEFAULT_DB_FILENAME, DEFAULT_HOST, DEFAULT_PORT

logger = logging.getLogger(__name__)


def deep_merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = deep_merge_dicts(dict(base.get(key, {})), value)
        else:
            base[key] = value
    return base


def get_user_config_path() -> Path:
    if os.name == "posix":
        config_base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    else:
        config_base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    return config_base / "taskboard" / "config.yml"


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config {path}: top level is not a mapping")
        return {}
    return data


def load_config() -> Dict[str, Any]:
    """Load configuration by merging multiple locations with clear precedence.

    Precedence (lowest → highest):
      1. Package default (taskboard/config.yml)
      2. User config (~/.config/taskboard/config.yml or %APPDATA%/taskboard/config.yml)
      3. Project config (<cwd>/.taskboard/config.yml)
      4. Explicit override via TASKBOARD_CONFIG_PATH
    """
    merged: Dict[str, Any] = {}

    candidates = [
        Path(__file__).parent / "config.yml",
        get_user_config_path(),
        Path.cwd() / ".taskboard" / "config.yml",
    ]
    explicit = os.environ.get("TASKBOARD_CONFIG_PATH")
    if explicit:
        candidates.append(Path(explicit).expanduser())

    for path in candidates:
        if not path.exists():
            continue
        try:
            merged = deep_merge_dicts(merged, _read_yaml(path))
            logger.debug(f"Loaded config: {path}")
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Error loading config {path}: {e}")

    return merged


@dataclass
class DatabaseConfig:
    path: Path = field(default_factory=lambda: Path.cwd() / DEFAULT_DB_FILENAME)


@dataclass
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    debug: bool = False


@dataclass
class LoggingConfig:
    level: str = "INFO"
    directory: Optional[Path] = None


@dataclass
class Config:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        db = data.get("database") or {}
        server = data.get("server") or {}
        log = data.get("logging") or {}

        config = cls()
        if db.get("path"):
            config.database.path = Path(db["path"]).expanduser()
        config.server.host = server.get("host", config.server.host)
        config.server.port = int(server.get("port", config.server.port))
        config.server.debug = bool(server.get("debug", config.server.debug))
        config.logging.level = str(log.get("level", config.logging.level)).upper()
        if log.get("directory"):
            config.logging.directory = Path(log["directory"]).expanduser()
        return config

    def apply_env(self) -> "Config":
        """Override values from TASKBOARD_* environment variables."""
        if os.environ.get("TASKBOARD_DB_PATH"):
            self.database.path = Path(os.environ["TASKBOARD_DB_PATH"]).expanduser()
        if os.environ.get("TASKBOARD_HOST"):
            self.server.host = os.environ["TASKBOARD_HOST"]
        if os.environ.get("TASKBOARD_PORT"):
            self.server.port = int(os.environ["TASKBOARD_PORT"])
        if os.environ.get("TASKBOARD_DEBUG"):
            self.server.debug = os.environ["TASKBOARD_DEBUG"].lower() in ("1", "true", "yes")
        if os.environ.get("TASKBOARD_LOG_LEVEL"):
            self.logging.level = os.environ["TASKBOARD_LOG_LEVEL"].upper()
        if os.environ.get("TASKBOARD_LOG_DIR"):
            self.logging.directory = Path(os.environ["TASKBOARD_LOG_DIR"]).expanduser()
        return self

    @classmethod
    def load_config(cls, config_path: Optional[Path] = None) -> "Config":
        """Load the effective config.

        With ``config_path`` only that file is read; otherwise the layered
        resolver in ``load_config()`` is used. Environment variables win in
        both cases.
        """
        load_dotenv(override=False)

        if config_path is None:
            config_data = load_config()
        else:
            try:
                config_data = _read_yaml(Path(config_path))
            except (FileNotFoundError, yaml.YAMLError):
                logger.warning(f"Could not read config {config_path}, using defaults")
                config_data = {}

        return cls.from_dict(config_data).apply_env()
