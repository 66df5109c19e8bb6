"""Application configuration — YAML file with APP_* env var overrides."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import (
    BaseSettings,
    EnvSettingsSource,
    PydanticBaseSettingsSource,
    SettingsError,
)

from web_template.errors import ConfigDecodeError, ConfigNotFound, ConfigParseError

logger = logging.getLogger(__name__)

ENV_PREFIX = "APP"
CONFIG_DIR = "config"
CONFIG_FILENAME = "config.yaml"


def default_config_path() -> Path:
    """./config/config.yaml relative to the current working directory."""
    return Path.cwd() / CONFIG_DIR / CONFIG_FILENAME


def env_var_name(key: str) -> str:
    """Map a dotted config key to its override variable (database.host -> APP_DATABASE_HOST)."""
    name = key.replace(".", "_").replace("-", "_").upper()
    return f"{ENV_PREFIX}_{name}"


class DatabaseDriver(str, Enum):
    MYSQL = "mysql"
    POSTGRES = "postgres"


class ServerConfig(BaseModel):
    address: str = ""
    log_level: str = "info"

    model_config = {"frozen": True, "extra": "forbid"}


class DatabaseConfig(BaseModel):
    """Connection settings; timezone is read for mysql only, sslmode for postgres only."""

    driver: str = ""
    host: str = ""
    port: int = 0
    user: str = ""
    password: str = ""
    dbname: str = ""
    timezone: str = ""
    sslmode: str = ""

    # Numeric YAML scalars (e.g. an all-digit password) are accepted as strings
    model_config = {"frozen": True, "extra": "forbid", "coerce_numbers_to_str": True}


_SECTIONS: dict[str, type[BaseModel]] = {
    "server": ServerConfig,
    "database": DatabaseConfig,
}


class KnownKeysEnvSource(EnvSettingsSource):
    """APP_* env source that drops variables not naming a declared section key.

    APP_DATABASE_URL or APP_SERVER_PORT may be set by the deploy environment
    for other tools; only keys such as APP_DATABASE_HOST override the file.
    """

    def __call__(self) -> dict[str, Any]:
        data = super().__call__()
        for name, model in _SECTIONS.items():
            section = data.get(name)
            if isinstance(section, dict):
                data[name] = {k: v for k, v in section.items() if k in model.model_fields}
        return data


class AppConfig(BaseSettings):
    """Top-level application configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    # Environment & Sentry
    environment: str = "development"
    sentry_dsn: str = ""

    model_config = {
        "env_prefix": f"{ENV_PREFIX}_",
        "env_nested_delimiter": "_",
        "env_nested_max_split": 1,
        "frozen": True,
        "extra": "forbid",
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment wins over values read from the YAML file
        return KnownKeysEnvSource(settings_cls), init_settings

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> AppConfig:
        """Load config from a YAML file, with env var overrides."""
        if path is None:
            path = default_config_path()

        values = _read_yaml(path)
        try:
            config = cls(**values)
        except (ValidationError, SettingsError) as e:
            raise ConfigDecodeError(f"unable to decode config from {path}: {e}") from e

        logger.debug("Loaded config from %s (driver=%s)", path, config.database.driver)
        return config


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigNotFound(path)

    try:
        with open(path) as f:
            values = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"error reading config file {path}: {e}") from e

    if values is None:
        return {}
    if not isinstance(values, dict):
        raise ConfigParseError(
            f"error reading config file {path}: top level must be a mapping, "
            f"got {type(values).__name__}"
        )
    bad_keys = [k for k in values if not isinstance(k, str)]
    if bad_keys:
        raise ConfigDecodeError(f"unable to decode config from {path}: non-string keys {bad_keys!r}")
    return values


def load_config(path: Path | None = None) -> AppConfig:
    """Load ./config/config.yaml (or ``path``) into an AppConfig."""
    return AppConfig.from_yaml(path)
