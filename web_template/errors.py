"""Startup errors raised while loading config or opening the database."""

from __future__ import annotations

from pathlib import Path


class BootstrapError(Exception):
    """Base class for errors that should halt service startup."""


class ConfigError(BootstrapError):
    """Configuration could not be loaded."""


class ConfigNotFound(ConfigError):
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"config file not found at {path}")


class ConfigParseError(ConfigError):
    """The config file exists but is not a valid YAML mapping."""


class ConfigDecodeError(ConfigError):
    """The merged file/env values do not fit the config model."""


class DatabaseError(BootstrapError):
    """Database connection could not be established."""


class UnsupportedDriver(DatabaseError):
    def __init__(self, driver: str):
        self.driver = driver
        super().__init__(f"unsupported database driver: {driver!r}")


class DatabaseConnectionError(DatabaseError):
    """The backend driver failed to open a connection."""

    def __init__(self, driver: str, message: str):
        self.driver = driver
        super().__init__(f"failed to connect to {driver} database: {message}")
