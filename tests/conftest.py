"""Shared fixtures: a scratch working directory with ./config/config.yaml."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml

MYSQL_DATABASE = {
    "driver": "mysql",
    "host": "127.0.0.1",
    "port": 3306,
    "user": "u",
    "password": "p",
    "dbname": "d",
    "timezone": "UTC",
}

POSTGRES_DATABASE = {
    "driver": "postgres",
    "host": "127.0.0.1",
    "port": 5432,
    "user": "u",
    "password": "p",
    "dbname": "d",
    "sslmode": "disable",
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop APP_* overrides inherited from the developer's shell."""
    for name in list(os.environ):
        if name.upper().startswith("APP_"):
            monkeypatch.delenv(name)


@pytest.fixture
def workdir(tmp_path, monkeypatch) -> Path:
    """Run the test from an empty directory that has a ./config folder."""
    (tmp_path / "config").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_config(workdir):
    """Write a mapping (or raw text) to ./config/config.yaml."""

    def _write(data) -> Path:
        path = workdir / "config" / "config.yaml"
        if isinstance(data, str):
            path.write_text(data)
        else:
            path.write_text(yaml.safe_dump(data))
        return path

    return _write
