"""Database layer — MySQL or PostgreSQL, chosen by config."""

from web_template.db.connection import build_dsn, open_connection, open_engine, resolve_target

__all__ = ["build_dsn", "open_connection", "open_engine", "resolve_target"]
