"""Database connection factory — MySQL or PostgreSQL, selected by database.driver."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

import psycopg2
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from web_template.config import AppConfig, DatabaseConfig, DatabaseDriver
from web_template.errors import DatabaseConnectionError, UnsupportedDriver

logger = logging.getLogger(__name__)

ConnectionOpener = Callable[[DatabaseDriver, str], Engine]

_MYSQL_DSN = re.compile(
    r"^(?P<user>[^:]*):(?P<password>.*)@tcp\((?P<host>[^()]*):(?P<port>\d+)\)"
    r"/(?P<dbname>[^?]*)(?:\?(?P<params>.*))?$"
)


@dataclass(frozen=True)
class MySQLTarget:
    host: str
    port: int
    user: str
    password: str
    dbname: str
    timezone: str

    driver = DatabaseDriver.MYSQL

    def dsn(self, password: str | None = None) -> str:
        if password is None:
            password = self.password
        return (
            f"{self.user}:{password}@tcp({self.host}:{self.port})/{self.dbname}"
            f"?charset=utf8mb4&parseTime=True&loc={self.timezone}"
        )

    def redacted_dsn(self) -> str:
        return self.dsn(password="***")


@dataclass(frozen=True)
class PostgresTarget:
    host: str
    port: int
    user: str
    password: str
    dbname: str
    sslmode: str

    driver = DatabaseDriver.POSTGRES

    def dsn(self, password: str | None = None) -> str:
        if password is None:
            password = self.password
        return (
            f"host={self.host} user={self.user} password={password} "
            f"dbname={self.dbname} port={self.port} sslmode={self.sslmode}"
        )

    def redacted_dsn(self) -> str:
        return self.dsn(password="***")


DatabaseTarget = MySQLTarget | PostgresTarget


def resolve_target(database: DatabaseConfig) -> DatabaseTarget:
    """Pick the backend variant for ``database.driver``."""
    try:
        driver = DatabaseDriver(database.driver)
    except ValueError:
        raise UnsupportedDriver(database.driver) from None

    if driver is DatabaseDriver.MYSQL:
        return MySQLTarget(
            host=database.host,
            port=database.port,
            user=database.user,
            password=database.password,
            dbname=database.dbname,
            timezone=database.timezone,
        )
    return PostgresTarget(
        host=database.host,
        port=database.port,
        user=database.user,
        password=database.password,
        dbname=database.dbname,
        sslmode=database.sslmode,
    )


def build_dsn(config: AppConfig) -> str:
    """Render the backend-specific connection string for ``config.database``."""
    return resolve_target(config.database).dsn()


def mysql_url(dsn: str) -> URL:
    """Translate a ``user:pass@tcp(host:port)/db?...`` DSN into a PyMySQL URL."""
    match = _MYSQL_DSN.match(dsn)
    if match is None:
        raise ValueError("malformed mysql DSN")

    query: dict[str, str] = {}
    for pair in filter(None, (match["params"] or "").split("&")):
        key, _, value = pair.partition("=")
        # PyMySQL has no parseTime/loc options and always returns naive datetimes,
        # so database.timezone stays in the DSN only and never changes the session
        # time zone.
        if key == "charset":
            query["charset"] = value

    return URL.create(
        "mysql+pymysql",
        username=match["user"] or None,
        password=match["password"] or None,
        host=match["host"] or None,
        port=int(match["port"]),
        database=match["dbname"] or None,
        query=query,
    )


def open_engine(driver: DatabaseDriver, dsn: str) -> Engine:
    """Create an engine for ``dsn`` and check that one connection can be opened."""
    if driver is DatabaseDriver.MYSQL:
        engine = create_engine(mysql_url(dsn))
    else:
        # libpq key/value DSN goes to psycopg2 as-is
        engine = create_engine("postgresql+psycopg2://", creator=lambda: psycopg2.connect(dsn))

    try:
        with engine.connect():
            pass
    except Exception:
        engine.dispose()
        raise
    return engine


def open_connection(config: AppConfig, opener: ConnectionOpener = open_engine) -> Engine:
    """Open the database described by ``config.database``.

    Raises UnsupportedDriver before any I/O when the driver is unknown, and
    DatabaseConnectionError when the backend fails to connect.
    """
    target = resolve_target(config.database)
    logger.info("Connecting to %s database: %s", target.driver.value, target.redacted_dsn())

    try:
        engine = opener(target.driver, target.dsn())
    except (SQLAlchemyError, ValueError, OSError) as e:
        raise DatabaseConnectionError(target.driver.value, str(e)) from e

    logger.info("Connected to %s database %s", target.driver.value, target.dbname)
    return engine
