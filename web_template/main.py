"""Service entry point — load config, open the database."""

from __future__ import annotations

import logging
import sys

import sentry_sdk
from sqlalchemy.engine import Engine

from web_template.config import AppConfig, load_config
from web_template.db.connection import open_connection
from web_template.errors import BootstrapError

logger = logging.getLogger(__name__)

BANNER = "Main service Hello World"


def _init_sentry(dsn: str, environment: str) -> None:
    """Initialize Sentry SDK if a DSN is configured and not in development."""
    if not dsn or environment == "development":
        return
    sentry_sdk.init(
        dsn,
        environment=environment,
        traces_sample_rate=0,
        send_client_reports=False,
        auto_session_tracking=False,
    )


def _configure_logging(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def bootstrap(config: AppConfig | None = None) -> tuple[AppConfig, Engine]:
    """Load config (unless given) and open the configured database."""
    if config is None:
        config = load_config()

    _configure_logging(config.server.log_level)
    _init_sentry(config.sentry_dsn, config.environment)

    engine = open_connection(config)
    return config, engine


def cli_entry() -> None:
    """CLI entry point: print the banner and the connected engine."""
    print(BANNER)

    try:
        _, engine = bootstrap()
    except BootstrapError as e:
        if not logging.getLogger().handlers:
            _configure_logging("info")
        logger.error("Startup failed: %s", e)
        sys.exit(1)

    try:
        print(engine)
    finally:
        engine.dispose()
