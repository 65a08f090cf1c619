"""Startup validation and bootstrap helpers."""

from __future__ import annotations

import logging

from speakerdesk.core.config import Config, get_config
from speakerdesk.core.logging_config import configure_logging
from speakerdesk.database.db import verify_database_connection

logger = logging.getLogger(__name__)


def validate_startup_config(config: Config, engine=None) -> None:
    """Fail-fast config and connectivity checks."""
    if engine is not None:
        database_ok = verify_database_connection(engine, required=config.DB_CONNECTIVITY_REQUIRED)
        if not database_ok and config.DB_CONNECTIVITY_REQUIRED:
            raise RuntimeError("Database connectivity check failed.")

    if config.is_production and config.DATABASE_URL.startswith("sqlite"):
        logger.warning(
            "startup.production.sqlite_detected",
            extra={"event": "startup.production.sqlite_detected"},
        )
    if not config.slack_enabled:
        logger.warning("startup.slack.disabled", extra={"event": "startup.slack.disabled"})

    logger.info(
        "startup.config.validated",
        extra={"event": "startup.config.validated"},
    )


def bootstrap(config: Config | None = None, engine=None) -> Config:
    """Initialize logging and validate runtime configuration."""
    config = config or get_config()
    configure_logging(config)
    validate_startup_config(config, engine)
    return config
