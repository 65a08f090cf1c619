"""Schema bootstrap: run Alembic migrations to head."""

from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig

from speakerdesk.core.startup import bootstrap

logger = logging.getLogger(__name__)
PROJECT_ROOT = Path(__file__).resolve().parents[2]


def build_alembic_config(database_url: str) -> AlembicConfig:
    cfg = AlembicConfig(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    return cfg


def init_db(database_url: str | None = None) -> None:
    config = bootstrap()
    url = database_url or config.DATABASE_URL
    command.upgrade(build_alembic_config(url), "head")
    logger.info("database.migrated", extra={"event": "database.migrated"})


if __name__ == "__main__":
    init_db()
