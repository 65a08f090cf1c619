"""Database engine construction and session management."""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from speakerdesk.core.config import Config

logger = logging.getLogger(__name__)


def _engine_kwargs(database_url: str, config: Config | None) -> dict[str, Any]:
    echo = bool(config and config.DEBUG and not config.is_production)
    if database_url.startswith("sqlite"):
        return {
            "echo": echo,
            "connect_args": {"check_same_thread": False, "timeout": 30},
        }

    connect_args: dict[str, Any] = {}
    if config and config.DB_STATEMENT_TIMEOUT_MS:
        connect_args["options"] = f"-c statement_timeout={config.DB_STATEMENT_TIMEOUT_MS}"
    return {
        "echo": echo,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "pool_size": 10,
        "max_overflow": 20,
        "connect_args": connect_args,
    }


def build_engine(database_url: str, config: Config | None = None) -> Engine:
    """Create the SQLAlchemy engine for the given URL."""
    engine = create_engine(database_url, **_engine_kwargs(database_url, config))
    if database_url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_session_factory(engine: Engine) -> sessionmaker:
    """Return a sessionmaker bound to ``engine``."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Context-manager wrapper for safe DB session lifecycle."""
    db = session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def verify_database_connection(engine: Engine, required: bool = False) -> bool:
    """Verify DB connectivity during startup."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as exc:  # pragma: no cover - exercised in deployment.
        if required:
            logger.exception("database.connection_failed", extra={"event": "database.connection_failed"})
        else:
            logger.warning(
                "database.connection_failed.optional",
                extra={"event": "database.connection_failed.optional", "error": str(exc)},
            )
        return False
