"""Shared service base with robust session lifecycle behavior."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy.orm import Session, sessionmaker

from speakerdesk.database.db import session_scope


class BaseService:
    """Base class for services that open short-lived sessions per operation."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        with session_scope(self.session_factory) as db:
            yield db

    @staticmethod
    def commit(db: Session) -> None:
        """Commit current transaction and rollback on failure."""
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
