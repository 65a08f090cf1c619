"""Project persistence for projects derived from won deals."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from speakerdesk.core.enums import CLOSED_PROJECT_STATUSES, normalize_status
from speakerdesk.core.exceptions import PersistenceError
from speakerdesk.models import Project
from speakerdesk.models.base import utcnow
from speakerdesk.services.base_service import BaseService

logger = logging.getLogger(__name__)

PROJECT_WRITABLE_FIELDS = frozenset(
    column.key for column in Project.__table__.columns if column.key not in {"id", "created_at", "updated_at"}
)


class ProjectService(BaseService):
    """Service for project creation and lookups."""

    def create_project(self, data: dict[str, Any]) -> Project | None:
        """Insert a project; returns None instead of raising when the store rejects it.

        A second project for the same deal violates ``uq_projects_deal_id``
        and also comes back as None.
        """
        fields = {key: value for key, value in data.items() if key in PROJECT_WRITABLE_FIELDS}
        try:
            with self.session() as db:
                project = Project(**fields)
                db.add(project)
                self.commit(db)
                db.refresh(project)
        except SQLAlchemyError as exc:
            logger.warning(
                "project.create.failed",
                extra={"event": "project.create.failed", "deal_id": fields.get("deal_id"), "error": str(exc)},
            )
            return None
        logger.info(
            "project.created",
            extra={"event": "project.created", "project_id": project.id, "deal_id": project.deal_id},
        )
        return project

    def get_project(self, project_id: int) -> Project | None:
        with self.session() as db:
            return db.get(Project, project_id)

    def get_project_by_deal(self, deal_id: int) -> Project | None:
        with self.session() as db:
            return db.scalars(select(Project).where(Project.deal_id == deal_id)).first()

    def list_projects(self, status: str | None = None, limit: int | None = None) -> list[Project]:
        stmt = select(Project).order_by(Project.created_at.desc(), Project.id.desc())
        if status:
            stmt = stmt.where(Project.status == normalize_status(status))
        if limit is not None:
            stmt = stmt.limit(limit)
        with self.session() as db:
            return list(db.scalars(stmt))

    def list_active_projects(self, limit: int | None = None) -> list[Project]:
        """Projects not yet completed or cancelled, soonest event first."""
        stmt = (
            select(Project)
            .where(Project.status.not_in(CLOSED_PROJECT_STATUSES))
            .order_by(Project.event_date.asc().nulls_last(), Project.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        with self.session() as db:
            return list(db.scalars(stmt))

    def list_upcoming_projects(self, days: int = 30, limit: int = 10, today: date | None = None) -> list[Project]:
        start = today or date.today()
        stmt = (
            select(Project)
            .where(Project.status.not_in(CLOSED_PROJECT_STATUSES))
            .where(Project.event_date.is_not(None))
            .where(Project.event_date >= start, Project.event_date <= start + timedelta(days=days))
            .order_by(Project.event_date.asc())
            .limit(limit)
        )
        with self.session() as db:
            return list(db.scalars(stmt))

    def update_project_status(self, project_id: int, status: str) -> Project | None:
        try:
            with self.session() as db:
                project = db.get(Project, project_id)
                if project is None:
                    return None
                project.status = normalize_status(status) or project.status
                project.updated_at = utcnow()
                self.commit(db)
                db.refresh(project)
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"Failed to update project {project_id}",
                error_code="update_failed",
                details=str(exc),
            ) from exc
        logger.info(
            "project.status_updated",
            extra={"event": "project.status_updated", "project_id": project_id, "new_status": project.status},
        )
        return project

    def delete_project(self, project_id: int) -> bool:
        try:
            with self.session() as db:
                result = db.execute(delete(Project).where(Project.id == project_id))
                self.commit(db)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to delete project {project_id}", details=str(exc)) from exc
        return result.rowcount == 1
