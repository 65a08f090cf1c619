"""Project endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Query

from speakerdesk.api.v1._authz import authorize_or_raise
from speakerdesk.core.config import Config
from speakerdesk.core.dependencies import Services, get_services
from speakerdesk.core.exceptions import NotFoundError
from speakerdesk.notifications.messages import build_project_status_update_message
from speakerdesk.orchestration.deal_transitions import parse_record_id
from speakerdesk.schemas.projects import ProjectResponse, ProjectStatusUpdateRequest

router = APIRouter(prefix="/projects", tags=["projects"])


def _authorize(authorization: str | None, scopes: list[str], config: Config):
    return authorize_or_raise(authorization, scopes, config)


def _project_json(project) -> dict:
    return ProjectResponse.model_validate(project).model_dump(mode="json")


@router.get("")
def list_projects(
    status_filter: str | None = Query(default=None, alias="status", max_length=40),
    limit: int = Query(default=100, ge=1, le=500),
    authorization: str | None = Header(default=None, alias="Authorization"),
    services: Services = Depends(get_services),
) -> list[dict]:
    _authorize(authorization, scopes=["projects.read"], config=services.config)
    return [_project_json(project) for project in services.projects.list_projects(status=status_filter, limit=limit)]


@router.get("/{project_id}")
def get_project(
    project_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    services: Services = Depends(get_services),
) -> dict:
    _authorize(authorization, scopes=["projects.read"], config=services.config)
    project_id = parse_record_id(project_id, "project")
    project = services.projects.get_project(project_id)
    if project is None:
        raise NotFoundError(f"Project {project_id} not found")
    return _project_json(project)


@router.patch("/{project_id}/status")
def update_project_status(
    project_id: str,
    payload: ProjectStatusUpdateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    services: Services = Depends(get_services),
) -> dict:
    user = _authorize(authorization, scopes=["projects.write"], config=services.config)
    project_id = parse_record_id(project_id, "project")
    before = services.projects.get_project(project_id)
    if before is None:
        raise NotFoundError(f"Project {project_id} not found")
    project = services.projects.update_project_status(project_id, payload.status)
    if project is None:
        raise NotFoundError(f"Project {project_id} not found")
    if before.status != project.status:
        services.notifier.notify(
            build_project_status_update_message(
                project_id=project.id,
                project_name=project.project_name,
                client_name=project.client_name,
                old_status=before.status,
                new_status=project.status,
                speaker_fee=project.speaker_fee,
                updated_by=user.actor,
                base_url=services.config.PUBLIC_BASE_URL,
            )
        )
    return _project_json(project)


@router.delete("/{project_id}")
def delete_project(
    project_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    services: Services = Depends(get_services),
) -> dict:
    _authorize(authorization, scopes=["projects.write"], config=services.config)
    project_id = parse_record_id(project_id, "project")
    if not services.projects.delete_project(project_id):
        raise NotFoundError(f"Project {project_id} not found")
    return {"message": "Project deleted successfully"}
