"""Tool definitions and executors for the CRM assistant."""

from __future__ import annotations

import logging
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from speakerdesk.core.exceptions import SpeakerdeskError
from speakerdesk.orchestration.deal_transitions import DealTransitionEngine, parse_record_id
from speakerdesk.schemas.deals import DealCreateRequest, DealResponse
from speakerdesk.schemas.projects import ProjectResponse
from speakerdesk.services.deal_service import DealService
from speakerdesk.services.project_service import ProjectService
from speakerdesk.services.speaker_service import SpeakerService

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 20
DEFAULT_SPEAKER_LIMIT = 15
MAX_LIST_LIMIT = 100

TOOLS: list[dict[str, Any]] = [
    {
        "name": "get_deals",
        "description": "Get a list of deals with optional filters",
        "input_schema": {
            "type": "object",
            "properties": {
                "status": {
                    "type": "string",
                    "description": "Filter by status: lead, qualified, proposal, negotiation, won, lost",
                },
                "limit": {"type": "number", "description": "Maximum number of results"},
            },
        },
    },
    {
        "name": "update_deal_status",
        "description": "Update the status of a deal. Moving a deal to won also creates its project.",
        "input_schema": {
            "type": "object",
            "properties": {
                "deal_id": {"type": "number", "description": "ID of the deal to update"},
                "status": {
                    "type": "string",
                    "description": "New status: lead, qualified, proposal, negotiation, won, lost",
                },
            },
            "required": ["deal_id", "status"],
        },
    },
    {
        "name": "delete_deal",
        "description": "Delete a deal",
        "input_schema": {
            "type": "object",
            "properties": {"deal_id": {"type": "number", "description": "ID of the deal to delete"}},
            "required": ["deal_id"],
        },
    },
    {
        "name": "create_deal",
        "description": "Create a new deal",
        "input_schema": {
            "type": "object",
            "properties": {
                "client_name": {"type": "string"},
                "client_email": {"type": "string"},
                "company": {"type": "string"},
                "event_title": {"type": "string"},
                "event_date": {"type": "string", "description": "YYYY-MM-DD"},
                "event_location": {"type": "string"},
                "event_type": {"type": "string"},
                "attendee_count": {"type": "number"},
                "budget_range": {"type": "string"},
                "deal_value": {"type": "number"},
                "status": {"type": "string"},
                "priority": {"type": "string"},
                "source": {"type": "string"},
                "notes": {"type": "string"},
                "last_contact": {"type": "string", "description": "YYYY-MM-DD"},
            },
            "required": [
                "client_name",
                "client_email",
                "company",
                "event_title",
                "event_date",
                "event_location",
                "event_type",
                "attendee_count",
                "budget_range",
                "deal_value",
                "status",
                "priority",
                "source",
                "last_contact",
            ],
        },
    },
    {
        "name": "get_projects",
        "description": "Get a list of projects with optional filters",
        "input_schema": {
            "type": "object",
            "properties": {
                "status": {"type": "string", "description": "Filter by status"},
                "limit": {"type": "number", "description": "Maximum number of results"},
            },
        },
    },
    {
        "name": "update_project_status",
        "description": "Update the status of a project",
        "input_schema": {
            "type": "object",
            "properties": {
                "project_id": {"type": "number", "description": "ID of the project to update"},
                "status": {"type": "string", "description": "New status"},
            },
            "required": ["project_id", "status"],
        },
    },
    {
        "name": "delete_project",
        "description": "Delete a project",
        "input_schema": {
            "type": "object",
            "properties": {"project_id": {"type": "number", "description": "ID of the project to delete"}},
            "required": ["project_id"],
        },
    },
    {
        "name": "get_speakers",
        "description": "Search for speakers by expertise, topic, or location",
        "input_schema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query for speaker name, topic, or expertise"},
                "limit": {"type": "number", "description": "Maximum number of results"},
            },
        },
    },
]


def _limit(value: Any, default: int) -> int:
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return default
    return max(1, min(limit, MAX_LIST_LIMIT))


def _as_id(value: Any) -> Any:
    # JSON numbers may arrive as 42.0.
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _deal_json(deal) -> dict[str, Any]:
    return DealResponse.model_validate(deal).model_dump(mode="json")


def _project_json(project) -> dict[str, Any]:
    return ProjectResponse.model_validate(project).model_dump(mode="json")


class CRMToolbox:
    """Executes assistant tool calls; every outcome is a JSON-ready dict."""

    def __init__(
        self,
        engine: DealTransitionEngine,
        deals: DealService,
        projects: ProjectService,
        speakers: SpeakerService,
    ) -> None:
        self.engine = engine
        self.deals = deals
        self.projects = projects
        self.speakers = speakers
        self._handlers: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
            "get_deals": self.get_deals,
            "update_deal_status": self.update_deal_status,
            "delete_deal": self.delete_deal,
            "create_deal": self.create_deal,
            "get_projects": self.get_projects,
            "update_project_status": self.update_project_status,
            "delete_project": self.delete_project,
            "get_speakers": self.get_speakers,
        }

    def execute(self, name: str, tool_input: dict[str, Any]) -> dict[str, Any]:
        handler = self._handlers.get(name)
        if handler is None:
            return {"error": f"Unknown tool: {name}"}
        try:
            return handler(tool_input or {})
        except SpeakerdeskError as exc:
            logger.info(
                "assistant.tool_error",
                extra={"event": "assistant.tool_error", "tool": name, "error": str(exc)},
            )
            return {"error": str(exc)}
        except PydanticValidationError as exc:
            return {
                "error": f"Invalid input: {exc.error_count()} field(s) failed validation",
                "details": exc.errors(include_url=False, include_context=False),
            }
        except Exception as exc:
            logger.exception("assistant.tool_failed", extra={"event": "assistant.tool_failed", "tool": name})
            return {"error": str(exc) or "Tool execution failed"}

    def get_deals(self, tool_input: dict[str, Any]) -> dict[str, Any]:
        limit = _limit(tool_input.get("limit"), DEFAULT_LIST_LIMIT)
        status = tool_input.get("status")
        if status:
            rows = self.deals.get_deals_by_status(status, limit=limit)
        else:
            rows = self.deals.list_recent_deals(limit=limit)
        return {"deals": [_deal_json(deal) for deal in rows], "count": len(rows)}

    def update_deal_status(self, tool_input: dict[str, Any]) -> dict[str, Any]:
        status = tool_input.get("status")
        if not status:
            return {"success": False, "error": "status is required"}
        result = self.engine.transition(_as_id(tool_input.get("deal_id")), status, updated_by="CRM assistant")
        return {"success": True, "deal": result.to_response()}

    def delete_deal(self, tool_input: dict[str, Any]) -> dict[str, Any]:
        deal_id = _as_id(tool_input.get("deal_id"))
        self.engine.delete_deal(deal_id)
        return {"success": True, "message": f"Deal #{deal_id} deleted successfully"}

    def create_deal(self, tool_input: dict[str, Any]) -> dict[str, Any]:
        request = DealCreateRequest.model_validate(tool_input)
        result = self.engine.create_deal(request.model_dump())
        return {"success": True, "deal": result.to_response()}

    def get_projects(self, tool_input: dict[str, Any]) -> dict[str, Any]:
        limit = _limit(tool_input.get("limit"), DEFAULT_LIST_LIMIT)
        rows = self.projects.list_projects(status=tool_input.get("status"), limit=limit)
        return {"projects": [_project_json(project) for project in rows], "count": len(rows)}

    def update_project_status(self, tool_input: dict[str, Any]) -> dict[str, Any]:
        project_id = tool_input.get("project_id")
        status = tool_input.get("status")
        if not isinstance(project_id, (int, float)) or not status:
            return {"success": False, "error": "project_id and status are required"}
        project = self.projects.update_project_status(parse_record_id(_as_id(project_id), "project"), status)
        if project is None:
            return {"success": False, "error": "Project not found"}
        return {"success": True, "project": _project_json(project)}

    def delete_project(self, tool_input: dict[str, Any]) -> dict[str, Any]:
        project_id = tool_input.get("project_id")
        if not isinstance(project_id, (int, float)):
            return {"success": False, "error": "project_id is required"}
        record_id = parse_record_id(_as_id(project_id), "project")
        if not self.projects.delete_project(record_id):
            return {"success": False, "error": "Project not found"}
        return {"success": True, "message": f"Project #{record_id} deleted successfully"}

    def get_speakers(self, tool_input: dict[str, Any]) -> dict[str, Any]:
        limit = _limit(tool_input.get("limit"), DEFAULT_SPEAKER_LIMIT)
        rows = self.speakers.search(tool_input.get("query"), limit=limit)
        speakers = [
            {
                "id": speaker.id,
                "name": speaker.name,
                "title": speaker.title,
                "location": speaker.location,
                "topics": speaker.topics or [],
                "short_bio": speaker.short_bio,
                "speaking_fee_range": speaker.speaking_fee_range,
            }
            for speaker in rows
        ]
        return {"speakers": speakers, "count": len(speakers)}
