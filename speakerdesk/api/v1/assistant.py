"""CRM assistant endpoint for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header

from speakerdesk.api.v1._authz import authorize_or_raise
from speakerdesk.core.config import Config
from speakerdesk.core.dependencies import Services, get_services
from speakerdesk.core.exceptions import ToolLoopExceeded
from speakerdesk.schemas.assistant import AssistantRequest, AssistantResponse

router = APIRouter(prefix="/assistant", tags=["assistant"])


def _authorize(authorization: str | None, scopes: list[str], config: Config):
    return authorize_or_raise(authorization, scopes, config)


@router.post("/crm", response_model=AssistantResponse)
def crm_assistant(
    payload: AssistantRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    services: Services = Depends(get_services),
) -> AssistantResponse:
    _authorize(authorization, scopes=["assistant.use"], config=services.config)
    try:
        reply = services.assistant.respond(payload.message, payload.conversation)
    except ToolLoopExceeded as exc:
        return AssistantResponse(response=str(exc), tool_calls=0, error_code=exc.error_code)
    return AssistantResponse(response=reply.text, tool_calls=reply.tool_calls)
