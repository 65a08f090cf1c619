"""CRM assistant request/response schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ConversationTurn(BaseModel):
    role: str = Field(default="user", max_length=20)
    content: str = Field(max_length=20000)


class AssistantRequest(BaseModel):
    message: str = Field(min_length=1, max_length=10000)
    conversation: list[ConversationTurn] = Field(default_factory=list)


class AssistantResponse(BaseModel):
    response: str
    tool_calls: int = 0
    error_code: str | None = None
