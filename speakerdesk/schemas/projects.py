"""Project request/response schemas for API contracts."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from speakerdesk.core.enums import normalize_status
from speakerdesk.schemas.common import Money


class ProjectStatusUpdateRequest(BaseModel):
    status: str = Field(min_length=2, max_length=40)

    @field_validator("status")
    @classmethod
    def _status(cls, value: str) -> str:
        normalized = normalize_status(value)
        if normalized is None:
            raise ValueError("status must not be blank")
        return normalized


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    deal_id: int | None = None
    project_name: str
    client_name: str | None = None
    client_email: str | None = None
    client_phone: str | None = None
    company: str | None = None
    project_type: str
    description: str | None = None
    status: str
    priority: str
    start_date: date | None = None
    deadline: date | None = None
    budget: Money
    spent: Money
    completion_percentage: int
    notes: str | None = None
    tags: list[str] | None = None
    billing_contact_name: str | None = None
    billing_contact_email: str | None = None
    billing_contact_phone: str | None = None
    logistics_contact_name: str | None = None
    logistics_contact_email: str | None = None
    logistics_contact_phone: str | None = None
    contact_person: str | None = None
    end_client_name: str | None = None
    event_name: str | None = None
    event_date: date | None = None
    event_location: str | None = None
    event_type: str | None = None
    event_classification: str | None = None
    attendee_count: int | None = None
    requested_speaker_name: str | None = None
    program_topic: str | None = None
    program_type: str | None = None
    audience_size: int | None = None
    audience_demographics: str | None = None
    speaker_fee: Money | None = None
    commission_percentage: Money | None = None
    commission_amount: Money | None = None
    contract_signed: bool = False
    invoice_sent: bool = False
    payment_received: bool = False
    presentation_ready: bool = False
    materials_sent: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
