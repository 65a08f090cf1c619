"""Deal request/response schemas for API contracts."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from speakerdesk.core.enums import DealPriority, DealStatus, normalize_status
from speakerdesk.schemas.common import Money


def _normalize_status_field(value: str | None) -> str | None:
    normalized = normalize_status(value)
    if value is not None and normalized is None:
        raise ValueError("status must not be blank")
    return normalized


class DealCreateRequest(BaseModel):
    client_name: str = Field(min_length=1, max_length=255)
    client_email: str = Field(min_length=3, max_length=320)
    client_phone: str | None = Field(default=None, max_length=64)
    company: str = Field(min_length=1, max_length=255)
    event_title: str = Field(min_length=1, max_length=255)
    event_date: date
    event_location: str = Field(min_length=1, max_length=255)
    event_type: str = Field(min_length=1, max_length=64)
    speaker_requested: str | None = Field(default=None, max_length=255)
    attendee_count: int = Field(ge=0)
    budget_range: str = Field(min_length=1, max_length=64)
    deal_value: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    status: str = Field(default=DealStatus.LEAD.value, max_length=40)
    priority: str = Field(default=DealPriority.MEDIUM.value, max_length=20)
    source: str = Field(min_length=1, max_length=100)
    notes: str = Field(default="", max_length=10000)
    last_contact: date | None = None
    next_follow_up: date | None = None
    travel_required: bool = False
    flight_required: bool = False
    hotel_required: bool = False
    travel_stipend: Decimal | None = Field(default=None, ge=0)
    travel_notes: str | None = Field(default=None, max_length=10000)

    @field_validator("status")
    @classmethod
    def _status(cls, value: str) -> str:
        return _normalize_status_field(value)


class DealUpdateRequest(BaseModel):
    """Partial deal update; the financial override fields feed project derivation."""

    client_name: str | None = Field(default=None, max_length=255)
    client_email: str | None = Field(default=None, min_length=3, max_length=320)
    client_phone: str | None = Field(default=None, max_length=64)
    company: str | None = Field(default=None, max_length=255)
    event_title: str | None = Field(default=None, max_length=255)
    event_date: date | None = None
    event_location: str | None = Field(default=None, max_length=255)
    event_type: str | None = Field(default=None, max_length=64)
    speaker_requested: str | None = Field(default=None, max_length=255)
    attendee_count: int | None = Field(default=None, ge=0)
    budget_range: str | None = Field(default=None, max_length=64)
    deal_value: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    status: str | None = Field(default=None, max_length=40)
    priority: str | None = Field(default=None, max_length=20)
    source: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=10000)
    last_contact: date | None = None
    next_follow_up: date | None = None
    travel_required: bool | None = None
    flight_required: bool | None = None
    hotel_required: bool | None = None
    travel_stipend: Decimal | None = Field(default=None, ge=0)
    travel_notes: str | None = Field(default=None, max_length=10000)
    lost_reason: str | None = Field(default=None, max_length=255)
    lost_details: str | None = Field(default=None, max_length=10000)
    lost_competitor: str | None = Field(default=None, max_length=255)
    worth_follow_up: bool | None = None

    commission_percentage: Decimal | None = Field(default=None, ge=0, le=100)
    commission_amount: Decimal | None = Field(default=None, ge=0)
    speaker_fee: Decimal | None = Field(default=None, ge=0)
    speaker_name: str | None = Field(default=None, max_length=255)
    contract_signed: bool | None = None

    @field_validator("status")
    @classmethod
    def _status(cls, value: str | None) -> str | None:
        return _normalize_status_field(value)

    def changes(self) -> dict:
        """Fields the caller actually supplied, with nulls dropped."""
        return {key: value for key, value in self.model_dump(exclude_unset=True).items() if value is not None}


class DealResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_name: str
    client_email: str | None = None
    client_phone: str | None = None
    company: str | None = None
    event_title: str
    event_date: date | None = None
    event_location: str | None = None
    event_type: str | None = None
    speaker_requested: str | None = None
    attendee_count: int | None = None
    budget_range: str | None = None
    deal_value: Money | None = None
    status: str
    priority: str
    source: str | None = None
    notes: str | None = None
    last_contact: date | None = None
    next_follow_up: date | None = None
    travel_required: bool = False
    flight_required: bool = False
    hotel_required: bool = False
    travel_stipend: Money | None = None
    travel_notes: str | None = None
    lost_reason: str | None = None
    lost_details: str | None = None
    lost_competitor: str | None = None
    worth_follow_up: bool | None = None
    won_date: datetime | None = None
    lost_date: datetime | None = None
    commission_percentage: Money | None = None
    commission_amount: Money | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
