"""Maps a won deal onto the project record that delivers it."""

from __future__ import annotations

from datetime import date
from typing import Any

from speakerdesk.core.enums import PROJECT_INVOICING
from speakerdesk.models import Deal
from speakerdesk.orchestration.financials import Financials

PROJECT_TYPES = {
    "Workshop": "Workshop",
    "Keynote": "Speaking",
    "Consulting": "Consulting",
}
VIRTUAL_EVENT_MARKERS = ("virtual", "webinar")


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def project_type_for(event_type: str | None) -> str:
    return PROJECT_TYPES.get(event_type or "", "Other")


def classify_event(event_type: str | None, event_location: str | None) -> str:
    kind = (event_type or "").lower()
    if any(marker in kind for marker in VIRTUAL_EVENT_MARKERS):
        return "virtual"
    if "remote" in (event_location or "").lower():
        return "virtual"
    return "local"


def build_project_payload(
    deal: Deal,
    financials: Financials,
    overrides: dict[str, Any] | None = None,
    today: date | None = None,
) -> dict[str, Any]:
    """Project fields for ``deal``; ``overrides`` may carry speaker_name and contract_signed."""
    overrides = overrides or {}
    return {
        "deal_id": deal.id,
        "project_name": deal.event_title,
        "client_name": deal.client_name,
        "client_email": deal.client_email,
        "client_phone": deal.client_phone,
        "company": deal.company,
        "project_type": project_type_for(deal.event_type),
        "description": (
            f"Event: {_text(deal.event_title)}\n"
            f"Location: {_text(deal.event_location)}\n"
            f"Attendees: {_text(deal.attendee_count)}\n\n"
            f"{_text(deal.notes)}"
        ),
        "status": PROJECT_INVOICING,
        "priority": deal.priority,
        "start_date": today or date.today(),
        "deadline": deal.event_date,
        "budget": financials.deal_value,
        "spent": 0,
        "completion_percentage": 0,
        "billing_contact_name": deal.client_name,
        "billing_contact_email": deal.client_email,
        "billing_contact_phone": deal.client_phone,
        "logistics_contact_name": deal.client_name,
        "logistics_contact_email": deal.client_email,
        "logistics_contact_phone": deal.client_phone,
        "end_client_name": deal.company,
        "event_name": deal.event_title,
        "event_date": deal.event_date,
        "event_location": deal.event_location,
        "event_type": deal.event_type,
        "requested_speaker_name": overrides.get("speaker_name") or deal.speaker_requested,
        "program_topic": f"{_text(deal.event_title)} - {_text(deal.event_type)}",
        "program_type": deal.event_type,
        "audience_size": deal.attendee_count,
        "audience_demographics": "To be determined during planning",
        "speaker_fee": financials.speaker_fee,
        "commission_percentage": financials.commission_percentage,
        "commission_amount": financials.commission_amount,
        "attendee_count": deal.attendee_count,
        "contact_person": deal.client_name,
        "notes": (
            f"Deal ID: {deal.id}\n"
            f"Source: {_text(deal.source)}\n"
            f"Budget Range: {_text(deal.budget_range)}\n"
            f"Original notes: {_text(deal.notes)}"
        ),
        "tags": [tag for tag in (deal.event_type, deal.source) if tag],
        "contract_signed": bool(overrides.get("contract_signed") or False),
        "invoice_sent": False,
        "payment_received": False,
        "presentation_ready": False,
        "materials_sent": False,
        "event_classification": classify_event(deal.event_type, deal.event_location),
    }
