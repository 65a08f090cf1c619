"""Enums for the Speakerdesk application.

Statuses are stored as plain strings so that values added on the business
side (e.g. ``contacted`` from Slack) still round-trip. The enums below are
the canonical vocabulary the code reasons about.
"""

from enum import Enum


class DealStatus(Enum):
    """Status of a deal in the sales pipeline."""

    LEAD = "lead"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    WON = "won"
    LOST = "lost"


class DealPriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ProjectStatus(Enum):
    """Delivery stages of a won engagement."""

    INVOICING = "invoicing"
    LOGISTICS_PLANNING = "logistics_planning"
    PRE_EVENT = "pre_event"
    EVENT_WEEK = "event_week"
    FOLLOW_UP = "follow_up"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InvoiceType(Enum):
    DEPOSIT = "deposit"
    FINAL = "final"


class InvoiceStatus(Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"


class CallOutcome(Enum):
    """Outcomes offered by the Slack "Log Call" modal."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    NO_ANSWER = "no_answer"


INACTIVE_DEAL_STATUSES = frozenset({DealStatus.LOST.value, "cancelled"})
CLOSED_PROJECT_STATUSES = frozenset({ProjectStatus.COMPLETED.value, ProjectStatus.CANCELLED.value})

DEAL_WON = DealStatus.WON.value
DEAL_LOST = DealStatus.LOST.value
PROJECT_INVOICING = ProjectStatus.INVOICING.value
INVOICE_DRAFT = InvoiceStatus.DRAFT.value


def normalize_status(value: str | None) -> str | None:
    """Trim and lower-case a free-form status string; blank becomes None."""
    if value is None:
        return None
    normalized = str(value).strip().lower()
    return normalized or None
