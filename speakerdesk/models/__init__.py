"""SQLAlchemy model package."""

from speakerdesk.models.base import MAX_RECORD_ID, Base
from speakerdesk.models.deal import Deal
from speakerdesk.models.deal_activity import DealActivity
from speakerdesk.models.invoice import Invoice
from speakerdesk.models.project import Project
from speakerdesk.models.speaker import Speaker

__all__ = [
    "MAX_RECORD_ID",
    "Base",
    "Deal",
    "DealActivity",
    "Invoice",
    "Project",
    "Speaker",
]
