"""Invoice request/response schemas for API contracts."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from speakerdesk.models.base import MAX_RECORD_ID
from speakerdesk.schemas.common import Money


class InvoicePairRequest(BaseModel):
    project_id: int = Field(ge=1, le=MAX_RECORD_ID)


class InvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    invoice_number: str
    invoice_type: str
    amount: Money
    status: str
    issue_date: date
    due_date: date | None = None
    description: str | None = None
    client_name: str | None = None
    client_email: str | None = None
    client_company: str | None = None
    parent_invoice_id: int | None = None


class InvoiceTotals(BaseModel):
    total: Money
    deposit: Money
    final: Money


class InvoicePairResponse(BaseModel):
    success: bool = True
    message: str
    deposit: InvoiceResponse
    final: InvoiceResponse
    totals: InvoiceTotals
