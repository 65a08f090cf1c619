"""Invoice endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Response, status

from speakerdesk.api.v1._authz import authorize_or_raise
from speakerdesk.core.config import Config
from speakerdesk.core.dependencies import Services, get_services
from speakerdesk.schemas.invoices import InvoicePairRequest, InvoicePairResponse, InvoiceResponse, InvoiceTotals

router = APIRouter(prefix="/invoices", tags=["invoices"])


def _authorize(authorization: str | None, scopes: list[str], config: Config):
    return authorize_or_raise(authorization, scopes, config)


@router.post("/generate-pair", response_model=InvoicePairResponse)
def generate_invoice_pair(
    payload: InvoicePairRequest,
    response: Response,
    authorization: str | None = Header(default=None, alias="Authorization"),
    services: Services = Depends(get_services),
) -> InvoicePairResponse:
    _authorize(authorization, scopes=["invoices.write"], config=services.config)
    pair = services.invoices.generate_pair(payload.project_id)
    if pair.created:
        response.status_code = status.HTTP_201_CREATED
        message = "Deposit and final invoices generated successfully"
    else:
        message = "Invoices already exist for this project"
    return InvoicePairResponse(
        message=message,
        deposit=InvoiceResponse.model_validate(pair.deposit),
        final=InvoiceResponse.model_validate(pair.final),
        totals=InvoiceTotals(total=pair.total, deposit=pair.deposit.amount, final=pair.final.amount),
    )
