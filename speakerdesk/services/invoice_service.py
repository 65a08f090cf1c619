"""Deposit/final invoice pair generation for projects."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from speakerdesk.core.enums import INVOICE_DRAFT, InvoiceType
from speakerdesk.core.exceptions import NotFoundError, PersistenceError, ValidationError
from speakerdesk.models import Invoice, Project
from speakerdesk.services.base_service import BaseService

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
DEPOSIT_DUE_DAYS = 30
FINAL_DUE_DAYS_WITHOUT_EVENT = 60


@dataclass(frozen=True)
class InvoicePair:
    deposit: Invoice
    final: Invoice
    created: bool

    @property
    def total(self) -> Decimal:
        return self.deposit.amount + self.final.amount


def invoice_number(invoice_type: str, project_id: int, issued: date) -> str:
    prefix = "DEP" if invoice_type == InvoiceType.DEPOSIT.value else "FIN"
    return f"INV-{prefix}-{issued:%Y%m}-{project_id}"


def split_amount(total: Decimal, deposit_percentage: Decimal) -> tuple[Decimal, Decimal]:
    """Split ``total`` into (deposit, final) cents that always sum back to ``total``."""
    total = Decimal(total).quantize(CENT, rounding=ROUND_HALF_UP)
    deposit = (total * deposit_percentage / Decimal(100)).quantize(CENT, rounding=ROUND_HALF_UP)
    return deposit, total - deposit


class InvoiceService(BaseService):
    """Service that bills a project as a deposit plus a final payment."""

    def __init__(self, session_factory: sessionmaker, deposit_percentage: Decimal = Decimal("50")) -> None:
        super().__init__(session_factory)
        self.deposit_percentage = deposit_percentage

    def list_for_project(self, project_id: int) -> list[Invoice]:
        with self.session() as db:
            return list(db.scalars(select(Invoice).where(Invoice.project_id == project_id).order_by(Invoice.id)))

    def generate_pair(self, project_id: int, today: date | None = None) -> InvoicePair:
        """Create the deposit and final invoices for a project.

        Amounts are based on the speaker fee, falling back to the project
        budget. Calling again for the same project returns the existing pair.
        """
        issued = today or date.today()
        try:
            with self.session() as db:
                project = db.get(Project, project_id)
                if project is None:
                    raise NotFoundError(f"Project {project_id} not found")

                existing = {
                    invoice.invoice_type: invoice
                    for invoice in db.scalars(select(Invoice).where(Invoice.project_id == project_id))
                }
                if InvoiceType.DEPOSIT.value in existing and InvoiceType.FINAL.value in existing:
                    return InvoicePair(
                        deposit=existing[InvoiceType.DEPOSIT.value],
                        final=existing[InvoiceType.FINAL.value],
                        created=False,
                    )
                if existing:
                    raise ValidationError(
                        f"Project {project_id} already has a partial invoice set",
                        error_code="invoice_conflict",
                    )

                base = project.speaker_fee if project.speaker_fee else project.budget
                if not base or base <= 0:
                    raise ValidationError(
                        f"Project {project_id} has no speaker fee or budget to invoice",
                        error_code="invalid_amount",
                    )
                deposit_amount, final_amount = split_amount(base, self.deposit_percentage)
                deposit_pct = format(self.deposit_percentage.normalize(), "f")
                final_pct = format((Decimal(100) - self.deposit_percentage).normalize(), "f")

                common = {
                    "project_id": project_id,
                    "status": INVOICE_DRAFT,
                    "issue_date": issued,
                    "client_name": project.client_name,
                    "client_email": project.client_email,
                    "client_company": project.company,
                }
                deposit = Invoice(
                    invoice_number=invoice_number(InvoiceType.DEPOSIT.value, project_id, issued),
                    invoice_type=InvoiceType.DEPOSIT.value,
                    amount=deposit_amount,
                    due_date=issued + timedelta(days=DEPOSIT_DUE_DAYS),
                    description=f"Deposit ({deposit_pct}%) for {project.project_name}",
                    **common,
                )
                db.add(deposit)
                db.flush()
                final = Invoice(
                    invoice_number=invoice_number(InvoiceType.FINAL.value, project_id, issued),
                    invoice_type=InvoiceType.FINAL.value,
                    amount=final_amount,
                    due_date=project.event_date or issued + timedelta(days=FINAL_DUE_DAYS_WITHOUT_EVENT),
                    description=f"Final payment ({final_pct}%) for {project.project_name}",
                    parent_invoice_id=deposit.id,
                    **common,
                )
                db.add(final)
                self.commit(db)
                db.refresh(deposit)
                db.refresh(final)
        except IntegrityError as exc:
            raise ValidationError(
                f"Invoices for project {project_id} already exist",
                error_code="invoice_conflict",
                details=str(exc.orig),
            ) from exc
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to generate invoices for project {project_id}", details=str(exc)) from exc

        logger.info(
            "invoice.pair_generated",
            extra={"event": "invoice.pair_generated", "project_id": project_id, "invoice_id": deposit.id},
        )
        return InvoicePair(deposit=deposit, final=final, created=True)
