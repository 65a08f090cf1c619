"""Project model module."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Date, ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from speakerdesk.core.enums import DealPriority, ProjectStatus
from speakerdesk.models.base import Base, TimestampMixin


class Project(Base, TimestampMixin):
    __tablename__ = "projects"
    __table_args__ = (
        Index("idx_projects_status", "status"),
        # A won deal derives at most one project.
        UniqueConstraint("deal_id", name="uq_projects_deal_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    deal_id: Mapped[int | None] = mapped_column(ForeignKey("deals.id", ondelete="SET NULL"))
    project_name: Mapped[str] = mapped_column(String(255), nullable=False)
    client_name: Mapped[str | None] = mapped_column(String(255))
    client_email: Mapped[str | None] = mapped_column(String(255))
    client_phone: Mapped[str | None] = mapped_column(String(64))
    company: Mapped[str | None] = mapped_column(String(255))
    project_type: Mapped[str] = mapped_column(String(40), default="Other", nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(40), default=ProjectStatus.INVOICING.value, nullable=False)
    priority: Mapped[str] = mapped_column(String(20), default=DealPriority.MEDIUM.value, nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date)
    deadline: Mapped[date | None] = mapped_column(Date)
    budget: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    spent: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    completion_percentage: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[list[str] | None] = mapped_column(JSON)

    billing_contact_name: Mapped[str | None] = mapped_column(String(255))
    billing_contact_email: Mapped[str | None] = mapped_column(String(255))
    billing_contact_phone: Mapped[str | None] = mapped_column(String(64))
    logistics_contact_name: Mapped[str | None] = mapped_column(String(255))
    logistics_contact_email: Mapped[str | None] = mapped_column(String(255))
    logistics_contact_phone: Mapped[str | None] = mapped_column(String(64))
    contact_person: Mapped[str | None] = mapped_column(String(255))

    end_client_name: Mapped[str | None] = mapped_column(String(255))
    event_name: Mapped[str | None] = mapped_column(String(255))
    event_date: Mapped[date | None] = mapped_column(Date)
    event_location: Mapped[str | None] = mapped_column(String(255))
    event_type: Mapped[str | None] = mapped_column(String(64))
    event_classification: Mapped[str | None] = mapped_column(String(20))
    attendee_count: Mapped[int | None] = mapped_column(Integer)

    requested_speaker_name: Mapped[str | None] = mapped_column(String(255))
    program_topic: Mapped[str | None] = mapped_column(String(255))
    program_type: Mapped[str | None] = mapped_column(String(64))
    audience_size: Mapped[int | None] = mapped_column(Integer)
    audience_demographics: Mapped[str | None] = mapped_column(Text)

    speaker_fee: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    commission_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))
    commission_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))

    contract_signed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    invoice_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    payment_received: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    presentation_ready: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    materials_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    deal = relationship("Deal", back_populates="project")
    invoices = relationship("Invoice", back_populates="project", passive_deletes=True)
