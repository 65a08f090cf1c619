"""Deal model module."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from speakerdesk.core.enums import DealPriority, DealStatus
from speakerdesk.models.base import Base, TimestampMixin


class Deal(Base, TimestampMixin):
    __tablename__ = "deals"
    __table_args__ = (
        Index("idx_deals_status", "status"),
        Index("idx_deals_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    client_email: Mapped[str | None] = mapped_column(String(255))
    client_phone: Mapped[str | None] = mapped_column(String(64))
    company: Mapped[str | None] = mapped_column(String(255))
    event_title: Mapped[str] = mapped_column(String(255), nullable=False)
    event_date: Mapped[date | None] = mapped_column(Date)
    event_location: Mapped[str | None] = mapped_column(String(255))
    event_type: Mapped[str | None] = mapped_column(String(64))
    speaker_requested: Mapped[str | None] = mapped_column(String(255))
    attendee_count: Mapped[int | None] = mapped_column(Integer)
    budget_range: Mapped[str | None] = mapped_column(String(64))
    deal_value: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    status: Mapped[str] = mapped_column(String(40), default=DealStatus.LEAD.value, nullable=False)
    priority: Mapped[str] = mapped_column(String(20), default=DealPriority.MEDIUM.value, nullable=False)
    source: Mapped[str | None] = mapped_column(String(100))
    notes: Mapped[str | None] = mapped_column(Text)
    last_contact: Mapped[date | None] = mapped_column(Date)
    next_follow_up: Mapped[date | None] = mapped_column(Date)

    travel_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    flight_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    hotel_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    travel_stipend: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    travel_notes: Mapped[str | None] = mapped_column(Text)

    lost_reason: Mapped[str | None] = mapped_column(String(255))
    lost_details: Mapped[str | None] = mapped_column(Text)
    lost_competitor: Mapped[str | None] = mapped_column(String(255))
    worth_follow_up: Mapped[bool | None] = mapped_column(Boolean)
    won_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    lost_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    commission_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))
    commission_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))

    project = relationship("Project", back_populates="deal", uselist=False, passive_deletes=True)
    activities = relationship("DealActivity", back_populates="deal", passive_deletes=True)
