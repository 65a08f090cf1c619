"""Logged interactions (calls, notes) against a deal."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from speakerdesk.models.base import Base, utcnow


class DealActivity(Base):
    __tablename__ = "deal_activities"
    __table_args__ = (Index("idx_deal_activities_deal", "deal_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    deal_id: Mapped[int] = mapped_column(ForeignKey("deals.id", ondelete="CASCADE"), nullable=False)
    activity_type: Mapped[str] = mapped_column(String(40), nullable=False, default="call")
    description: Mapped[str | None] = mapped_column(Text)
    outcome: Mapped[str | None] = mapped_column(String(40))
    next_action: Mapped[str | None] = mapped_column(Text)
    created_by: Mapped[str] = mapped_column(String(255), nullable=False, default="system")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    deal = relationship("Deal", back_populates="activities")
