"""Deal persistence: CRUD plus the compare-and-swap status write."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError

from speakerdesk.core.enums import DEAL_LOST, DEAL_WON, INACTIVE_DEAL_STATUSES, normalize_status
from speakerdesk.core.exceptions import NotFoundError, PersistenceError
from speakerdesk.models import Deal, DealActivity
from speakerdesk.models.base import utcnow
from speakerdesk.services.base_service import BaseService

logger = logging.getLogger(__name__)

DEAL_WRITABLE_FIELDS = frozenset(
    column.key
    for column in Deal.__table__.columns
    if column.key not in {"id", "created_at", "updated_at", "won_date", "lost_date"}
)
MAX_STATUS_WRITE_ATTEMPTS = 3


@dataclass(frozen=True)
class DealUpdate:
    """Outcome of a deal write, as observed by the caller that performed it."""

    deal: Deal
    previous_status: str
    status_changed: bool
    requested_status: str | None = None

    @property
    def already_in_target_state(self) -> bool:
        return (
            self.requested_status is not None
            and not self.status_changed
            and self.previous_status == self.requested_status
        )


def _stamp_closed_dates(deal: Deal, new_status: str) -> None:
    if new_status == DEAL_WON and deal.won_date is None:
        deal.won_date = utcnow()
    if new_status == DEAL_LOST and deal.lost_date is None:
        deal.lost_date = utcnow()


class DealService(BaseService):
    """Service for deal CRUD and status transitions."""

    def get_all_deals(self) -> list[Deal]:
        with self.session() as db:
            return list(db.scalars(select(Deal).order_by(Deal.created_at.desc(), Deal.id.desc())))

    def get_deal(self, deal_id: int) -> Deal | None:
        with self.session() as db:
            return db.get(Deal, deal_id)

    def get_deals_by_status(self, status: str, limit: int | None = None) -> list[Deal]:
        stmt = (
            select(Deal)
            .where(Deal.status == normalize_status(status))
            .order_by(Deal.created_at.desc(), Deal.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        with self.session() as db:
            return list(db.scalars(stmt))

    def search_deals(self, term: str, limit: int | None = None) -> list[Deal]:
        pattern = f"%{term.strip().lower()}%"
        stmt = (
            select(Deal)
            .where(
                or_(
                    func.lower(Deal.client_name).like(pattern),
                    func.lower(Deal.company).like(pattern),
                    func.lower(Deal.event_title).like(pattern),
                    func.lower(Deal.client_email).like(pattern),
                )
            )
            .order_by(Deal.created_at.desc(), Deal.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        with self.session() as db:
            return list(db.scalars(stmt))

    def list_recent_deals(self, limit: int | None = 20) -> list[Deal]:
        stmt = select(Deal).order_by(Deal.created_at.desc(), Deal.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        with self.session() as db:
            return list(db.scalars(stmt))

    def list_active_deals(self, limit: int | None = None, order_by_value: bool = False) -> list[Deal]:
        stmt = select(Deal).where(Deal.status.not_in(INACTIVE_DEAL_STATUSES))
        if order_by_value:
            stmt = stmt.order_by(Deal.deal_value.desc().nulls_last(), Deal.id.desc())
        else:
            stmt = stmt.order_by(Deal.created_at.desc(), Deal.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        with self.session() as db:
            return list(db.scalars(stmt))

    def list_stale_deals(self, days: int = 7, limit: int = 10) -> list[Deal]:
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        stmt = (
            select(Deal)
            .where(Deal.status.not_in({DEAL_WON, *INACTIVE_DEAL_STATUSES}))
            .where(Deal.updated_at < cutoff)
            .order_by(Deal.updated_at.asc())
            .limit(limit)
        )
        with self.session() as db:
            return list(db.scalars(stmt))

    def list_deals_created_since(self, days: int = 7, limit: int | None = 10) -> list[Deal]:
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        stmt = (
            select(Deal)
            .where(Deal.created_at > cutoff)
            .order_by(Deal.created_at.desc(), Deal.id.desc())
            .limit(limit)
        )
        with self.session() as db:
            return list(db.scalars(stmt))

    def create_deal(self, data: dict[str, Any]) -> Deal:
        fields = {key: value for key, value in data.items() if key in DEAL_WRITABLE_FIELDS}
        fields["status"] = normalize_status(fields.get("status")) or "lead"
        try:
            with self.session() as db:
                deal = Deal(**fields)
                _stamp_closed_dates(deal, deal.status)
                db.add(deal)
                self.commit(db)
                db.refresh(deal)
        except SQLAlchemyError as exc:
            logger.exception("deal.create.failed", extra={"event": "deal.create.failed"})
            raise PersistenceError("Failed to create deal", details=str(exc)) from exc
        logger.info("deal.created", extra={"event": "deal.created", "deal_id": deal.id})
        return deal

    def update_deal(
        self,
        deal_id: int,
        fields: dict[str, Any],
        expected_status: str | None = None,
    ) -> DealUpdate:
        """Partially update a deal.

        Keys that are not deal columns, and ``None`` values, are ignored. A
        status change is written as ``UPDATE ... WHERE status = <status read>``
        so that of several concurrent writers exactly one observes the change;
        losers re-read and retry. When ``expected_status`` is given and the
        stored status differs, nothing is written.
        """
        changes = {
            key: value
            for key, value in fields.items()
            if key in DEAL_WRITABLE_FIELDS and value is not None
        }
        new_status = normalize_status(changes.pop("status", None))
        expected_status = normalize_status(expected_status)

        for _ in range(MAX_STATUS_WRITE_ATTEMPTS):
            try:
                with self.session() as db:
                    deal = db.get(Deal, deal_id)
                    if deal is None:
                        raise NotFoundError(f"Deal {deal_id} not found")

                    previous_status = deal.status
                    if expected_status is not None and previous_status != expected_status:
                        return DealUpdate(
                            deal=deal,
                            previous_status=previous_status,
                            status_changed=False,
                            requested_status=new_status,
                        )

                    for key, value in changes.items():
                        setattr(deal, key, value)

                    status_changed = new_status is not None and new_status != previous_status
                    if status_changed:
                        db.flush()
                        result = db.execute(
                            update(Deal)
                            .where(Deal.id == deal_id, Deal.status == previous_status)
                            .values(status=new_status, updated_at=utcnow())
                            .execution_options(synchronize_session=False)
                        )
                        if result.rowcount != 1:
                            db.rollback()
                            logger.info(
                                "deal.update.status_conflict",
                                extra={
                                    "event": "deal.update.status_conflict",
                                    "deal_id": deal_id,
                                    "previous_status": previous_status,
                                    "new_status": new_status,
                                },
                            )
                            continue
                        db.refresh(deal)
                        _stamp_closed_dates(deal, new_status)
                    elif changes:
                        deal.updated_at = utcnow()

                    self.commit(db)
                    db.refresh(deal)
                    return DealUpdate(
                        deal=deal,
                        previous_status=previous_status,
                        status_changed=status_changed,
                        requested_status=new_status,
                    )
            except SQLAlchemyError as exc:
                logger.exception(
                    "deal.update.failed",
                    extra={"event": "deal.update.failed", "deal_id": deal_id},
                )
                raise PersistenceError(
                    f"Failed to update deal {deal_id}",
                    error_code="update_failed",
                    details=str(exc),
                ) from exc

        raise PersistenceError(
            f"Deal {deal_id} status changed concurrently {MAX_STATUS_WRITE_ATTEMPTS} times",
            error_code="update_failed",
        )

    def transition_status(
        self,
        deal_id: int,
        new_status: str,
        expected_status: str | None = None,
    ) -> DealUpdate:
        """Move a deal to ``new_status``; ``expected_status=None`` accepts any current status."""
        return self.update_deal(deal_id, {"status": new_status}, expected_status=expected_status)

    def delete_deal(self, deal_id: int) -> bool:
        try:
            with self.session() as db:
                result = db.execute(delete(Deal).where(Deal.id == deal_id))
                self.commit(db)
        except SQLAlchemyError as exc:
            logger.exception("deal.delete.failed", extra={"event": "deal.delete.failed", "deal_id": deal_id})
            raise PersistenceError(f"Failed to delete deal {deal_id}", details=str(exc)) from exc
        deleted = result.rowcount == 1
        if deleted:
            logger.info("deal.deleted", extra={"event": "deal.deleted", "deal_id": deal_id})
        return deleted

    def log_activity(
        self,
        deal_id: int,
        description: str | None,
        outcome: str | None = None,
        next_action: str | None = None,
        created_by: str = "system",
        activity_type: str = "call",
    ) -> DealActivity:
        """Record a call (or other touchpoint) and bump the deal's last contact date."""
        with self.session() as db:
            deal = db.get(Deal, deal_id)
            if deal is None:
                raise NotFoundError(f"Deal {deal_id} not found")
            activity = DealActivity(
                deal_id=deal_id,
                activity_type=activity_type,
                description=description,
                outcome=outcome,
                next_action=next_action,
                created_by=created_by,
            )
            db.add(activity)
            deal.last_contact = date.today()
            deal.updated_at = utcnow()
            self.commit(db)
            db.refresh(activity)
            return activity
