"""Read-only speaker roster lookups."""

from __future__ import annotations

from sqlalchemy import String, cast, func, or_, select

from speakerdesk.models import Speaker
from speakerdesk.services.base_service import BaseService


class SpeakerService(BaseService):
    def search(self, query: str | None = None, limit: int = 15) -> list[Speaker]:
        """Active speakers whose name, title, bio, location or topics match ``query``."""
        stmt = select(Speaker).where(Speaker.active.is_(True))
        if query and query.strip():
            pattern = f"%{query.strip().lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Speaker.name).like(pattern),
                    func.lower(Speaker.title).like(pattern),
                    func.lower(Speaker.location).like(pattern),
                    func.lower(Speaker.short_bio).like(pattern),
                    func.lower(Speaker.bio).like(pattern),
                    func.lower(cast(Speaker.topics, String)).like(pattern),
                )
            )
        stmt = stmt.order_by(Speaker.featured.desc(), Speaker.ranking.desc(), Speaker.name).limit(limit)
        with self.session() as db:
            return list(db.scalars(stmt))
