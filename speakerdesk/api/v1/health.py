"""Health endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from speakerdesk.core.dependencies import Services, get_services
from speakerdesk.database.db import verify_database_connection

router = APIRouter(tags=["health"])


@router.get("/health")
def health(services: Services = Depends(get_services)) -> dict:
    cfg = services.config
    database_ok = verify_database_connection(services.db_engine) if services.db_engine is not None else None
    return {
        "status": "ok" if database_ok is not False else "degraded",
        "service": cfg.APP_NAME,
        "version": cfg.APP_VERSION,
        "database": database_ok,
        "slack": {
            "enabled": services.notifier.enabled,
            **{key: services.notifier.stats[key] for key in ("sent", "failed", "skipped")},
        },
        "assistant": {"enabled": services.assistant.client is not None},
    }
