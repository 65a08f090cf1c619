"""Root API router for v1 endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from speakerdesk.api.v1 import assistant, deals, health, invoices, projects, slack


def get_api_router(prefix: str = "/api/v1") -> APIRouter:
    api_router = APIRouter(prefix=prefix)
    api_router.include_router(health.router)
    api_router.include_router(deals.router)
    api_router.include_router(projects.router)
    api_router.include_router(invoices.router)
    api_router.include_router(assistant.router)
    api_router.include_router(slack.router)
    return api_router
