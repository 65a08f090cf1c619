"""Slack interactivity and slash command endpoints for API v1."""

from __future__ import annotations

import json
import logging
from urllib.parse import parse_qs

from fastapi import APIRouter, Depends, HTTPException, Request, status
from starlette.concurrency import run_in_threadpool

from speakerdesk.core.dependencies import Services, get_services
from speakerdesk.slackbot.signature import verify_slack_signature

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/slack", tags=["slack"])


def _form_value(form: dict[str, list[str]], key: str) -> str | None:
    values = form.get(key)
    return values[0] if values else None


async def _verified_form(request: Request, services: Services) -> dict[str, list[str]]:
    body = await request.body()
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Request body must be UTF-8.") from exc

    config = services.config
    secret = config.SLACK_SIGNING_SECRET
    if not secret:
        if config.ENV != "development":
            logger.warning("slack.signature.unconfigured", extra={"event": "slack.signature.unconfigured"})
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Slack signing secret is not configured.")
        return parse_qs(text)
    if not verify_slack_signature(
        secret,
        request.headers.get("X-Slack-Request-Timestamp"),
        body,
        request.headers.get("X-Slack-Signature"),
    ):
        logger.warning("slack.signature.rejected", extra={"event": "slack.signature.rejected"})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid Slack signature.")
    return parse_qs(text)


@router.post("/interactions")
async def slack_interactions(request: Request, services: Services = Depends(get_services)) -> dict:
    form = await _verified_form(request, services)
    raw_payload = _form_value(form, "payload")
    if not raw_payload:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing payload.")
    try:
        payload = json.loads(raw_payload)
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed payload.") from exc
    return await run_in_threadpool(services.slack_interactions.handle, payload)


@router.post("/commands")
async def slack_commands(request: Request, services: Services = Depends(get_services)) -> dict:
    form = await _verified_form(request, services)
    return await run_in_threadpool(
        services.slack_commands.handle,
        _form_value(form, "command"),
        _form_value(form, "text"),
    )
