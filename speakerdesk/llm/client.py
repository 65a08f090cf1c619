"""Anthropic client construction."""

from __future__ import annotations

import logging

from anthropic import Anthropic

from speakerdesk.core.config import Config

logger = logging.getLogger(__name__)


def build_anthropic_client(config: Config) -> Anthropic | None:
    """Return a client bounded by ``ASSISTANT_TIMEOUT_SECONDS``, or None without an API key."""
    if not config.ANTHROPIC_API_KEY:
        logger.warning("assistant.not_configured", extra={"event": "assistant.not_configured"})
        return None
    return Anthropic(
        api_key=config.ANTHROPIC_API_KEY,
        timeout=config.ASSISTANT_TIMEOUT_SECONDS,
        max_retries=1,
    )
