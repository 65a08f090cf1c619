"""Shared authorization helpers for API v1 route modules."""

from __future__ import annotations

from fastapi import HTTPException

from speakerdesk.auth.jwt import Principal
from speakerdesk.core.config import Config
from speakerdesk.core.dependencies import get_current_user
from speakerdesk.core.exceptions import AuthenticationError, AuthorizationError


def _extract_bearer_token(authorization: str | None) -> str:
    if authorization is None or not authorization.strip():
        raise AuthenticationError("Authorization header is required.")
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("Authorization header must use Bearer token.")
    return parts[1].strip()


def authorize(authorization: str | None, scopes: list[str], config: Config) -> Principal:
    """Verify the bearer token against ``config.JWT_SECRET`` and check ``scopes``."""
    principal = get_current_user(token=_extract_bearer_token(authorization), settings=config)
    principal.require(scopes)
    return principal


def map_auth_error(exc: Exception) -> tuple[int, str]:
    if isinstance(exc, AuthenticationError):
        return 401, str(exc)
    if isinstance(exc, AuthorizationError):
        return 403, str(exc)
    return 401, "Unauthorized."


def authorize_or_raise(authorization: str | None, scopes: list[str], config: Config) -> Principal:
    try:
        return authorize(authorization=authorization, scopes=scopes, config=config)
    except (AuthenticationError, AuthorizationError) as exc:
        code, detail = map_auth_error(exc)
        raise HTTPException(status_code=code, detail=detail) from exc
