"""Operator access tokens (HS256 JWT).

A token names the CRM operator (``sub`` and an optional display ``name``),
their role, and a space-separated ``scope`` claim. On the way in the scope
claim is cut down to what the role grants now, so revoking a scope from a
role applies to tokens already issued.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

from speakerdesk.auth.rbac import get_scopes_for_role, narrow_scopes, require_scopes
from speakerdesk.core.exceptions import AuthenticationError

ALGORITHM = "HS256"
ACCESS_TOKEN_USE = "access"
_HEADER = {"alg": ALGORITHM, "typ": "JWT"}


def _segment(data: dict[str, Any]) -> str:
    raw = json.dumps(data, separators=(",", ":"), sort_keys=True).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _unsegment(segment: str) -> dict[str, Any]:
    padded = segment + "=" * (-len(segment) % 4)
    try:
        data = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise AuthenticationError("Invalid token payload.") from exc
    if not isinstance(data, dict):
        raise AuthenticationError("Invalid token payload.")
    return data


def _signature(signing_input: str, secret: str) -> str:
    if not secret:
        raise AuthenticationError("JWT secret must be configured.")
    digest = hmac.new(secret.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def _now() -> int:
    return int(datetime.now(timezone.utc).timestamp())


def encode_jwt(payload: dict[str, Any], secret: str, ttl: timedelta) -> str:
    claims = {"iat": _now(), "exp": _now() + int(ttl.total_seconds()), "jti": uuid.uuid4().hex, **payload}
    signing_input = f"{_segment(_HEADER)}.{_segment(claims)}"
    return f"{signing_input}.{_signature(signing_input, secret)}"


def decode_jwt(token: str, secret: str, verify_exp: bool = True) -> dict[str, Any]:
    """Verify ``token`` and return its claims."""
    parts = token.split(".")
    if len(parts) != 3 or not token.isascii():
        raise AuthenticationError("Invalid token format.")
    header_segment, payload_segment, signature = parts
    if not hmac.compare_digest(_signature(f"{header_segment}.{payload_segment}", secret), signature):
        raise AuthenticationError("Invalid token signature.")
    if _unsegment(header_segment).get("alg") != ALGORITHM:
        raise AuthenticationError("Unsupported token algorithm.")

    claims = _unsegment(payload_segment)
    if verify_exp:
        try:
            expires_at = int(claims["exp"])
        except (KeyError, TypeError, ValueError) as exc:
            raise AuthenticationError("Token is missing exp claim.") from exc
        if expires_at < _now():
            raise AuthenticationError("Token has expired.")
    return claims


@dataclass(frozen=True)
class Principal:
    """The operator behind a request."""

    user_id: int
    role: str
    scopes: frozenset[str]
    name: str | None = None
    claims: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def actor(self) -> str:
        """How deal updates and Slack messages credit this operator."""
        return self.name or f"user:{self.user_id}"

    def require(self, required_scopes: Iterable[str]) -> None:
        require_scopes(self.scopes, required_scopes)


def create_access_token(
    user_id: int | str,
    role: str,
    secret: str,
    ttl_minutes: int = 60,
    name: str | None = None,
    scopes: Iterable[str] | None = None,
) -> str:
    """Issue a token for ``role``; ``scopes`` narrows it below the role's grant."""
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "role": role.lower(),
        "scope": " ".join(sorted(narrow_scopes(role, scopes))),
        "token_use": ACCESS_TOKEN_USE,
    }
    if name:
        payload["name"] = name
    return encode_jwt(payload, secret=secret, ttl=timedelta(minutes=ttl_minutes))


def read_access_token(token: str, secret: str) -> Principal:
    claims = decode_jwt(token, secret=secret)
    if claims.get("token_use", ACCESS_TOKEN_USE) != ACCESS_TOKEN_USE:
        raise AuthenticationError("Token is not an access token.")
    try:
        user_id = int(claims["sub"])
        role = str(claims["role"]).lower()
    except (KeyError, TypeError, ValueError) as exc:
        raise AuthenticationError("Invalid auth claims.") from exc
    if not get_scopes_for_role(role):
        raise AuthenticationError(f"Unknown role: {role}")

    scope_claim = claims.get("scope")
    requested = None if scope_claim is None else str(scope_claim).split()
    return Principal(
        user_id=user_id,
        role=role,
        scopes=narrow_scopes(role, requested),
        name=claims.get("name") or None,
        claims=claims,
    )
