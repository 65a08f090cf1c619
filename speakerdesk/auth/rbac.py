"""Role-based authorization helpers."""

from __future__ import annotations

from typing import Iterable

from speakerdesk.core.exceptions import AuthorizationError

WILDCARD_SCOPE = "*"

# Scope strings are kept explicit for endpoint-level declarations.
ROLE_SCOPES: dict[str, set[str]] = {
    "admin": {
        WILDCARD_SCOPE,
    },
    "sales": {
        "deals.read",
        "deals.write",
        "projects.read",
        "projects.write",
        "invoices.write",
        "assistant.use",
    },
    "viewer": {
        "deals.read",
        "projects.read",
    },
}


def get_scopes_for_role(role: str) -> set[str]:
    """Return scopes granted to a role."""
    return ROLE_SCOPES.get(role.lower(), set())


def narrow_scopes(role: str, requested: Iterable[str] | None = None) -> frozenset[str]:
    """Scopes a token for ``role`` may carry: ``requested`` cut down to the role's grant."""
    granted = get_scopes_for_role(role)
    if requested is None:
        return frozenset(granted)
    wanted = set(requested)
    if WILDCARD_SCOPE in granted:
        return frozenset(wanted)
    return frozenset(wanted & granted)


def missing_scopes(granted: Iterable[str], required: Iterable[str]) -> list[str]:
    granted = set(granted)
    if WILDCARD_SCOPE in granted:
        return []
    return sorted(set(required) - granted)


def has_scopes(role: str, required_scopes: Iterable[str]) -> bool:
    """Check if role includes every required scope."""
    return not missing_scopes(get_scopes_for_role(role), required_scopes)


def require_scopes(granted: Iterable[str], required_scopes: Iterable[str]) -> None:
    """Raise when ``granted`` lacks any of ``required_scopes``."""
    missing = missing_scopes(granted, required_scopes)
    if missing:
        raise AuthorizationError(f"Missing required scopes: {', '.join(missing)}")
