"""Slack request signing (``X-Slack-Signature``) verification."""

from __future__ import annotations

from slack_sdk.signature import Clock, SignatureVerifier


class _FixedClock(Clock):
    def __init__(self, now: float) -> None:
        self._now = now

    def now(self) -> float:
        return self._now


def compute_signature(signing_secret: str, timestamp: str, body: bytes) -> str:
    return SignatureVerifier(signing_secret).generate_signature(timestamp=timestamp, body=body)


def verify_slack_signature(
    signing_secret: str,
    timestamp: str | None,
    body: bytes,
    signature: str | None,
    now: float | None = None,
) -> bool:
    """Check the HMAC over ``v0:{timestamp}:{body}`` and reject requests older than five minutes."""
    if not timestamp or not signature:
        return False
    if not (timestamp.isascii() and timestamp.isdigit()):
        return False
    verifier = SignatureVerifier(signing_secret, clock=Clock() if now is None else _FixedClock(now))
    return verifier.is_valid(body=body, timestamp=timestamp, signature=signature)
