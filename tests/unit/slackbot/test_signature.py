from __future__ import annotations

from speakerdesk.slackbot.signature import compute_signature, verify_slack_signature

SECRET = "8f742231b10e8888abcd99yyyzzz85a5"
BODY = b"token=xyz&command=%2Fdeals&text=summary"
NOW = 1_790_000_000


def test_valid_signature():
    signature = compute_signature(SECRET, str(NOW), BODY)
    assert signature.startswith("v0=")
    assert verify_slack_signature(SECRET, str(NOW), BODY, signature, now=NOW + 10)


def test_tampered_body_or_wrong_secret():
    signature = compute_signature(SECRET, str(NOW), BODY)
    assert not verify_slack_signature(SECRET, str(NOW), BODY + b"x", signature, now=NOW)
    assert not verify_slack_signature("other-secret", str(NOW), BODY, signature, now=NOW)


def test_stale_request_is_rejected():
    signature = compute_signature(SECRET, str(NOW), BODY)
    assert not verify_slack_signature(SECRET, str(NOW), BODY, signature, now=NOW + 301)


def test_missing_or_malformed_headers():
    signature = compute_signature(SECRET, str(NOW), BODY)
    assert not verify_slack_signature(SECRET, None, BODY, signature, now=NOW)
    assert not verify_slack_signature(SECRET, str(NOW), BODY, None, now=NOW)
    assert not verify_slack_signature(SECRET, "yesterday", BODY, signature, now=NOW)
