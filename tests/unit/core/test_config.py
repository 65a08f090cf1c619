from __future__ import annotations

import json
import logging
from decimal import Decimal

import pytest

from speakerdesk.core.config import _build_config
from speakerdesk.core.exceptions import ConfigurationError
from speakerdesk.core.logging_config import JsonFormatter


def test_development_defaults(monkeypatch):
    for name in ("DEBUG", "DATABASE_URL", "DEFAULT_COMMISSION_PERCENTAGE", "INVOICE_DEPOSIT_PERCENTAGE"):
        monkeypatch.delenv(name, raising=False)

    config = _build_config("development")

    assert config.DEBUG is True
    assert config.DATABASE_URL.startswith("sqlite")
    assert config.DEFAULT_COMMISSION_PERCENTAGE == Decimal("20")
    assert config.INVOICE_DEPOSIT_PERCENTAGE == Decimal("50")
    assert config.is_production is False


def test_slack_enabled_by_webhook(monkeypatch):
    monkeypatch.setenv("SLACK_WEBHOOK_URL", "https://hooks.slack.test/x")
    monkeypatch.delenv("SLACK_BOT_TOKEN", raising=False)
    assert _build_config("development").slack_enabled is True


def test_public_base_url_trailing_slash_is_stripped(monkeypatch):
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://crm.test/")
    assert _build_config("development").PUBLIC_BASE_URL == "https://crm.test"


@pytest.mark.parametrize(
    "name,value",
    [
        ("DATABASE_URL", "mysql://db/crm"),
        ("DATABASE_URL", "postgresql:///crm"),
        ("DEFAULT_COMMISSION_PERCENTAGE", "120"),
        ("DEFAULT_COMMISSION_PERCENTAGE", "twenty"),
        ("INVOICE_DEPOSIT_PERCENTAGE", "0"),
        ("ASSISTANT_MAX_TOOL_ROUNDS", "0"),
        ("SLACK_TIMEOUT_SECONDS", "0"),
        ("LOG_LEVEL", "chatty"),
    ],
)
def test_invalid_settings_are_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError):
        _build_config("development")


def test_production_rejects_placeholder_jwt_secret(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.setenv("SLACK_SIGNING_SECRET", "slack-signing-secret")
    monkeypatch.setenv("DATABASE_URL", "postgresql://crm:pw@db:5432/crm")
    with pytest.raises(ConfigurationError, match="JWT_SECRET"):
        _build_config("production")

    monkeypatch.setenv("JWT_SECRET", "a-real-secret")
    config = _build_config("production")
    assert config.DEBUG is False
    assert config.DB_CONNECTIVITY_REQUIRED is True


def test_production_requires_slack_signing_secret(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "a-real-secret")
    monkeypatch.setenv("DATABASE_URL", "postgresql://crm:pw@db:5432/crm")
    monkeypatch.delenv("SLACK_SIGNING_SECRET", raising=False)
    with pytest.raises(ConfigurationError, match="SLACK_SIGNING_SECRET"):
        _build_config("production")

    assert _build_config("development").SLACK_SIGNING_SECRET is None


def test_json_formatter_copies_structured_fields():
    record = logging.LogRecord("speakerdesk.test", logging.INFO, __file__, 1, "deal.transition.applied", None, None)
    record.event = "deal.transition.applied"
    record.deal_id = 5
    record.unrelated = "dropped"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "deal.transition.applied"
    assert payload["event"] == "deal.transition.applied"
    assert payload["deal_id"] == 5
    assert "unrelated" not in payload
