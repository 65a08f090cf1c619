"""Configuration module for the Speakerdesk application."""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from urllib.parse import urlparse

from dotenv import load_dotenv

from speakerdesk.core.exceptions import ConfigurationError

load_dotenv()


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _as_decimal(name: str, default: str) -> Decimal:
    raw = os.getenv(name, default)
    try:
        return Decimal(raw)
    except InvalidOperation as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}.") from exc


@dataclass(frozen=True)
class Config:
    """Runtime configuration with validation."""

    APP_NAME: str
    APP_VERSION: str
    ENV: str
    DEBUG: bool
    DATABASE_URL: str
    DB_CONNECTIVITY_REQUIRED: bool
    DB_STATEMENT_TIMEOUT_MS: int
    SLACK_WEBHOOK_URL: str | None
    SLACK_BOT_TOKEN: str | None
    SLACK_CHANNEL_ID: str
    SLACK_SIGNING_SECRET: str | None
    SLACK_TIMEOUT_SECONDS: float
    PUBLIC_BASE_URL: str
    ANTHROPIC_API_KEY: str | None
    ASSISTANT_MODEL: str
    ASSISTANT_MAX_TOKENS: int
    ASSISTANT_MAX_TOOL_ROUNDS: int
    ASSISTANT_TIMEOUT_SECONDS: float
    DEFAULT_COMMISSION_PERCENTAGE: Decimal
    INVOICE_DEPOSIT_PERCENTAGE: Decimal
    JWT_SECRET: str
    JWT_ACCESS_TTL_MINUTES: int
    API_HOST: str
    API_PORT: int
    API_PREFIX: str
    LOG_LEVEL: str
    LOG_FILE: str

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    @property
    def slack_enabled(self) -> bool:
        return bool(self.SLACK_WEBHOOK_URL or self.SLACK_BOT_TOKEN)


def _build_config(env: str | None = None) -> Config:
    resolved_env = (env or os.getenv("ENV", "development")).strip().lower()
    debug = _as_bool(os.getenv("DEBUG"), default=(resolved_env != "production"))

    config = Config(
        APP_NAME="Speakerdesk",
        APP_VERSION=os.getenv("APP_VERSION", "1.0.0"),
        ENV=resolved_env,
        DEBUG=debug if resolved_env != "production" else False,
        DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///./speakerdesk.db"),
        DB_CONNECTIVITY_REQUIRED=_as_bool(
            os.getenv("DB_CONNECTIVITY_REQUIRED"), default=(resolved_env == "production")
        ),
        DB_STATEMENT_TIMEOUT_MS=int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "10000")),
        SLACK_WEBHOOK_URL=os.getenv("SLACK_WEBHOOK_URL") or None,
        SLACK_BOT_TOKEN=os.getenv("SLACK_BOT_TOKEN") or None,
        SLACK_CHANNEL_ID=os.getenv("SLACK_CHANNEL_ID", "#deals"),
        SLACK_SIGNING_SECRET=os.getenv("SLACK_SIGNING_SECRET") or None,
        SLACK_TIMEOUT_SECONDS=float(os.getenv("SLACK_TIMEOUT_SECONDS", "5")),
        PUBLIC_BASE_URL=os.getenv("PUBLIC_BASE_URL", "https://speakabout.ai").rstrip("/"),
        ANTHROPIC_API_KEY=os.getenv("ANTHROPIC_API_KEY") or None,
        ASSISTANT_MODEL=os.getenv("ASSISTANT_MODEL", "claude-sonnet-4-5"),
        ASSISTANT_MAX_TOKENS=int(os.getenv("ASSISTANT_MAX_TOKENS", "2048")),
        ASSISTANT_MAX_TOOL_ROUNDS=int(os.getenv("ASSISTANT_MAX_TOOL_ROUNDS", "10")),
        ASSISTANT_TIMEOUT_SECONDS=float(os.getenv("ASSISTANT_TIMEOUT_SECONDS", "60")),
        DEFAULT_COMMISSION_PERCENTAGE=_as_decimal("DEFAULT_COMMISSION_PERCENTAGE", "20"),
        INVOICE_DEPOSIT_PERCENTAGE=_as_decimal("INVOICE_DEPOSIT_PERCENTAGE", "50"),
        JWT_SECRET=os.getenv("JWT_SECRET", "change_me_jwt_secret"),
        JWT_ACCESS_TTL_MINUTES=int(os.getenv("JWT_ACCESS_TTL_MINUTES", "60")),
        API_HOST=os.getenv("API_HOST", "0.0.0.0"),
        API_PORT=int(os.getenv("API_PORT", "8000")),
        API_PREFIX=os.getenv("API_PREFIX", "/api/v1"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        LOG_FILE=os.getenv("LOG_FILE", ""),
    )
    _validate_config(config)
    return config


def _validate_database_url(database_url: str) -> None:
    parsed = urlparse(database_url)
    if parsed.scheme not in {"sqlite", "postgresql", "postgresql+psycopg2"}:
        raise ConfigurationError(
            "DATABASE_URL must use sqlite:// or postgresql:// style URL."
        )
    if parsed.scheme.startswith("postgresql") and not parsed.hostname:
        raise ConfigurationError("PostgreSQL DATABASE_URL is missing hostname.")


def _validate_config(config: Config) -> None:
    _validate_database_url(config.DATABASE_URL)

    if config.DB_STATEMENT_TIMEOUT_MS < 0:
        raise ConfigurationError("DB_STATEMENT_TIMEOUT_MS must be >= 0.")
    if config.SLACK_TIMEOUT_SECONDS <= 0:
        raise ConfigurationError("SLACK_TIMEOUT_SECONDS must be > 0.")
    if config.ASSISTANT_MAX_TOOL_ROUNDS < 1:
        raise ConfigurationError("ASSISTANT_MAX_TOOL_ROUNDS must be >= 1.")
    if config.ASSISTANT_TIMEOUT_SECONDS <= 0:
        raise ConfigurationError("ASSISTANT_TIMEOUT_SECONDS must be > 0.")
    if not Decimal(0) <= config.DEFAULT_COMMISSION_PERCENTAGE <= Decimal(100):
        raise ConfigurationError("DEFAULT_COMMISSION_PERCENTAGE must be between 0 and 100.")
    if not Decimal(0) < config.INVOICE_DEPOSIT_PERCENTAGE <= Decimal(100):
        raise ConfigurationError("INVOICE_DEPOSIT_PERCENTAGE must be in (0, 100].")
    if config.JWT_ACCESS_TTL_MINUTES < 1:
        raise ConfigurationError("JWT_ACCESS_TTL_MINUTES must be >= 1.")
    if config.LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigurationError("LOG_LEVEL must be one of DEBUG/INFO/WARNING/ERROR/CRITICAL.")
    if config.is_production and "change_me" in config.JWT_SECRET:
        raise ConfigurationError("Production JWT_SECRET uses the placeholder value.")
    if config.is_production and not config.SLACK_SIGNING_SECRET:
        raise ConfigurationError("Production requires SLACK_SIGNING_SECRET to verify Slack requests.")


@lru_cache(maxsize=8)
def get_config(env: str | None = None) -> Config:
    """Get validated configuration for the requested environment."""
    return _build_config(env)
