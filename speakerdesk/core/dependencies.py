"""Dependency providers for API handlers and Slack entry points."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from speakerdesk.auth.jwt import Principal, read_access_token
from speakerdesk.core.config import Config, get_config
from speakerdesk.database.db import build_engine, build_session_factory
from speakerdesk.llm.client import build_anthropic_client
from speakerdesk.llm.crm_assistant import CRMAssistant
from speakerdesk.llm.tools import CRMToolbox
from speakerdesk.notifications.slack import SlackNotifier
from speakerdesk.orchestration.deal_transitions import DealTransitionEngine
from speakerdesk.services.deal_service import DealService
from speakerdesk.services.invoice_service import InvoiceService
from speakerdesk.services.project_service import ProjectService
from speakerdesk.services.speaker_service import SpeakerService
from speakerdesk.slackbot.commands import SlackCommandHandler
from speakerdesk.slackbot.interactions import SlackInteractionHandler


@dataclass
class Services:
    """Everything a request handler needs, wired once per process."""

    config: Config
    session_factory: sessionmaker
    deals: DealService
    projects: ProjectService
    invoices: InvoiceService
    speakers: SpeakerService
    notifier: SlackNotifier
    engine: DealTransitionEngine
    toolbox: CRMToolbox
    assistant: CRMAssistant
    slack_interactions: SlackInteractionHandler
    slack_commands: SlackCommandHandler
    db_engine: Engine | None = None


def build_services(
    config: Config,
    session_factory: sessionmaker | None = None,
    notifier: SlackNotifier | None = None,
    llm_client: Any = None,
) -> Services:
    """Wire services for ``config``; tests pass their own factory, notifier and LLM client."""
    db_engine = None
    if session_factory is None:
        db_engine = build_engine(config.DATABASE_URL, config)
        session_factory = build_session_factory(db_engine)
    notifier = notifier or SlackNotifier.from_config(config)
    if llm_client is None:
        llm_client = build_anthropic_client(config)

    deals = DealService(session_factory)
    projects = ProjectService(session_factory)
    speakers = SpeakerService(session_factory)
    engine = DealTransitionEngine.from_config(config, deals, projects, notifier)
    toolbox = CRMToolbox(engine, deals, projects, speakers)
    return Services(
        config=config,
        session_factory=session_factory,
        deals=deals,
        projects=projects,
        invoices=InvoiceService(session_factory, deposit_percentage=config.INVOICE_DEPOSIT_PERCENTAGE),
        speakers=speakers,
        notifier=notifier,
        engine=engine,
        toolbox=toolbox,
        assistant=CRMAssistant(
            llm_client,
            toolbox,
            model=config.ASSISTANT_MODEL,
            max_tokens=config.ASSISTANT_MAX_TOKENS,
            max_tool_rounds=config.ASSISTANT_MAX_TOOL_ROUNDS,
        ),
        slack_interactions=SlackInteractionHandler(engine, deals, projects, notifier, base_url=config.PUBLIC_BASE_URL),
        slack_commands=SlackCommandHandler(deals, projects, base_url=config.PUBLIC_BASE_URL),
        db_engine=db_engine,
    )


def get_services(request: Request) -> Services:
    """Return the container built by ``create_app``."""
    return request.app.state.services


def get_settings() -> Config:
    """Return validated application configuration."""
    return get_config()


def get_current_user(token: str, settings: Config | None = None) -> Principal:
    """Resolve the operator behind a bearer token."""
    cfg = settings or get_settings()
    return read_access_token(token, secret=cfg.JWT_SECRET)
