from __future__ import annotations

from collections import Counter
from dataclasses import replace
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from speakerdesk.core.config import get_config
from speakerdesk.core.dependencies import build_services
from speakerdesk.database.db import build_engine, build_session_factory
from speakerdesk.models import Base
from speakerdesk.orchestration.deal_transitions import DealTransitionEngine
from speakerdesk.services.deal_service import DealService
from speakerdesk.services.project_service import ProjectService


class RecordingNotifier:
    """Stands in for SlackNotifier; keeps every message it was asked to send."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.messages: list[dict] = []
        self.views: list[tuple[str, dict]] = []
        self.responses: list[tuple[str, dict]] = []
        self.stats: Counter[str] = Counter()
        self.enabled = True

    def notify(self, message: dict) -> bool:
        if self.fail:
            raise RuntimeError("slack is down")
        self.messages.append(message)
        self.stats["sent"] += 1
        return True

    def open_view(self, trigger_id: str, view: dict) -> bool:
        self.views.append((trigger_id, view))
        return True

    def respond(self, response_url: str, message: dict) -> bool:
        self.responses.append((response_url, message))
        return True

    @property
    def texts(self) -> list[str]:
        return [message.get("text", "") for message in self.messages]


class FakeMessages:
    def __init__(self, responses: list) -> None:
        self.responses = list(responses)
        self.calls: list[dict] = []

    def create(self, **kwargs):
        # Snapshot the history; the assistant keeps appending to the same list.
        self.calls.append({**kwargs, "messages": list(kwargs["messages"])})
        if not self.responses:
            raise AssertionError("unexpected extra model call")
        return self.responses.pop(0)


class FakeAnthropic:
    def __init__(self, responses: list) -> None:
        self.messages = FakeMessages(responses)


def text_response(text: str):
    return SimpleNamespace(stop_reason="end_turn", content=[{"type": "text", "text": text}])


def tool_response(name: str, tool_input: dict, tool_id: str = "toolu_1"):
    return SimpleNamespace(
        stop_reason="tool_use",
        content=[{"type": "tool_use", "id": tool_id, "name": name, "input": tool_input}],
    )


def deal_data(**overrides) -> dict:
    data = {
        "client_name": "Dana Lee",
        "client_email": "dana@acme.test",
        "client_phone": "555-0100",
        "company": "Acme Corp",
        "event_title": "Acme AI Summit",
        "event_date": date(2026, 11, 20),
        "event_location": "Chicago, IL",
        "event_type": "Keynote",
        "speaker_requested": "Ada Park",
        "attendee_count": 300,
        "budget_range": "$10k-$20k",
        "deal_value": Decimal("10000.00"),
        "status": "lead",
        "priority": "high",
        "source": "Website",
        "notes": "Warm intro",
    }
    data.update(overrides)
    return data


@pytest.fixture
def config():
    return replace(get_config(), ENV="development", SLACK_SIGNING_SECRET=None, ANTHROPIC_API_KEY=None)


@pytest.fixture
def session_factory(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'speakerdesk_test.db'}")
    Base.metadata.create_all(bind=engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def deals(session_factory):
    return DealService(session_factory)


@pytest.fixture
def projects(session_factory):
    return ProjectService(session_factory)


@pytest.fixture
def engine(deals, projects, notifier):
    return DealTransitionEngine(deals, projects, notifier, base_url="https://crm.test")


@pytest.fixture
def make_deal(deals):
    def _make(**overrides):
        return deals.create_deal(deal_data(**overrides))

    return _make


@pytest.fixture
def services(config, session_factory, notifier):
    return build_services(config, session_factory=session_factory, notifier=notifier, llm_client=FakeAnthropic([]))


@pytest.fixture
def deal_payload():
    return deal_data


@pytest.fixture
def llm():
    return SimpleNamespace(client=FakeAnthropic, text=text_response, tool=tool_response)


@pytest.fixture
def failing_notifier():
    return RecordingNotifier(fail=True)
