from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import update

from speakerdesk.models import Deal
from speakerdesk.slackbot.commands import DEALS_HELP, PROJECTS_HELP, days_since

TODAY = date(2026, 10, 19)


def _age(session_factory, deal_id: int, days: int, column: str = "updated_at") -> None:
    with session_factory() as db:
        db.execute(
            update(Deal).where(Deal.id == deal_id).values({column: datetime.now(timezone.utc) - timedelta(days=days)})
        )
        db.commit()


def _fields(reply: dict) -> list[str]:
    return [field["text"] for field in reply["blocks"][1]["fields"]]


def test_days_since():
    now = datetime(2026, 10, 19, 12, tzinfo=timezone.utc)
    assert days_since(datetime(2026, 10, 9, 12), now=now) == 10
    assert days_since(now + timedelta(days=1), now=now) == 0
    assert days_since(None) == 0


def test_unrelated_command_is_acknowledged(services):
    assert services.slack_commands.handle("/weather", "") == {"ok": True}


def test_deals_summary(services, make_deal):
    make_deal(event_title="Open Lead", deal_value=Decimal("10000"))
    make_deal(event_title="Big Proposal", status="proposal", deal_value=Decimal("25000"))
    make_deal(event_title="Signed", status="won", deal_value=Decimal("5000"))
    make_deal(event_title="Gone", status="lost", deal_value=Decimal("1000"))

    reply = services.slack_commands.handle("/deals", "")

    assert reply["response_type"] == "in_channel"
    fields = _fields(reply)
    assert "*Total Active Deals:*\n3" in fields
    assert "*New This Week:*\n4" in fields
    assert "*Won:*\n1 🎉" in fields
    assert "*Lost:*\n1" in fields
    assert "*Total Won Value:*\n$5,000" in fields
    assert "*Pipeline Value:*\n$35,000" in fields
    top = reply["blocks"][3]["text"]["text"]
    assert top.index("Big Proposal") < top.index("Open Lead")
    assert "Signed" not in top


def test_deals_list_renders_status_selects(services, make_deal):
    deal = make_deal(status="qualified")

    reply = services.slack_commands.handle("/deals", "LIST")

    section = reply["blocks"][1]
    select = section["accessory"]
    assert select["action_id"] == "update_deal_status"
    assert select["placeholder"]["text"] == "qualified"
    assert f"{deal.id}:won" in [option["value"] for option in select["options"]]


def test_deals_list_empty(services):
    assert services.slack_commands.handle("/deals", "list") == {
        "response_type": "ephemeral",
        "text": "No active deals found.",
    }


def test_deals_stale(services, make_deal, session_factory):
    stale = make_deal(event_title="Quiet Deal")
    _age(session_factory, stale.id, days=12)
    make_deal(event_title="Busy Deal")

    reply = services.slack_commands.handle("/deals", "stale")

    body = reply["blocks"][1]["text"]["text"]
    assert "*Quiet Deal*" in body
    assert "No updates for 12 days" in body
    assert "Busy Deal" not in body


def test_deals_stale_empty(services, make_deal):
    make_deal()
    reply = services.slack_commands.handle("/deals", "stale")
    assert reply["text"].startswith("✅ No stale deals!")


def test_deals_new(services, make_deal, session_factory):
    make_deal(event_title="Fresh Deal")
    old = make_deal(event_title="Old Deal")
    _age(session_factory, old.id, days=20, column="created_at")

    reply = services.slack_commands.handle("/deals", "new")

    assert reply["response_type"] == "in_channel"
    assert reply["text"].startswith("*🆕 New Deals (Last 7 Days)*")
    assert "Fresh Deal" in reply["text"]
    assert "Old Deal" not in reply["text"]


def test_deals_help_and_unknown(services):
    assert services.slack_commands.handle("/deals", "help")["text"] == DEALS_HELP
    unknown = services.slack_commands.handle("/deals", "forecast")
    assert unknown["text"] == "Unknown command: `forecast`. Type `/deals help` for available commands."


def test_projects_summary(services, projects):
    projects.create_project({"project_name": "This Week", "event_date": TODAY + timedelta(days=3), "speaker_fee": 8000})
    projects.create_project({"project_name": "Next Quarter", "event_date": TODAY + timedelta(days=90)})
    projects.create_project({"project_name": "Done", "status": "completed", "speaker_fee": 5000})

    reply = services.slack_commands.projects_summary(today=TODAY)

    text = reply["text"]
    assert reply["response_type"] == "in_channel"
    assert "*Total Active Projects:* 2" in text
    assert "*Total Revenue:* $8,000" in text
    assert "🔥 Final Week: 1 projects" in text
    assert "📅 2+ Months: 1 projects" in text
    assert "💳 invoicing: 2 projects" in text


def test_projects_list_and_empty_states(services, projects):
    handler = services.slack_commands
    assert handler.handle("/projects", "list")["text"] == "No active projects found."
    assert handler.projects_upcoming(today=TODAY)["text"] == "No upcoming events in the next 30 days."

    project = projects.create_project({"project_name": "Summit", "client_name": "Dana"})
    reply = handler.handle("/projects", "list")

    select = reply["blocks"][1]["accessory"]
    assert select["action_id"] == "update_project_status"
    assert select["options"][0]["value"] == f"{project.id}:invoicing"


def test_projects_upcoming(services, projects):
    projects.create_project({"project_name": "Tomorrow Talk", "event_date": TODAY + timedelta(days=1)})
    projects.create_project({"project_name": "Later Talk", "event_date": TODAY + timedelta(days=10)})

    text = services.slack_commands.projects_upcoming(today=TODAY)["text"]

    assert "_Tomorrow_" in text
    assert "_10d_" in text
    assert text.index("Tomorrow Talk") < text.index("Later Talk")


def test_projects_help(services):
    assert services.slack_commands.handle("/projects", "help")["text"] == PROJECTS_HELP
