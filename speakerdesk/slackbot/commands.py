"""Slack slash commands: ``/deals`` and ``/projects``."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from speakerdesk.core.enums import DEAL_LOST, DEAL_WON
from speakerdesk.models.base import ensure_utc
from speakerdesk.notifications.messages import (
    DEAL_STATUS_EMOJI,
    DEFAULT_BASE_URL,
    PROJECT_STATUS_EMOJI,
    build_deals_needing_attention_message,
    build_deals_summary_message,
    format_date,
    format_money,
)
from speakerdesk.services.deal_service import DealService
from speakerdesk.services.project_service import ProjectService
from speakerdesk.slackbot.interactions import ephemeral, in_channel

logger = logging.getLogger(__name__)

LIST_LIMIT = 15
STALE_AFTER_DAYS = 7
NEW_WITHIN_DAYS = 7
TOP_DEALS = 5
UPCOMING_WITHIN_DAYS = 30

DEAL_STATUS_OPTIONS = (
    ("🆕 Lead", "lead"),
    ("✅ Qualified", "qualified"),
    ("📨 Proposal", "proposal"),
    ("🤝 Negotiation", "negotiation"),
    ("🎉 Won", "won"),
    ("❌ Lost", "lost"),
)
PROJECT_STATUS_OPTIONS = (
    ("💳 Invoicing", "invoicing"),
    ("🗺️ Logistics", "logistics_planning"),
    ("🎯 Pre-Event", "pre_event"),
    ("🎤 Event Week", "event_week"),
    ("📧 Follow Up", "follow_up"),
    ("🎉 Completed", "completed"),
)

DEALS_HELP = (
    "*📋 /deals Commands*\n\n"
    "`/deals` or `/deals summary` - Pipeline overview with totals\n"
    "`/deals list` - List all active deals with status dropdowns\n"
    "`/deals stale` - Deals with no updates in 7+ days\n"
    "`/deals new` - Deals created in the last 7 days\n"
    "`/deals help` - Show this help message"
)
PROJECTS_HELP = (
    "*📁 /projects Commands*\n\n"
    "`/projects` or `/projects summary` - Overview of active projects\n"
    "`/projects list` - List all active projects with status dropdowns\n"
    "`/projects upcoming` - Events in the next 30 days\n"
    "`/projects help` - Show this help message"
)


def _value(amount: Decimal | None) -> Decimal:
    return Decimal(amount) if amount is not None else Decimal("0")


def _status_select(action_id: str, record_id: int, current: str, options: tuple[tuple[str, str], ...]) -> dict:
    return {
        "type": "static_select",
        "placeholder": {"type": "plain_text", "text": current},
        "action_id": action_id,
        "options": [
            {"text": {"type": "plain_text", "text": label}, "value": f"{record_id}:{status}"}
            for label, status in options
        ],
    }


def days_since(moment: datetime | None, now: datetime | None = None) -> int:
    moment = ensure_utc(moment)
    if moment is None:
        return 0
    return max(((now or datetime.now(timezone.utc)) - moment).days, 0)


class SlackCommandHandler:
    def __init__(self, deals: DealService, projects: ProjectService, base_url: str = DEFAULT_BASE_URL) -> None:
        self.deals = deals
        self.projects = projects
        self.base_url = base_url

    def handle(self, command: str | None, text: str | None) -> dict[str, Any]:
        subcommand = (text or "").strip().split(" ")[0].lower()
        logger.info(
            "slack.command",
            extra={"event": "slack.command", "slack_action": f"{command} {subcommand}".strip()},
        )
        if command == "/deals":
            return self.deals_command(subcommand)
        if command == "/projects":
            return self.projects_command(subcommand)
        return {"ok": True}

    def deals_command(self, subcommand: str) -> dict[str, Any]:
        if subcommand in ("", "summary"):
            return self.deals_summary()
        if subcommand == "list":
            return self.deals_list()
        if subcommand == "stale":
            return self.deals_stale()
        if subcommand == "new":
            return self.deals_new()
        if subcommand == "help":
            return ephemeral(DEALS_HELP)
        return ephemeral(f"Unknown command: `{subcommand}`. Type `/deals help` for available commands.")

    def deals_summary(self) -> dict[str, Any]:
        active = self.deals.list_active_deals()
        won = self.deals.get_deals_by_status(DEAL_WON)
        lost = self.deals.get_deals_by_status(DEAL_LOST)
        recent = self.deals.list_deals_created_since(days=NEW_WITHIN_DAYS, limit=None)
        open_deals = sorted(
            (deal for deal in active if deal.status != DEAL_WON),
            key=lambda deal: _value(deal.deal_value),
            reverse=True,
        )
        message = build_deals_summary_message(
            total_deals=len(active),
            new_deals=len(recent),
            deals_won=len(won),
            deals_lost=len(lost),
            total_value=sum((_value(deal.deal_value) for deal in won), Decimal("0")),
            pipeline_value=sum((_value(deal.deal_value) for deal in open_deals), Decimal("0")),
            top_deals=[
                {
                    "event_title": deal.event_title,
                    "client_name": deal.client_name,
                    "value": deal.deal_value,
                    "status": deal.status,
                }
                for deal in open_deals[:TOP_DEALS]
            ],
            base_url=self.base_url,
        )
        return {"response_type": "in_channel", **message}

    def deals_list(self) -> dict[str, Any]:
        deals = self.deals.list_active_deals(limit=LIST_LIMIT, order_by_value=True)
        if not deals:
            return ephemeral("No active deals found.")
        blocks: list[dict[str, Any]] = [
            {"type": "header", "text": {"type": "plain_text", "text": "📋 Active Deals", "emoji": True}}
        ]
        for deal in deals:
            value = format_money(deal.deal_value) or "TBD"
            when = format_date(deal.event_date) or "TBD"
            blocks.append(
                {
                    "type": "section",
                    "text": {"type": "mrkdwn", "text": f"*{deal.event_title}*\n{deal.client_name} • {value} • {when}"},
                    "accessory": _status_select("update_deal_status", deal.id, deal.status, DEAL_STATUS_OPTIONS),
                }
            )
        return {"response_type": "in_channel", "blocks": blocks}

    def deals_stale(self) -> dict[str, Any]:
        stale = self.deals.list_stale_deals(days=STALE_AFTER_DAYS)
        if not stale:
            return ephemeral("✅ No stale deals! All deals have been updated within the last 7 days.")
        message = build_deals_needing_attention_message(
            [
                {
                    "event_title": deal.event_title,
                    "client_name": deal.client_name,
                    "status": deal.status,
                    "days_stale": days_since(deal.updated_at or deal.created_at),
                }
                for deal in stale
            ],
            base_url=self.base_url,
        )
        return {"response_type": "in_channel", **message}

    def deals_new(self) -> dict[str, Any]:
        recent = self.deals.list_deals_created_since(days=NEW_WITHIN_DAYS)
        if not recent:
            return ephemeral("No new deals in the last 7 days.")
        lines = ["*🆕 New Deals (Last 7 Days)*", ""]
        for deal in recent:
            value = format_money(deal.deal_value) or "TBD"
            created = ensure_utc(deal.created_at)
            created_text = format_date(created.date()) if created else "TBD"
            emoji = DEAL_STATUS_EMOJI.get(deal.status, "📋")
            lines.append(f"• *{deal.event_title}* ({deal.client_name})\n   {emoji} {value} • Created {created_text}\n")
        return in_channel("\n".join(lines))

    def projects_command(self, subcommand: str) -> dict[str, Any]:
        if subcommand in ("", "summary"):
            return self.projects_summary()
        if subcommand == "list":
            return self.projects_list()
        if subcommand == "upcoming":
            return self.projects_upcoming()
        if subcommand == "help":
            return ephemeral(PROJECTS_HELP)
        return ephemeral(f"Unknown command: `{subcommand}`. Type `/projects help` for available commands.")

    def projects_summary(self, today: date | None = None) -> dict[str, Any]:
        today = today or date.today()
        projects = self.projects.list_active_projects()
        revenue = sum((_value(project.speaker_fee) for project in projects), Decimal("0"))
        by_status: dict[str, int] = {}
        buckets = {"🔥 Final Week": 0, "⏰ < 1 Month": 0, "📆 1-2 Months": 0, "📅 2+ Months": 0}
        for project in projects:
            by_status[project.status] = by_status.get(project.status, 0) + 1
            if project.event_date is None:
                continue
            days_away = (project.event_date - today).days
            if days_away <= 7:
                buckets["🔥 Final Week"] += 1
            elif days_away <= 30:
                buckets["⏰ < 1 Month"] += 1
            elif days_away <= 60:
                buckets["📆 1-2 Months"] += 1
            else:
                buckets["📅 2+ Months"] += 1

        lines = [
            "*📁 Projects Summary*",
            "",
            f"*Total Active Projects:* {len(projects)}",
            f"*Total Revenue:* {format_money(revenue) or '$0'}",
            "",
            "*⏱️ By Time Until Event:*",
        ]
        lines.extend(f"{label}: {count} projects" for label, count in buckets.items() if count)
        lines.extend(["", "*📋 By Stage:*"])
        lines.extend(
            f"{PROJECT_STATUS_EMOJI.get(status, '📁')} {status}: {count} projects" for status, count in by_status.items()
        )
        return in_channel("\n".join(lines))

    def projects_list(self) -> dict[str, Any]:
        projects = self.projects.list_active_projects(limit=LIST_LIMIT)
        if not projects:
            return ephemeral("No active projects found.")
        blocks: list[dict[str, Any]] = [
            {"type": "header", "text": {"type": "plain_text", "text": "📁 Active Projects", "emoji": True}}
        ]
        for project in projects:
            fee = format_money(project.speaker_fee) or "TBD"
            when = format_date(project.event_date) or "TBD"
            emoji = PROJECT_STATUS_EMOJI.get(project.status, "📁")
            blocks.append(
                {
                    "type": "section",
                    "text": {
                        "type": "mrkdwn",
                        "text": f"{emoji} *{project.project_name}*\n{project.client_name or ''} • {fee} • {when}",
                    },
                    "accessory": _status_select(
                        "update_project_status", project.id, project.status, PROJECT_STATUS_OPTIONS
                    ),
                }
            )
        return {"response_type": "in_channel", "blocks": blocks}

    def projects_upcoming(self, today: date | None = None) -> dict[str, Any]:
        today = today or date.today()
        upcoming = self.projects.list_upcoming_projects(days=UPCOMING_WITHIN_DAYS, today=today)
        if not upcoming:
            return ephemeral("No upcoming events in the next 30 days.")
        lines = ["*📅 Upcoming Events (Next 30 Days)*", ""]
        for project in upcoming:
            days_away = (project.event_date - today).days
            if days_away == 0:
                when = "Today"
            elif days_away == 1:
                when = "Tomorrow"
            else:
                when = f"{days_away}d"
            urgency = "🔥" if days_away <= 7 else ("⚠️" if days_away <= 14 else "")
            emoji = PROJECT_STATUS_EMOJI.get(project.status, "📁")
            lines.append(
                f"{urgency}{emoji} *{project.project_name}* ({project.client_name or ''})\n"
                f"   {format_date(project.event_date)} - _{when}_ - {project.status}\n"
            )
        return in_channel("\n".join(lines))
