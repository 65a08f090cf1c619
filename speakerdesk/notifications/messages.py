"""Slack Block Kit message builders for CRM events.

Builders are pure: they take plain values and return the JSON-ready dict
posted to Slack. Buttons carrying a ``value`` round-trip through
``speakerdesk.slackbot.interactions``.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Any

SlackMessage = dict[str, Any]

DEFAULT_BASE_URL = "https://speakabout.ai"

DEAL_STATUS_EMOJI = {
    "new": "🆕",
    "lead": "🆕",
    "contacted": "📞",
    "qualified": "✅",
    "proposal": "📨",
    "proposal_sent": "📨",
    "negotiation": "🤝",
    "won": "🎉",
    "lost": "❌",
    "cancelled": "🚫",
}
PROJECT_STATUS_EMOJI = {
    "invoicing": "💳",
    "logistics_planning": "📋",
    "pre_event": "🎯",
    "event_week": "📅",
    "follow_up": "📬",
    "completed": "🎉",
    "cancelled": "🚫",
}
CALL_OUTCOME_EMOJI = {
    "positive": "😊",
    "neutral": "😐",
    "negative": "😞",
    "no_answer": "📵",
}


def format_money(value: Decimal | float | int | None) -> str | None:
    """``$12,500`` for whole amounts, ``$12,500.50`` otherwise; None when empty or zero."""
    if not value:
        return None
    amount = Decimal(str(value))
    if amount == amount.to_integral_value():
        return f"${int(amount):,}"
    return f"${amount:,.2f}"


def format_date(value: date | str | None) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value[:10])
        except ValueError:
            return value
    return f"{value:%b} {value.day}, {value.year}"


def _mrkdwn(text: str) -> dict[str, str]:
    return {"type": "mrkdwn", "text": text}


def _plain(text: str) -> dict[str, Any]:
    return {"type": "plain_text", "text": text, "emoji": True}


def _header(text: str) -> dict[str, Any]:
    return {"type": "header", "text": _plain(text)}


def _button(text: str, action_id: str, value: Any = None, url: str | None = None, style: str | None = None) -> dict:
    button: dict[str, Any] = {"type": "button", "text": _plain(text), "action_id": action_id}
    if url:
        button["url"] = url
    if value is not None:
        button["value"] = str(value)
    if style:
        button["style"] = style
    return button


def deal_url(base_url: str, deal_id: int | None = None) -> str:
    base = (base_url or DEFAULT_BASE_URL).rstrip("/")
    return f"{base}/admin/deals/{deal_id}" if deal_id is not None else f"{base}/admin/deals"


def project_url(base_url: str, project_id: int | None = None) -> str:
    base = (base_url or DEFAULT_BASE_URL).rstrip("/")
    return f"{base}/admin/projects/{project_id}" if project_id is not None else f"{base}/admin/projects"


def build_new_deal_message(
    *,
    deal_id: int,
    event_title: str,
    client_name: str,
    company: str | None = None,
    deal_value: Decimal | None = None,
    event_date: date | str | None = None,
    speaker_name: str | None = None,
    status: str | None = None,
    base_url: str = DEFAULT_BASE_URL,
) -> SlackMessage:
    client = f"{client_name} ({company})" if company else client_name
    return {
        "text": f"New Deal: {event_title}",
        "blocks": [
            _header("🎯 New Deal Created"),
            {
                "type": "section",
                "fields": [
                    _mrkdwn(f"*Event:*\n{event_title}"),
                    _mrkdwn(f"*Client:*\n{client}"),
                    _mrkdwn(f"*Value:*\n{format_money(deal_value) or 'TBD'}"),
                    _mrkdwn(f"*Date:*\n{format_date(event_date) or 'TBD'}"),
                    _mrkdwn(f"*Speaker:*\n{speaker_name or 'Not assigned'}"),
                    _mrkdwn(f"*Status:*\n{status or 'New'}"),
                ],
            },
            {
                "type": "actions",
                "block_id": f"deal_actions_{deal_id}",
                "elements": [
                    _button("📋 View Deal", "view_deal", url=deal_url(base_url, deal_id)),
                    _button("✅ Mark Contacted", "mark_contacted", value=deal_id, style="primary"),
                    _button("📞 Log Call", "log_call", value=deal_id),
                ],
            },
        ],
    }


def build_deal_status_update_message(
    *,
    deal_id: int,
    event_title: str,
    client_name: str,
    old_status: str,
    new_status: str,
    deal_value: Decimal | None = None,
    updated_by: str | None = None,
    base_url: str = DEFAULT_BASE_URL,
) -> SlackMessage:
    emoji = DEAL_STATUS_EMOJI.get(new_status, "📋")
    value = format_money(deal_value) or ""
    text = f"{emoji} *{event_title}* {value}\n{client_name}\n\n_Status changed: {old_status} → *{new_status}*_"
    if updated_by:
        text += f"\nby {updated_by}"
    return {
        "text": f"Deal Updated: {event_title} → {new_status}",
        "blocks": [
            {
                "type": "section",
                "text": _mrkdwn(text),
                "accessory": _button("View", "view_deal", url=deal_url(base_url, deal_id)),
            }
        ],
    }


def build_deal_won_message(
    *,
    deal_id: int,
    event_title: str,
    client_name: str,
    company: str | None = None,
    deal_value: Decimal | None = None,
    speaker_name: str | None = None,
    event_date: date | str | None = None,
) -> SlackMessage:
    client = f"{client_name} • {company}" if company else client_name
    return {
        "text": f"🎉 Deal Won: {event_title}",
        "blocks": [
            _header("🎉 DEAL WON!"),
            {"type": "section", "text": _mrkdwn(f"*{event_title}*\n{client}")},
            {
                "type": "section",
                "fields": [
                    _mrkdwn(f"*Deal Value:*\n{format_money(deal_value) or 'TBD'}"),
                    _mrkdwn(f"*Speaker:*\n{speaker_name or 'TBD'}"),
                    _mrkdwn(f"*Event Date:*\n{format_date(event_date) or 'TBD'}"),
                ],
            },
            {
                "type": "context",
                "elements": [_mrkdwn("🚀 Time to create the project and send contracts!")],
            },
            {
                "type": "actions",
                "block_id": f"deal_won_{deal_id}",
                "elements": [
                    _button("📁 Create Project", "create_project", value=deal_id, style="primary"),
                    _button("📄 Send Contract", "send_contract", value=deal_id),
                ],
            },
        ],
    }


def build_project_created_message(
    *,
    project_id: int,
    project_name: str,
    client_name: str | None,
    deal_id: int | None = None,
    speaker_fee: Decimal | None = None,
    base_url: str = DEFAULT_BASE_URL,
) -> SlackMessage:
    source = f" from deal #{deal_id}" if deal_id is not None else ""
    fee = format_money(speaker_fee)
    text = f"📁 *{project_name}* created{source}\n{client_name or ''}"
    if fee:
        text += f"\nSpeaker fee: {fee}"
    return {
        "text": f"Project Created: {project_name}",
        "blocks": [
            {
                "type": "section",
                "text": _mrkdwn(text),
                "accessory": _button("View", "view_project", url=project_url(base_url, project_id)),
            }
        ],
    }


def build_project_status_update_message(
    *,
    project_id: int,
    project_name: str,
    client_name: str | None,
    old_status: str,
    new_status: str,
    speaker_fee: Decimal | None = None,
    updated_by: str | None = None,
    base_url: str = DEFAULT_BASE_URL,
) -> SlackMessage:
    emoji = PROJECT_STATUS_EMOJI.get(new_status, "📁")
    fee = format_money(speaker_fee) or ""
    text = f"{emoji} *{project_name}* {fee}\n{client_name or ''}\n\n_Status changed: {old_status} → *{new_status}*_"
    if updated_by:
        text += f"\nby {updated_by}"
    return {
        "text": f"Project Updated: {project_name} → {new_status}",
        "blocks": [
            {
                "type": "section",
                "text": _mrkdwn(text),
                "accessory": _button("View", "view_project", url=project_url(base_url, project_id)),
            }
        ],
    }


def build_call_logged_message(
    *,
    deal_id: int,
    event_title: str,
    client_name: str,
    outcome: str | None,
    notes: str | None,
    next_action: str | None = None,
    logged_by: str | None = None,
) -> SlackMessage:
    emoji = CALL_OUTCOME_EMOJI.get(outcome or "", "📞")
    lines = [f"{emoji} *Call logged* for *{event_title}* ({client_name})"]
    if outcome:
        lines.append(f"*Outcome:* {outcome.replace('_', ' ')}")
    if notes:
        lines.append(f"*Notes:* {notes}")
    if next_action:
        lines.append(f"*Next:* {next_action}")
    if logged_by:
        lines.append(f"_by {logged_by}_")
    return {
        "text": f"Call logged for deal #{deal_id}",
        "blocks": [{"type": "section", "text": _mrkdwn("\n".join(lines))}],
    }


def build_deals_summary_message(
    *,
    total_deals: int,
    new_deals: int,
    deals_won: int,
    deals_lost: int,
    total_value: Decimal,
    pipeline_value: Decimal,
    top_deals: Iterable[dict[str, Any]],
    base_url: str = DEFAULT_BASE_URL,
) -> SlackMessage:
    top_lines = [
        f"• {deal['event_title']} ({deal['client_name']}) - {format_money(deal.get('value')) or '$0'} - _{deal['status']}_"
        for deal in top_deals
    ]
    return {
        "text": f"CRM Summary: {total_deals} deals, {deals_won} won",
        "blocks": [
            _header("📊 CRM Summary"),
            {
                "type": "section",
                "fields": [
                    _mrkdwn(f"*Total Active Deals:*\n{total_deals}"),
                    _mrkdwn(f"*New This Week:*\n{new_deals}"),
                    _mrkdwn(f"*Won:*\n{deals_won} 🎉"),
                    _mrkdwn(f"*Lost:*\n{deals_lost}"),
                    _mrkdwn(f"*Total Won Value:*\n{format_money(total_value) or '$0'}"),
                    _mrkdwn(f"*Pipeline Value:*\n{format_money(pipeline_value) or '$0'}"),
                ],
            },
            {"type": "divider"},
            {
                "type": "section",
                "text": _mrkdwn("*🔥 Top Deals in Pipeline:*\n" + ("\n".join(top_lines) or "_No open deals_")),
            },
            {
                "type": "actions",
                "elements": [_button("📋 View All Deals", "view_all_deals", url=deal_url(base_url))],
            },
        ],
    }


def build_deals_needing_attention_message(
    deals: Iterable[dict[str, Any]],
    base_url: str = DEFAULT_BASE_URL,
) -> SlackMessage:
    deals = list(deals)
    body = "\n\n".join(
        f"• *{deal['event_title']}* ({deal['client_name']})\n   _{deal['status']}_ - No updates for {deal['days_stale']} days"
        for deal in deals
    )
    return {
        "text": f"⚠️ {len(deals)} deals need attention",
        "blocks": [
            _header("⚠️ Deals Needing Attention"),
            {"type": "section", "text": _mrkdwn(body or "_Nothing stale. Nice work!_")},
            {
                "type": "actions",
                "elements": [
                    _button(
                        "📋 Review Stale Deals",
                        "view_stale_deals",
                        url=f"{deal_url(base_url)}?filter=stale",
                        style="primary",
                    )
                ],
            },
        ],
    }
