"""Slack interactive component handling (buttons, selects, modals)."""

from __future__ import annotations

import logging
from typing import Any

from speakerdesk.core.enums import CallOutcome
from speakerdesk.core.exceptions import NotFoundError, SpeakerdeskError
from speakerdesk.notifications.messages import (
    DEFAULT_BASE_URL,
    build_call_logged_message,
    build_project_created_message,
    build_project_status_update_message,
)
from speakerdesk.notifications.slack import SlackNotifier
from speakerdesk.orchestration.deal_transitions import DealTransitionEngine, parse_deal_id, parse_record_id
from speakerdesk.services.deal_service import DealService
from speakerdesk.services.project_service import ProjectService

logger = logging.getLogger(__name__)

LOG_CALL_CALLBACK_PREFIX = "log_call_"
CONTACTED_STATUS = "contacted"

CALL_OUTCOME_LABELS = {
    CallOutcome.POSITIVE.value: "Positive - Moving forward",
    CallOutcome.NEUTRAL.value: "Neutral - Need follow up",
    CallOutcome.NEGATIVE.value: "Negative - Not interested",
    CallOutcome.NO_ANSWER.value: "No Answer",
}


def ephemeral(text: str) -> dict[str, Any]:
    return {"response_type": "ephemeral", "text": text}


def in_channel(text: str) -> dict[str, Any]:
    return {"response_type": "in_channel", "text": text}


def split_selected_value(value: str | None) -> tuple[str, str] | None:
    """Split a select value of the form ``"<id>:<status>"``."""
    if not value or ":" not in value:
        return None
    raw_id, status = value.split(":", 1)
    if not raw_id or not status:
        return None
    return raw_id, status


def build_log_call_modal(deal_id: int) -> dict[str, Any]:
    return {
        "type": "modal",
        "callback_id": f"{LOG_CALL_CALLBACK_PREFIX}{deal_id}",
        "title": {"type": "plain_text", "text": "Log Call"},
        "submit": {"type": "plain_text", "text": "Save"},
        "blocks": [
            {
                "type": "input",
                "block_id": "call_notes",
                "element": {
                    "type": "plain_text_input",
                    "action_id": "notes",
                    "multiline": True,
                    "placeholder": {"type": "plain_text", "text": "Enter call notes..."},
                },
                "label": {"type": "plain_text", "text": "Call Notes"},
            },
            {
                "type": "input",
                "block_id": "call_outcome",
                "element": {
                    "type": "static_select",
                    "action_id": "outcome",
                    "options": [
                        {"text": {"type": "plain_text", "text": label}, "value": value}
                        for value, label in CALL_OUTCOME_LABELS.items()
                    ],
                },
                "label": {"type": "plain_text", "text": "Call Outcome"},
            },
            {
                "type": "input",
                "block_id": "next_action",
                "optional": True,
                "element": {
                    "type": "plain_text_input",
                    "action_id": "action",
                    "placeholder": {"type": "plain_text", "text": "e.g., Send proposal by Friday"},
                },
                "label": {"type": "plain_text", "text": "Next Action"},
            },
        ],
    }


class SlackInteractionHandler:
    """Turns Slack interaction payloads into CRM operations.

    Deal status changes go through the transition engine so Slack gets the
    same notifications and project derivation as the HTTP API.
    """

    def __init__(
        self,
        engine: DealTransitionEngine,
        deals: DealService,
        projects: ProjectService,
        notifier: SlackNotifier,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        self.engine = engine
        self.deals = deals
        self.projects = projects
        self.notifier = notifier
        self.base_url = base_url
        self._actions = {
            "mark_contacted": self._mark_contacted,
            "log_call": self._open_log_call,
            "create_project": self._create_project,
            "update_deal_status": self._update_deal_status,
            "update_project_status": self._update_project_status,
        }

    def handle(self, payload: dict[str, Any]) -> dict[str, Any]:
        payload_type = payload.get("type")
        if payload_type == "block_actions":
            return self._handle_block_action(payload)
        if payload_type == "view_submission":
            return self._handle_view_submission(payload)
        return {"ok": True}

    def _handle_block_action(self, payload: dict[str, Any]) -> dict[str, Any]:
        actions = payload.get("actions") or []
        if not actions:
            return {"ok": True}
        action = actions[0]
        action_id = action.get("action_id")
        handler = self._actions.get(action_id)
        if handler is None:
            # Link buttons (view_deal, send_contract, ...) need no server work.
            return {"ok": True}

        user_name = (payload.get("user") or {}).get("name") or "Unknown"
        logger.info("slack.action", extra={"event": "slack.action", "slack_action": action_id})
        try:
            reply = handler(payload, action, user_name)
        except SpeakerdeskError as exc:
            reply = ephemeral(f"❌ {exc}")
        # Slack drops the HTTP body of a block action; replies travel via response_url.
        response_url = payload.get("response_url")
        if response_url and reply.get("text"):
            self.notifier.respond(response_url, reply)
        return reply

    def _mark_contacted(self, payload: dict[str, Any], action: dict[str, Any], user_name: str) -> dict[str, Any]:
        self.engine.transition(action.get("value"), CONTACTED_STATUS, updated_by=user_name)
        return ephemeral("✅ Deal marked as contacted!")

    def _open_log_call(self, payload: dict[str, Any], action: dict[str, Any], user_name: str) -> dict[str, Any]:
        deal_id = parse_deal_id(action.get("value"))
        self.notifier.open_view(payload.get("trigger_id", ""), build_log_call_modal(deal_id))
        return ephemeral("")

    def _create_project(self, payload: dict[str, Any], action: dict[str, Any], user_name: str) -> dict[str, Any]:
        derivation = self.engine.ensure_project(action.get("value"))
        if not derivation.created:
            return ephemeral("Project already exists for this deal!")
        project = derivation.project
        message = build_project_created_message(
            project_id=project.id,
            project_name=project.project_name,
            client_name=project.client_name,
            deal_id=project.deal_id,
            speaker_fee=project.speaker_fee,
            base_url=self.base_url,
        )
        return {"response_type": "in_channel", **message}

    def _update_deal_status(self, payload: dict[str, Any], action: dict[str, Any], user_name: str) -> dict[str, Any]:
        selected = split_selected_value((action.get("selected_option") or {}).get("value"))
        if selected is None:
            return {"ok": True}
        raw_id, new_status = selected
        result = self.engine.transition(raw_id, new_status, updated_by=user_name)
        text = f'✅ Deal "{result.deal.event_title}" status updated to {result.deal.status}'
        if result.project_created and result.project is not None:
            text += f'\n📁 Project "{result.project.project_name}" was automatically created'
        elif result.project_created is False:
            text += f"\n⚠️ Project was not created: {result.project_creation_error}"
        return ephemeral(text)

    def _update_project_status(
        self,
        payload: dict[str, Any],
        action: dict[str, Any],
        user_name: str,
    ) -> dict[str, Any]:
        selected = split_selected_value((action.get("selected_option") or {}).get("value"))
        if selected is None:
            return {"ok": True}
        raw_id, new_status = selected
        project_id = parse_record_id(raw_id, "project")
        before = self.projects.get_project(project_id)
        if before is None:
            raise NotFoundError(f"Project {project_id} not found")
        project = self.projects.update_project_status(before.id, new_status)
        if project is None:
            raise NotFoundError(f"Project {project_id} not found")
        if before.status != project.status:
            self.notifier.notify(
                build_project_status_update_message(
                    project_id=project.id,
                    project_name=project.project_name,
                    client_name=project.client_name,
                    old_status=before.status,
                    new_status=project.status,
                    speaker_fee=project.speaker_fee,
                    updated_by=user_name,
                    base_url=self.base_url,
                )
            )
        return ephemeral(f'✅ Project "{project.project_name}" status updated to {project.status}')

    def _handle_view_submission(self, payload: dict[str, Any]) -> dict[str, Any]:
        view = payload.get("view") or {}
        callback_id = view.get("callback_id") or ""
        if not callback_id.startswith(LOG_CALL_CALLBACK_PREFIX):
            return {"ok": True}

        deal_id = parse_deal_id(callback_id[len(LOG_CALL_CALLBACK_PREFIX):])
        values = (view.get("state") or {}).get("values") or {}
        notes = ((values.get("call_notes") or {}).get("notes") or {}).get("value")
        outcome = (((values.get("call_outcome") or {}).get("outcome") or {}).get("selected_option") or {}).get("value")
        next_action = ((values.get("next_action") or {}).get("action") or {}).get("value")
        user_name = (payload.get("user") or {}).get("name") or "Unknown"

        try:
            self.deals.log_activity(
                deal_id,
                description=notes,
                outcome=outcome,
                next_action=next_action,
                created_by=user_name,
            )
        except NotFoundError:
            return {"response_action": "errors", "errors": {"call_notes": "This deal no longer exists."}}

        deal = self.deals.get_deal(deal_id)
        if deal is not None:
            self.notifier.notify(
                build_call_logged_message(
                    deal_id=deal.id,
                    event_title=deal.event_title,
                    client_name=deal.client_name,
                    outcome=outcome,
                    notes=notes,
                    next_action=next_action,
                    logged_by=user_name,
                )
            )
        return {"response_action": "clear"}
