"""Deal transition engine.

Every status change goes through here, whichever surface requested it
(HTTP, Slack, assistant). Entry into ``won`` derives the deal's project
once; notifications and project derivation never undo the deal write.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from functools import partial
from typing import Any, Callable

from speakerdesk.core.config import Config
from speakerdesk.core.enums import DEAL_WON
from speakerdesk.core.exceptions import NotFoundError, PersistenceError, ValidationError
from speakerdesk.models import MAX_RECORD_ID, Deal, Project
from speakerdesk.notifications.messages import (
    DEFAULT_BASE_URL,
    build_deal_status_update_message,
    build_deal_won_message,
    build_new_deal_message,
)
from speakerdesk.notifications.slack import SlackNotifier
from speakerdesk.orchestration.financials import derive_financials
from speakerdesk.orchestration.project_builder import build_project_payload
from speakerdesk.orchestration.state_machine import is_won_entry
from speakerdesk.schemas.deals import DealResponse
from speakerdesk.services.deal_service import DealService
from speakerdesk.services.project_service import ProjectService

logger = logging.getLogger(__name__)

# Request fields that shape the derived project rather than the deal row.
PROJECT_OVERRIDE_FIELDS = (
    "deal_value",
    "commission_percentage",
    "commission_amount",
    "speaker_fee",
    "speaker_name",
    "contract_signed",
)


def parse_record_id(raw: Any, kind: str = "deal") -> int:
    """Accept a positive integer (or its ASCII decimal string form) and nothing else.

    Values past ``MAX_RECORD_ID`` cannot name a stored row, so they are
    reported as not found rather than handed to the driver.
    """
    if isinstance(raw, bool):
        raise ValidationError(f"Invalid {kind} ID", error_code="invalid_id")
    if isinstance(raw, int):
        value = raw
    else:
        text = str(raw).strip() if raw is not None else ""
        if not (text.isascii() and text.isdigit()):
            raise ValidationError(f"Invalid {kind} ID", error_code="invalid_id", details=str(raw))
        value = int(text)
    if value < 1:
        raise ValidationError(f"Invalid {kind} ID", error_code="invalid_id", details=str(raw))
    if value > MAX_RECORD_ID:
        raise NotFoundError(f"{kind.capitalize()} {value} not found")
    return value


def parse_deal_id(raw: Any) -> int:
    return parse_record_id(raw, "deal")


@dataclass
class TransitionResult:
    deal: Deal
    previous_status: str | None
    status_changed: bool
    project: Project | None = None
    project_created: bool | None = None
    project_creation_error: str | None = None

    @property
    def already_in_target_state(self) -> bool:
        return not self.status_changed and self.previous_status == self.deal.status

    def to_response(self) -> dict[str, Any]:
        body = DealResponse.model_validate(self.deal).model_dump(mode="json")
        if self.project_created and self.project is not None:
            body["projectCreated"] = True
            body["projectId"] = self.project.id
            body["message"] = (
                f'Deal updated to Won and project "{self.project.project_name}" was automatically created'
            )
        elif self.project_created is False:
            body["projectCreated"] = False
            body["projectCreationError"] = self.project_creation_error
        return body


@dataclass(frozen=True)
class ProjectDerivation:
    project: Project
    created: bool


class DealTransitionEngine:
    """Applies deal changes and runs their downstream effects."""

    def __init__(
        self,
        deals: DealService,
        projects: ProjectService,
        notifier: SlackNotifier,
        default_commission_percentage: Decimal = Decimal("20"),
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        self.deals = deals
        self.projects = projects
        self.notifier = notifier
        self.default_commission_percentage = default_commission_percentage
        self.base_url = base_url

    @classmethod
    def from_config(
        cls,
        config: Config,
        deals: DealService,
        projects: ProjectService,
        notifier: SlackNotifier,
    ) -> "DealTransitionEngine":
        return cls(
            deals=deals,
            projects=projects,
            notifier=notifier,
            default_commission_percentage=config.DEFAULT_COMMISSION_PERCENTAGE,
            base_url=config.PUBLIC_BASE_URL,
        )

    def get_deal(self, raw_id: Any) -> Deal:
        deal_id = parse_deal_id(raw_id)
        deal = self.deals.get_deal(deal_id)
        if deal is None:
            raise NotFoundError(f"Deal {deal_id} not found")
        return deal

    def apply_update(
        self,
        raw_id: Any,
        fields: dict[str, Any],
        updated_by: str | None = None,
    ) -> TransitionResult:
        """Write ``fields`` to the deal, then notify and derive a project as needed.

        Raises ``ValidationError`` (``invalid_id``) before touching the store,
        ``NotFoundError`` when the deal does not exist, and
        ``PersistenceError`` when the write itself fails. Failures after the
        write are logged and reported on the result only.
        """
        deal_id = parse_deal_id(raw_id)
        overrides = {key: fields[key] for key in PROJECT_OVERRIDE_FIELDS if fields.get(key) is not None}

        update = self.deals.update_deal(deal_id, fields)
        deal = update.deal
        result = TransitionResult(
            deal=deal,
            previous_status=update.previous_status,
            status_changed=update.status_changed,
        )
        if not update.status_changed:
            return result

        logger.info(
            "deal.transition.applied",
            extra={
                "event": "deal.transition.applied",
                "deal_id": deal_id,
                "previous_status": update.previous_status,
                "new_status": deal.status,
            },
        )
        self._notify_status_change(deal, update.previous_status, updated_by, overrides)

        if is_won_entry(update.previous_status, deal.status):
            logger.info(
                "deal.transition.won_entry",
                extra={"event": "deal.transition.won_entry", "deal_id": deal_id},
            )
            self._derive_project(result, overrides)
        return result

    def transition(self, raw_id: Any, new_status: str, updated_by: str | None = None) -> TransitionResult:
        return self.apply_update(raw_id, {"status": new_status}, updated_by=updated_by)

    def create_deal(self, data: dict[str, Any]) -> TransitionResult:
        """Create a deal, announce it, and derive its project if it starts out won."""
        deal = self.deals.create_deal(data)
        self._dispatch(
            partial(
                build_new_deal_message,
                deal_id=deal.id,
                event_title=deal.event_title,
                client_name=deal.client_name,
                company=deal.company,
                deal_value=deal.deal_value,
                event_date=deal.event_date,
                speaker_name=deal.speaker_requested,
                status=deal.status,
                base_url=self.base_url,
            ),
            deal.id,
        )
        result = TransitionResult(deal=deal, previous_status=None, status_changed=False)
        if deal.status == DEAL_WON:
            overrides = {key: data[key] for key in PROJECT_OVERRIDE_FIELDS if data.get(key) is not None}
            self._derive_project(result, overrides)
        return result

    def delete_deal(self, raw_id: Any) -> None:
        deal_id = parse_deal_id(raw_id)
        if not self.deals.delete_deal(deal_id):
            raise NotFoundError(f"Deal {deal_id} not found")

    def ensure_project(self, raw_id: Any) -> ProjectDerivation:
        """Return the deal's project, deriving it first when there is none."""
        deal_id = parse_deal_id(raw_id)
        existing = self.projects.get_project_by_deal(deal_id)
        if existing is not None:
            return ProjectDerivation(project=existing, created=False)

        deal = self.deals.get_deal(deal_id)
        if deal is None:
            raise NotFoundError(f"Deal {deal_id} not found")
        financials = derive_financials(
            deal.deal_value,
            commission_percentage=deal.commission_percentage,
            default_percentage=self.default_commission_percentage,
        )
        project = self.projects.create_project(build_project_payload(deal, financials))
        if project is not None:
            return ProjectDerivation(project=project, created=True)

        # Another caller may have derived it between the lookup and the insert.
        project = self.projects.get_project_by_deal(deal_id)
        if project is None:
            raise PersistenceError(
                f"Failed to create project for deal {deal_id}",
                error_code="project_creation_failed",
            )
        return ProjectDerivation(project=project, created=False)

    def _derive_project(self, result: TransitionResult, overrides: dict[str, Any]) -> None:
        deal = result.deal
        try:
            existing = self.projects.get_project_by_deal(deal.id)
            if existing is not None:
                # Re-won after a detour through another status; the project stands.
                result.project = existing
                return
            financials = derive_financials(
                overrides.get("deal_value") or deal.deal_value or 0,
                commission_percentage=overrides.get("commission_percentage", deal.commission_percentage),
                commission_amount=overrides.get("commission_amount"),
                speaker_fee=overrides.get("speaker_fee"),
                default_percentage=self.default_commission_percentage,
            )
            project = self.projects.create_project(build_project_payload(deal, financials, overrides))
        except Exception as exc:
            logger.exception(
                "deal.transition.project_failed",
                extra={"event": "deal.transition.project_failed", "deal_id": deal.id, "error": str(exc)},
            )
            result.project_created = False
            result.project_creation_error = str(exc) or exc.__class__.__name__
            return

        if project is None:
            logger.warning(
                "deal.transition.project_not_created",
                extra={"event": "deal.transition.project_not_created", "deal_id": deal.id},
            )
            result.project_created = False
            result.project_creation_error = "Project could not be created for this deal"
            return

        result.project = project
        result.project_created = True
        logger.info(
            "deal.transition.project_created",
            extra={"event": "deal.transition.project_created", "deal_id": deal.id, "project_id": project.id},
        )

    def _notify_status_change(
        self,
        deal: Deal,
        previous_status: str,
        updated_by: str | None,
        overrides: dict[str, Any],
    ) -> None:
        if deal.status == DEAL_WON:
            build_message = partial(
                build_deal_won_message,
                deal_id=deal.id,
                event_title=deal.event_title,
                client_name=deal.client_name,
                company=deal.company,
                deal_value=deal.deal_value,
                speaker_name=overrides.get("speaker_name") or deal.speaker_requested,
                event_date=deal.event_date,
            )
        else:
            build_message = partial(
                build_deal_status_update_message,
                deal_id=deal.id,
                event_title=deal.event_title,
                client_name=deal.client_name,
                old_status=previous_status,
                new_status=deal.status,
                deal_value=deal.deal_value,
                updated_by=updated_by,
                base_url=self.base_url,
            )
        self._dispatch(build_message, deal.id)

    def _dispatch(self, build_message: Callable[[], dict[str, Any]], deal_id: int) -> None:
        # Building the message is guarded too; the deal write has already committed.
        try:
            self.notifier.notify(build_message())
        except Exception as exc:
            logger.warning(
                "deal.notification.failed",
                extra={"event": "deal.notification.failed", "deal_id": deal_id, "error": str(exc)},
            )
