"""Best-effort Slack delivery over incoming webhooks and the Web API."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError, SlackClientError
from slack_sdk.web import SlackResponse
from slack_sdk.webhook import WebhookClient

from speakerdesk.core.config import Config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlackPostResult:
    ok: bool
    ts: str | None = None
    channel: str | None = None


class SlackNotifier:
    """Posts messages to Slack without ever raising into the caller.

    Every call is bounded by ``timeout`` and attempted once. Outcomes are
    tallied in ``stats`` under ``sent``, ``failed`` and ``skipped``.
    """

    def __init__(
        self,
        webhook_url: str | None = None,
        bot_token: str | None = None,
        channel: str = "#deals",
        timeout: float = 5.0,
        client: WebClient | None = None,
        webhook_factory: Callable[..., WebhookClient] = WebhookClient,
    ) -> None:
        self.webhook_url = webhook_url
        self.bot_token = bot_token
        self.channel = channel
        self.timeout = timeout
        if client is None and bot_token:
            client = WebClient(token=bot_token, timeout=timeout)
        self.client = client
        self.webhook_factory = webhook_factory
        self.stats: Counter[str] = Counter()

    @classmethod
    def from_config(cls, config: Config) -> "SlackNotifier":
        return cls(
            webhook_url=config.SLACK_WEBHOOK_URL,
            bot_token=config.SLACK_BOT_TOKEN,
            channel=config.SLACK_CHANNEL_ID,
            timeout=config.SLACK_TIMEOUT_SECONDS,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url or self.client is not None)

    def notify(self, message: dict[str, Any]) -> bool:
        """Deliver through the bot API when a token is set, else the webhook."""
        if self.client is not None:
            return self.send_message(message).ok
        return self.send_webhook(message)

    def send_webhook(self, message: dict[str, Any]) -> bool:
        if not self.webhook_url:
            self._skip("webhook")
            return False
        return self._post_to_url("webhook", self.webhook_url, message)

    def send_message(self, message: dict[str, Any]) -> SlackPostResult:
        if self.client is None:
            self._skip("chat.postMessage")
            return SlackPostResult(ok=False)
        response = self._call_api(
            "chat.postMessage",
            self.client.chat_postMessage,
            channel=message.get("channel") or self.channel,
            text=message.get("text"),
            blocks=message.get("blocks"),
            attachments=message.get("attachments"),
            thread_ts=message.get("thread_ts"),
        )
        if response is None:
            return SlackPostResult(ok=False)
        return SlackPostResult(ok=True, ts=response.get("ts"), channel=response.get("channel"))

    def open_view(self, trigger_id: str, view: dict[str, Any]) -> bool:
        if self.client is None:
            self._skip("views.open")
            return False
        return self._call_api("views.open", self.client.views_open, trigger_id=trigger_id, view=view) is not None

    def respond(self, response_url: str, message: dict[str, Any]) -> bool:
        """Reply through an interaction's ``response_url``."""
        return self._post_to_url("response_url", response_url, message)

    def _post_to_url(self, method: str, url: str, message: dict[str, Any]) -> bool:
        try:
            response = self.webhook_factory(url, timeout=self.timeout).send_dict(message)
        except (SlackClientError, OSError) as exc:
            self._fail(method, str(exc))
            return False
        if response.status_code != 200:
            self._fail(method, f"HTTP {response.status_code}: {(response.body or '')[:200]}")
            return False
        self.stats["sent"] += 1
        return True

    def _call_api(self, method: str, call: Callable[..., SlackResponse], **kwargs: Any) -> SlackResponse | None:
        try:
            response = call(**{key: value for key, value in kwargs.items() if value is not None})
        except SlackApiError as exc:
            self._fail(method, str(exc.response.get("error", "unknown_error")))
            return None
        except (SlackClientError, OSError) as exc:
            self._fail(method, str(exc))
            return None
        self.stats["sent"] += 1
        return response

    def _skip(self, method: str) -> None:
        self.stats["skipped"] += 1
        logger.debug("slack.not_configured", extra={"event": "slack.not_configured", "slack_method": method})

    def _fail(self, method: str, error: str) -> None:
        self.stats["failed"] += 1
        logger.warning(
            "slack.send_failed",
            extra={"event": "slack.send_failed", "slack_method": method, "error": error},
        )
