from __future__ import annotations

from urllib.error import URLError

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError, SlackRequestError
from slack_sdk.webhook import WebhookResponse

from speakerdesk.notifications.slack import SlackNotifier


class _FakeWebClient:
    def __init__(self, data: dict | None = None, error: Exception | None = None) -> None:
        self.data = data if data is not None else {"ok": True}
        self.error = error
        self.calls: list[tuple[str, dict]] = []

    def chat_postMessage(self, **kwargs):
        return self._call("chat.postMessage", kwargs)

    def views_open(self, **kwargs):
        return self._call("views.open", kwargs)

    def _call(self, method: str, kwargs: dict):
        self.calls.append((method, kwargs))
        if self.error:
            raise self.error
        return self.data


class _FakeWebhooks:
    """Stands in for ``WebhookClient``; called as ``factory(url, timeout=...)``."""

    def __init__(self, status_code: int = 200, body: str = "ok", error: Exception | None = None) -> None:
        self.status_code = status_code
        self.body = body
        self.error = error
        self.sent: list[dict] = []

    def __call__(self, url: str, timeout: float | None = None) -> "_FakeWebhooks":
        self.url = url
        self.timeout = timeout
        return self

    def send_dict(self, body: dict) -> WebhookResponse:
        self.sent.append({"url": self.url, "timeout": self.timeout, "body": body})
        if self.error:
            raise self.error
        return WebhookResponse(url=self.url, status_code=self.status_code, body=self.body, headers={})


def test_unconfigured_notifier_skips_quietly():
    webhooks = _FakeWebhooks()
    notifier = SlackNotifier(webhook_factory=webhooks)

    assert notifier.enabled is False
    assert notifier.notify({"text": "hi"}) is False
    assert notifier.open_view("trigger", {}) is False
    assert webhooks.sent == []
    assert notifier.stats["skipped"] == 2


def test_bot_token_builds_a_web_client():
    notifier = SlackNotifier(bot_token="xoxb-test", timeout=2.5)

    assert isinstance(notifier.client, WebClient)
    assert notifier.client.token == "xoxb-test"
    assert notifier.client.timeout == 2.5
    assert notifier.enabled is True


def test_webhook_delivery():
    webhooks = _FakeWebhooks()
    notifier = SlackNotifier(webhook_url="https://hooks.slack.test/x", timeout=2.5, webhook_factory=webhooks)

    assert notifier.notify({"text": "hi"}) is True
    assert webhooks.sent == [{"url": "https://hooks.slack.test/x", "timeout": 2.5, "body": {"text": "hi"}}]
    assert notifier.stats["sent"] == 1


def test_webhook_http_error_is_counted_not_raised():
    notifier = SlackNotifier(
        webhook_url="https://hooks.slack.test/x",
        webhook_factory=_FakeWebhooks(status_code=500, body="boom"),
    )
    assert notifier.notify({"text": "hi"}) is False
    assert notifier.stats["failed"] == 1


def test_network_error_is_counted_not_raised():
    webhooks = _FakeWebhooks(error=URLError("unreachable"))
    notifier = SlackNotifier(webhook_url="https://hooks.slack.test/x", webhook_factory=webhooks)

    assert notifier.notify({"text": "hi"}) is False
    assert notifier.respond("https://hooks.slack.test/respond", {"text": "hi"}) is False
    assert notifier.stats["failed"] == 2


def test_respond_posts_to_the_response_url():
    webhooks = _FakeWebhooks()
    notifier = SlackNotifier(webhook_factory=webhooks)

    assert notifier.respond("https://hooks.slack.test/actions/1", {"text": "done"}) is True
    assert webhooks.sent[0]["url"] == "https://hooks.slack.test/actions/1"


def test_bot_token_posts_through_web_api():
    client = _FakeWebClient({"ok": True, "ts": "1.23", "channel": "C1"})
    notifier = SlackNotifier(bot_token="xoxb-test", channel="C1", client=client)

    result = notifier.send_message({"text": "hi"})

    assert result.ok and result.ts == "1.23" and result.channel == "C1"
    assert client.calls == [("chat.postMessage", {"channel": "C1", "text": "hi"})]


def test_web_api_errors_are_failures():
    api_error = SlackApiError("The request to the Slack API failed.", {"ok": False, "error": "channel_not_found"})
    notifier = SlackNotifier(bot_token="xoxb-test", client=_FakeWebClient(error=api_error))
    assert notifier.notify({"text": "hi"}) is False

    notifier.client = _FakeWebClient(error=SlackRequestError("bad request"))
    assert notifier.open_view("trigger", {"type": "modal"}) is False

    notifier.client = _FakeWebClient(error=TimeoutError("timed out"))
    assert notifier.notify({"text": "hi"}) is False
    assert notifier.stats["failed"] == 3


def test_open_view():
    client = _FakeWebClient()
    notifier = SlackNotifier(bot_token="xoxb-test", client=client)

    assert notifier.open_view("trigger-1", {"type": "modal"}) is True
    assert client.calls == [("views.open", {"trigger_id": "trigger-1", "view": {"type": "modal"}})]
