from __future__ import annotations

import json
import time
from dataclasses import replace
from urllib.parse import urlencode

import pytest
from fastapi.testclient import TestClient

from speakerdesk.auth.jwt import create_access_token
from speakerdesk.core.config import get_config
from speakerdesk.main import create_app
from speakerdesk.slackbot.signature import compute_signature

API = "/api/v1"


def _auth(role: str = "admin", user_id: int = 1) -> dict[str, str]:
    token = create_access_token(user_id=user_id, role=role, secret=get_config().JWT_SECRET)
    return {"Authorization": f"Bearer {token}"}


def _deal_body(**overrides) -> dict:
    body = {
        "client_name": "Dana Lee",
        "client_email": "dana@acme.test",
        "company": "Acme Corp",
        "event_title": "Acme AI Summit",
        "event_date": "2026-11-20",
        "event_location": "Chicago, IL",
        "event_type": "Keynote",
        "attendee_count": 300,
        "budget_range": "$10k-$20k",
        "deal_value": 10000,
        "source": "Website",
    }
    body.update(overrides)
    return body


@pytest.fixture
def client(config, services):
    return TestClient(create_app(config, services))


def test_root_and_health(client):
    assert client.get("/").json()["api_prefix"] == API
    health = client.get(f"{API}/health").json()
    assert health["status"] == "ok"
    assert health["database"] is None
    assert health["slack"] == {"enabled": True, "sent": 0, "failed": 0, "skipped": 0}
    assert health["assistant"] == {"enabled": True}


def test_deal_endpoints_require_a_bearer_token(client):
    response = client.get(f"{API}/deals")
    assert response.status_code == 401
    assert response.json()["error_code"] == "unauthenticated"

    response = client.get(f"{API}/deals", headers={"Authorization": "Token abc"})
    assert response.status_code == 401


def test_viewer_cannot_write(client):
    response = client.post(f"{API}/deals", json=_deal_body(), headers=_auth("viewer"))
    assert response.status_code == 403
    assert response.json()["error_code"] == "forbidden"


def test_create_and_fetch_deal(client, notifier):
    created = client.post(f"{API}/deals", json=_deal_body(), headers=_auth("sales"))

    assert created.status_code == 201
    body = created.json()
    assert body["status"] == "lead"
    assert body["deal_value"] == 10000.0
    assert notifier.texts == ["New Deal: Acme AI Summit"]

    fetched = client.get(f"{API}/deals/{body['id']}", headers=_auth("viewer"))
    assert fetched.json()["event_title"] == "Acme AI Summit"


def test_create_deal_validation_error(client):
    response = client.post(f"{API}/deals", json=_deal_body(client_name=""), headers=_auth())
    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "invalid_input"
    assert body["details"][0]["loc"][-1] == "client_name"


def test_update_to_won_creates_project(client, make_deal):
    deal = make_deal(status="negotiation")

    response = client.put(
        f"{API}/deals/{deal.id}",
        json={"status": "Won", "commission_percentage": 25},
        headers=_auth("sales", user_id=9),
    )

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "won"
    assert body["projectCreated"] is True
    project = client.get(f"{API}/projects/{body['projectId']}", headers=_auth()).json()
    assert project["deal_id"] == deal.id
    assert project["commission_amount"] == 2500.0
    assert project["speaker_fee"] == 7500.0

    again = client.patch(f"{API}/deals/{deal.id}", json={"status": "won"}, headers=_auth())
    assert "projectCreated" not in again.json()
    assert len(client.get(f"{API}/projects", headers=_auth()).json()) == 1


@pytest.mark.parametrize("method", ["get", "delete"])
def test_malformed_deal_id_is_rejected(client, method):
    response = getattr(client, method)(f"{API}/deals/12abc", headers=_auth())
    assert response.status_code == 400
    assert response.json()["error_code"] == "invalid_id"


def test_malformed_deal_id_on_update(client):
    response = client.put(f"{API}/deals/abc", json={"status": "won"}, headers=_auth())
    assert response.status_code == 400
    assert response.json()["error_code"] == "invalid_id"


def test_non_ascii_digit_deal_id_is_rejected(client):
    response = client.patch(f"{API}/deals/%C2%B2", json={"status": "won"}, headers=_auth())
    assert response.status_code == 400
    assert response.json()["error_code"] == "invalid_id"


@pytest.mark.parametrize("method", ["get", "delete"])
def test_out_of_range_ids_are_not_found(client, method):
    deal = getattr(client, method)(f"{API}/deals/99999999999999999999", headers=_auth())
    project = getattr(client, method)(f"{API}/projects/99999999999999999999", headers=_auth())
    assert deal.status_code == 404
    assert deal.json()["error_code"] == "not_found"
    assert project.status_code == 404


def test_out_of_range_deal_update_is_not_found(client):
    response = client.put(f"{API}/deals/99999999999999999999", json={"status": "won"}, headers=_auth())
    assert response.status_code == 404


def test_missing_deal(client):
    assert client.get(f"{API}/deals/999", headers=_auth()).status_code == 404
    response = client.put(f"{API}/deals/999", json={"status": "won"}, headers=_auth())
    assert response.status_code == 404
    assert response.json()["error_code"] == "not_found"


def test_list_filter_and_delete_deals(client, make_deal):
    make_deal(company="Globex", status="won")
    keep = make_deal(company="Initech")

    won = client.get(f"{API}/deals", params={"status": "won"}, headers=_auth()).json()
    searched = client.get(f"{API}/deals", params={"search": "initech"}, headers=_auth()).json()

    assert [deal["company"] for deal in won] == ["Globex"]
    assert [deal["id"] for deal in searched] == [keep.id]
    deleted = client.delete(f"{API}/deals/{keep.id}", headers=_auth())
    assert deleted.json() == {"message": "Deal deleted successfully"}
    assert client.delete(f"{API}/deals/{keep.id}", headers=_auth()).status_code == 404


def test_project_status_update_notifies(client, projects, notifier):
    project = projects.create_project({"project_name": "Summit"})

    response = client.patch(
        f"{API}/projects/{project.id}/status", json={"status": "pre_event"}, headers=_auth(user_id=4)
    )

    assert response.json()["status"] == "pre_event"
    assert notifier.texts == ["Project Updated: Summit → pre_event"]
    assert "by user:4" in notifier.messages[0]["blocks"][0]["text"]["text"]
    assert client.get(f"{API}/projects/999", headers=_auth()).status_code == 404
    assert client.delete(f"{API}/projects/{project.id}", headers=_auth()).status_code == 200


def test_generate_invoice_pair(client, projects):
    project = projects.create_project({"project_name": "Summit", "speaker_fee": 8000})

    first = client.post(f"{API}/invoices/generate-pair", json={"project_id": project.id}, headers=_auth("sales"))
    second = client.post(f"{API}/invoices/generate-pair", json={"project_id": project.id}, headers=_auth("sales"))

    assert first.status_code == 201
    body = first.json()
    assert body["totals"] == {"total": 8000.0, "deposit": 4000.0, "final": 4000.0}
    assert body["final"]["parent_invoice_id"] == body["deposit"]["id"]
    assert second.status_code == 200
    assert second.json()["message"] == "Invoices already exist for this project"

    missing = client.post(f"{API}/invoices/generate-pair", json={"project_id": 999}, headers=_auth())
    assert missing.status_code == 404


def test_assistant_endpoint(client, services, llm):
    services.assistant.client = llm.client([llm.text("You have no deals yet.")])

    response = client.post(f"{API}/assistant/crm", json={"message": "Any deals?"}, headers=_auth("sales"))

    assert response.json() == {"response": "You have no deals yet.", "tool_calls": 0, "error_code": None}
    assert client.post(f"{API}/assistant/crm", json={"message": "hi"}, headers=_auth("viewer")).status_code == 403


def test_assistant_tool_loop_cap_is_reported(client, services, llm):
    services.assistant.max_tool_rounds = 1
    services.assistant.client = llm.client([llm.tool("get_deals", {}), llm.tool("get_deals", {}, tool_id="toolu_2")])

    response = client.post(f"{API}/assistant/crm", json={"message": "loop"}, headers=_auth())

    assert response.status_code == 200
    assert response.json()["error_code"] == "tool_loop_exceeded"


def test_assistant_without_api_key(client, services):
    services.assistant.client = None
    response = client.post(f"{API}/assistant/crm", json={"message": "hi"}, headers=_auth())
    assert response.status_code == 500
    assert response.json()["error_code"] == "configuration_error"


def test_slack_command(client):
    response = client.post(f"{API}/slack/commands", data={"command": "/deals", "text": "list"})
    assert response.json() == {"response_type": "ephemeral", "text": "No active deals found."}


def test_slack_interaction_payload_checks(client, make_deal, deals):
    assert client.post(f"{API}/slack/interactions", data={}).status_code == 400
    assert client.post(f"{API}/slack/interactions", data={"payload": "{nope"}).status_code == 400

    deal = make_deal()
    payload = {"type": "block_actions", "user": {"name": "dana"}, "actions": [{"action_id": "mark_contacted", "value": str(deal.id)}]}
    response = client.post(f"{API}/slack/interactions", data={"payload": json.dumps(payload)})

    assert response.json()["text"] == "✅ Deal marked as contacted!"
    assert deals.get_deal(deal.id).status == "contacted"


def test_slack_signature_is_enforced_when_configured(config, services):
    signed_config = replace(config, SLACK_SIGNING_SECRET="shh")
    client = TestClient(create_app(signed_config, replace(services, config=signed_config)))
    body = urlencode({"command": "/deals", "text": "help"}).encode("utf-8")
    timestamp = str(int(time.time()))
    headers = {"Content-Type": "application/x-www-form-urlencoded", "X-Slack-Request-Timestamp": timestamp}

    rejected = client.post(
        f"{API}/slack/commands", content=body, headers={**headers, "X-Slack-Signature": "v0=bad"}
    )
    accepted = client.post(
        f"{API}/slack/commands",
        content=body,
        headers={**headers, "X-Slack-Signature": compute_signature("shh", timestamp, body)},
    )

    assert rejected.status_code == 401
    assert rejected.json()["error_code"] == "unauthenticated"
    assert accepted.json()["text"].startswith("*📋 /deals Commands*")


def test_unsigned_slack_requests_are_refused_outside_development(config, services, make_deal, deals):
    staging = replace(config, ENV="staging")
    client = TestClient(create_app(staging, replace(services, config=staging)))
    deal = make_deal(status="negotiation")
    payload = {
        "type": "block_actions",
        "user": {"name": "mallory"},
        "actions": [{"action_id": "update_deal_status", "selected_option": {"value": f"{deal.id}:won"}}],
    }

    interaction = client.post(f"{API}/slack/interactions", data={"payload": json.dumps(payload)})
    command = client.post(f"{API}/slack/commands", data={"command": "/deals", "text": "list"})

    assert interaction.status_code == 401
    assert command.status_code == 401
    assert deals.get_deal(deal.id).status == "negotiation"


def test_non_utf8_slack_body_is_a_bad_request(client):
    response = client.post(
        f"{API}/slack/commands",
        content=b"command=%2Fdeals&text=\xff\xfe",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 400


def test_tokens_are_checked_against_the_app_config_secret(config, services):
    rotated = replace(config, JWT_SECRET="rotated-secret")
    client = TestClient(create_app(rotated, replace(services, config=rotated)))
    fresh = create_access_token(user_id=1, role="viewer", secret="rotated-secret")

    assert client.get(f"{API}/deals", headers=_auth("viewer")).status_code == 401
    assert client.get(f"{API}/deals", headers={"Authorization": f"Bearer {fresh}"}).status_code == 200


def test_named_operator_is_credited_on_deal_updates(client, make_deal, notifier):
    deal = make_deal(status="lead")
    token = create_access_token(user_id=2, role="sales", secret=get_config().JWT_SECRET, name="Dana Lee")

    client.put(f"{API}/deals/{deal.id}", json={"status": "lost"}, headers={"Authorization": f"Bearer {token}"})

    assert "by Dana Lee" in notifier.messages[0]["blocks"][0]["text"]["text"]
