from __future__ import annotations

import json
from types import SimpleNamespace

import anthropic
import httpx
import pytest

from speakerdesk.core.exceptions import ConfigurationError, ToolLoopExceeded, UpstreamServiceError
from speakerdesk.llm.crm_assistant import FALLBACK_REPLY, HISTORY_TURNS, CRMAssistant


def _assistant(services, client, max_tool_rounds: int = 10) -> CRMAssistant:
    return CRMAssistant(client, services.toolbox, model="claude-test", max_tool_rounds=max_tool_rounds)


def test_plain_answer_without_tools(services, llm):
    client = llm.client([llm.text("Hello! How can I help?")])

    reply = _assistant(services, client).respond("hi")

    assert reply.text == "Hello! How can I help?"
    assert reply.tool_calls == 0
    call = client.messages.calls[0]
    assert call["model"] == "claude-test"
    assert call["messages"] == [{"role": "user", "content": "hi"}]
    assert {tool["name"] for tool in call["tools"]} >= {"get_deals", "update_deal_status", "get_speakers"}


def test_tool_results_are_fed_back(services, llm, make_deal):
    make_deal(event_title="Acme AI Summit", status="proposal")
    client = llm.client(
        [
            llm.tool("get_deals", {"status": "proposal"}, tool_id="toolu_42"),
            llm.text("You have one deal in proposal."),
        ]
    )

    reply = _assistant(services, client).respond("What is in proposal?")

    assert reply.text == "You have one deal in proposal."
    assert reply.tool_calls == 1
    followup = client.messages.calls[1]["messages"]
    assert followup[1]["role"] == "assistant"
    tool_result = followup[2]["content"][0]
    assert tool_result["type"] == "tool_result"
    assert tool_result["tool_use_id"] == "toolu_42"
    assert json.loads(tool_result["content"])["count"] == 1


def test_won_through_assistant_derives_project(services, llm, make_deal, projects):
    deal = make_deal(status="negotiation")
    client = llm.client([llm.tool("update_deal_status", {"deal_id": deal.id, "status": "won"}), llm.text("Done!")])

    _assistant(services, client).respond("Mark it won")

    assert projects.get_project_by_deal(deal.id) is not None


def test_tool_loop_cap(services, llm):
    responses = [llm.tool("get_deals", {}, tool_id=f"toolu_{index}") for index in range(3)]
    client = llm.client(responses)

    with pytest.raises(ToolLoopExceeded) as exc:
        _assistant(services, client, max_tool_rounds=2).respond("loop forever")

    assert exc.value.rounds == 2
    assert exc.value.error_code == "tool_loop_exceeded"
    assert len(client.messages.calls) == 3


def test_history_is_trimmed_to_recent_turns(services, llm):
    client = llm.client([llm.text("ok")])
    conversation = [
        {"role": "user" if index % 2 == 0 else "assistant", "content": f"turn {index}"} for index in range(14)
    ]
    conversation.append(SimpleNamespace(role="bot", content=None))

    _assistant(services, client).respond("latest", conversation)

    messages = client.messages.calls[0]["messages"]
    assert len(messages) == HISTORY_TURNS + 1
    assert messages[0]["content"] == "turn 5"
    assert messages[-2] == {"role": "assistant", "content": ""}
    assert messages[-1] == {"role": "user", "content": "latest"}


def test_empty_text_falls_back(services, llm):
    client = llm.client([SimpleNamespace(stop_reason="end_turn", content=[])])
    assert _assistant(services, client).respond("hi").text == FALLBACK_REPLY


def test_missing_client_is_a_configuration_error(services):
    with pytest.raises(ConfigurationError):
        _assistant(services, None).respond("hi")


def test_api_error_becomes_upstream_error(services):
    class _Failing:
        def create(self, **kwargs):
            request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
            raise anthropic.APIConnectionError(request=request)

    client = SimpleNamespace(messages=_Failing())

    with pytest.raises(UpstreamServiceError):
        _assistant(services, client).respond("hi")
