"""Conversational CRM assistant backed by Claude tool use."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import anthropic

from speakerdesk.core.exceptions import ConfigurationError, ToolLoopExceeded, UpstreamServiceError
from speakerdesk.llm.tools import TOOLS, CRMToolbox

logger = logging.getLogger(__name__)

HISTORY_TURNS = 10
FALLBACK_REPLY = "I apologize, but I encountered an error processing your request."

SYSTEM_PROMPT = """You are an AI assistant for Speak About AI, helping manage speakers, deals, and projects.

You can:
- Query and recommend speakers by expertise
- View, create, update, and delete deals
- View, update, and delete projects
- Change deal/project status (moving a deal to won also creates its project)
- Get summaries of pipeline and workload

When users ask to perform actions (create, update, delete, change status), use the available tools.
When answering questions, be helpful, specific, and use formatted lists."""


@dataclass(frozen=True)
class AssistantReply:
    text: str
    tool_calls: int = 0


def _block_to_dict(block: Any) -> dict[str, Any]:
    if isinstance(block, dict):
        return block
    block_type = getattr(block, "type", None)
    if block_type == "text":
        return {"type": "text", "text": block.text}
    if block_type == "tool_use":
        return {"type": "tool_use", "id": block.id, "name": block.name, "input": block.input}
    if hasattr(block, "model_dump"):
        return block.model_dump()
    return {"type": block_type}


def _turn(entry: Any) -> dict[str, str]:
    if isinstance(entry, dict):
        role, content = entry.get("role"), entry.get("content")
    else:
        role, content = getattr(entry, "role", None), getattr(entry, "content", None)
    return {"role": "user" if role == "user" else "assistant", "content": str(content or "")}


class CRMAssistant:
    """Runs the tool-use loop until the model answers in text.

    The loop is capped at ``max_tool_rounds`` model turns that request tools;
    one more request raises ``ToolLoopExceeded``.
    """

    def __init__(
        self,
        client: anthropic.Anthropic | None,
        toolbox: CRMToolbox,
        model: str,
        max_tokens: int = 2048,
        max_tool_rounds: int = 10,
    ) -> None:
        self.client = client
        self.toolbox = toolbox
        self.model = model
        self.max_tokens = max_tokens
        self.max_tool_rounds = max_tool_rounds

    def respond(self, message: str, conversation: Iterable[Any] = ()) -> AssistantReply:
        if self.client is None:
            raise ConfigurationError(
                "Anthropic API key not configured. Please add ANTHROPIC_API_KEY to your environment variables."
            )

        history = [_turn(entry) for entry in list(conversation)[-HISTORY_TURNS:]]
        messages: list[dict[str, Any]] = [*history, {"role": "user", "content": message}]

        response = self._create(messages)
        rounds = 0
        tool_calls = 0
        while response.stop_reason == "tool_use":
            content = [_block_to_dict(block) for block in response.content]
            tool_uses = [block for block in content if block.get("type") == "tool_use"]
            if not tool_uses:
                break
            if rounds >= self.max_tool_rounds:
                logger.warning(
                    "assistant.tool_loop_exceeded",
                    extra={"event": "assistant.tool_loop_exceeded", "round": rounds},
                )
                raise ToolLoopExceeded(rounds)
            rounds += 1

            results = []
            for block in tool_uses:
                logger.info(
                    "assistant.tool_call",
                    extra={"event": "assistant.tool_call", "tool": block["name"], "round": rounds},
                )
                result = self.toolbox.execute(block["name"], block.get("input") or {})
                tool_calls += 1
                results.append(
                    {
                        "type": "tool_result",
                        "tool_use_id": block["id"],
                        "content": json.dumps(result, default=str),
                    }
                )
            messages.append({"role": "assistant", "content": content})
            messages.append({"role": "user", "content": results})
            response = self._create(messages)

        texts = [
            block["text"]
            for block in (_block_to_dict(item) for item in response.content)
            if block.get("type") == "text" and block.get("text")
        ]
        return AssistantReply(text="\n\n".join(texts) or FALLBACK_REPLY, tool_calls=tool_calls)

    def _create(self, messages: list[dict[str, Any]]):
        try:
            return self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                tools=TOOLS,
                messages=messages,
            )
        except anthropic.APIError as exc:
            logger.error("assistant.api_error", extra={"event": "assistant.api_error", "error": str(exc)})
            raise UpstreamServiceError("Failed to get AI response", details=str(exc)) from exc
