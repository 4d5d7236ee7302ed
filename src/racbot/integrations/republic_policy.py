"""Policy engine backed by a Republic LLM with tool calling."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Sequence
from typing import Any, NamedTuple

from loguru import logger
from republic import LLM, Tool

from racbot.actions.types import ActionInvocation, ActionResult, ActionSpec
from racbot.config import Settings
from racbot.policy import PolicyDecision

FINISH_TOOL_NAME = "finish_conversation"
FINISH_TOOL_DESCRIPTION = "End the conversation when the user says goodbye or has nothing more to ask."
SKIPPED_TOOL_OUTPUT = "skipped: only one action runs per turn"
FINISHED_TOOL_OUTPUT = "conversation finished"
CONVERSATION_RULES = (
    "Answer in plain natural language. Call at most one action per reply. "
    f"Call {FINISH_TOOL_NAME} when the conversation is over."
)


def build_llm(settings: Settings) -> LLM:
    """Build the Republic LLM client for the policy engine."""

    return LLM(
        model=settings.model,
        api_key=settings.require_api_key(),
        api_base=settings.api_base,
    )


def build_tools(actions: Sequence[ActionSpec]) -> list[Tool]:
    tools = [
        Tool(
            name=spec.name,
            description=spec.description,
            parameters=spec.json_schema(),
            handler=None,
            context=False,
        )
        for spec in actions
    ]
    tools.append(
        Tool(
            name=FINISH_TOOL_NAME,
            description=FINISH_TOOL_DESCRIPTION,
            parameters={"type": "object", "properties": {}, "required": []},
            handler=None,
            context=False,
        )
    )
    return tools


class RepublicPolicySession:
    """In-memory chat history for one peer."""

    def __init__(
        self,
        llm: Any,
        peer_id: str,
        tools: list[Tool],
        persona: str,
        *,
        max_tokens: int,
        timeout_seconds: float | None,
    ) -> None:
        self._llm = llm
        self._peer_id = peer_id
        self._tools = tools
        self._max_tokens = max_tokens
        self._timeout_seconds = timeout_seconds
        system_prompt = "\n\n".join(part for part in (persona.strip(), CONVERSATION_RULES) if part)
        self._messages: list[dict[str, Any]] = [{"role": "system", "content": system_prompt}]
        self._pending_call_id: str | None = None

    @property
    def messages(self) -> list[dict[str, Any]]:
        return list(self._messages)

    async def next(self, utterance: str) -> PolicyDecision:
        self._close_pending(SKIPPED_TOOL_OUTPUT)
        self._messages.append({"role": "user", "content": utterance})
        return await self._decide()

    async def resume(self, invocation: ActionInvocation, result: ActionResult) -> PolicyDecision:
        content = json.dumps({"status": str(result.status), "payload": result.payload}, ensure_ascii=False)
        self._close_pending(content)
        return await self._decide()

    def _close_pending(self, content: str) -> None:
        if self._pending_call_id is None:
            return
        self._answer(self._pending_call_id, content)
        self._pending_call_id = None

    async def _decide(self) -> PolicyDecision:
        async with asyncio.timeout(self._timeout_seconds):
            response = await asyncio.to_thread(
                self._llm.chat.raw,
                messages=list(self._messages),
                tools=self._tools,
                max_tokens=self._max_tokens,
            )

        message = first_message(response)
        text = response if isinstance(response, str) else (getattr(message, "content", None) or "")
        calls = tool_calls_of(message)
        if not calls:
            self._messages.append({"role": "assistant", "content": text})
            return PolicyDecision(text=text or None)

        self._messages.append({
            "role": "assistant",
            "content": text or None,
            "tool_calls": [call.as_message() for call in calls],
        })
        finished = False
        invocation: ActionInvocation | None = None
        for call in calls:
            if call.name == FINISH_TOOL_NAME:
                finished = True
                self._answer(call.id, FINISHED_TOOL_OUTPUT)
            elif invocation is None:
                invocation = ActionInvocation(call.name, parse_arguments(call.arguments))
                self._pending_call_id = call.id
            else:
                logger.warning("policy.tool_call.skipped peer={} name={}", self._peer_id, call.name)
                self._answer(call.id, SKIPPED_TOOL_OUTPUT)
        return PolicyDecision(text=text or None, invocation=invocation, finished=finished)

    def _answer(self, call_id: str, content: str) -> None:
        self._messages.append({"role": "tool", "tool_call_id": call_id, "content": content})


class RepublicPolicyEngine:
    """Creates one `RepublicPolicySession` per peer over a shared LLM client."""

    def __init__(self, llm: Any, *, max_tokens: int, timeout_seconds: float | None) -> None:
        self._llm = llm
        self._max_tokens = max_tokens
        self._timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> RepublicPolicyEngine:
        return cls(build_llm(settings), max_tokens=settings.max_tokens, timeout_seconds=settings.model_timeout_seconds)

    async def create_session(
        self, peer_id: str, actions: Sequence[ActionSpec], persona: str
    ) -> RepublicPolicySession:
        return RepublicPolicySession(
            self._llm,
            peer_id,
            build_tools(actions),
            persona,
            max_tokens=self._max_tokens,
            timeout_seconds=self._timeout_seconds,
        )


class ToolCall(NamedTuple):
    """One function call requested by the model."""

    id: str
    name: str
    arguments: object

    def as_message(self) -> dict[str, Any]:
        return {"id": self.id, "type": "function", "function": {"name": self.name, "arguments": self.arguments}}


def first_message(response: Any) -> Any:
    choices = getattr(response, "choices", None)
    return getattr(choices[0], "message", None) if choices else None


def tool_calls_of(message: Any) -> list[ToolCall]:
    calls: list[ToolCall] = []
    for position, raw in enumerate(getattr(message, "tool_calls", None) or []):
        function = getattr(raw, "function", None)
        name = getattr(function, "name", None)
        if not name:
            continue
        call_id = getattr(raw, "id", None) or f"call_{position}"
        calls.append(ToolCall(call_id, name, getattr(function, "arguments", None) or ""))
    return calls


def parse_arguments(raw: object) -> dict[str, Any]:
    if isinstance(raw, dict):
        return dict(raw)
    if not isinstance(raw, str) or not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("policy.tool_call.bad_arguments raw={}", raw[:200])
        return {}
    return parsed if isinstance(parsed, dict) else {}
