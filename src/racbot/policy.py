"""Contract between sessions and the conversational policy engine."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from racbot.actions.types import ActionInvocation, ActionResult, ActionSpec


@dataclass(frozen=True)
class PolicyDecision:
    """Next-turn decision produced by the policy."""

    text: str | None = None
    invocation: ActionInvocation | None = None
    finished: bool = False


class PolicySession(Protocol):
    """Policy-side conversation state for one peer."""

    async def next(self, utterance: str) -> PolicyDecision: ...

    async def resume(self, invocation: ActionInvocation, result: ActionResult) -> PolicyDecision: ...


class PolicyEngine(Protocol):
    """Factory for policy sessions."""

    async def create_session(self, peer_id: str, actions: Sequence[ActionSpec], persona: str) -> PolicySession: ...
