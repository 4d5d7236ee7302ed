"""Per-peer turn-taking state machine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from racbot.actions.dispatcher import ActionDispatcher
from racbot.actions.types import ActionInvocation, ActionResult
from racbot.errors import SessionFinishedError
from racbot.observability import DEFAULT_SINK, EventSink
from racbot.policy import PolicySession


class TurnState(StrEnum):
    ACTIVE = "active"
    FINISHED = "finished"


@dataclass(frozen=True)
class TurnOutcome:
    """Result of advancing a session by one user utterance."""

    reply_text: str | None
    invocation: ActionInvocation | None = None
    result: ActionResult | None = None
    finished: bool = False


class Session:
    """Conversation bound to one peer.

    A turn forwards the utterance to the policy, runs at most one requested
    action through the dispatcher, hands the result back to the policy and only
    then completes. `turn_state` moves from ACTIVE to FINISHED once and never
    back. A turn that raises leaves the state untouched.
    """

    def __init__(
        self,
        peer_id: str,
        conversation_id: str,
        policy: PolicySession,
        dispatcher: ActionDispatcher,
        *,
        sink: EventSink | None = None,
    ) -> None:
        self.peer_id = peer_id
        self.conversation_id = conversation_id
        self.created_at = datetime.now(UTC)
        self._policy = policy
        self._dispatcher = dispatcher
        self._sink = sink or DEFAULT_SINK
        self._state = TurnState.ACTIVE
        self._turns = 0

    @property
    def turn_state(self) -> TurnState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is TurnState.ACTIVE

    @property
    def turns(self) -> int:
        return self._turns

    async def advance(self, utterance: str) -> TurnOutcome:
        if not self.is_active:
            raise SessionFinishedError(self.peer_id)

        decision = await self._policy.next(utterance)
        reply_text = decision.text or None
        finished = decision.finished
        invocation = decision.invocation
        result: ActionResult | None = None

        if invocation is not None:
            self._sink.emit("session.action.requested", peer=self.peer_id, action=invocation.action_name)
            result = await self._dispatcher.dispatch(invocation)
            followup = await self._policy.resume(invocation, result)
            if followup.invocation is not None:
                self._sink.emit(
                    "session.action.ignored",
                    level="WARNING",
                    peer=self.peer_id,
                    action=followup.invocation.action_name,
                )
            reply_text = followup.text or reply_text
            finished = finished or followup.finished

        self._turns += 1
        if finished:
            self._state = TurnState.FINISHED
        self._sink.emit(
            "session.turn.end",
            peer=self.peer_id,
            turn=self._turns,
            action=invocation.action_name if invocation else None,
            replied=reply_text is not None,
            finished=finished,
        )
        return TurnOutcome(reply_text=reply_text, invocation=invocation, result=result, finished=finished)
