"""Peer id to live session mapping."""

from __future__ import annotations

import builtins
from collections.abc import Awaitable, Callable, MutableMapping

from racbot.actions.dispatcher import ActionDispatcher
from racbot.observability import DEFAULT_SINK, EventSink
from racbot.policy import PolicyEngine
from racbot.session.session import Session

SessionFactory = Callable[[str, str], Awaitable[Session]]


def policy_session_factory(
    engine: PolicyEngine,
    dispatcher: ActionDispatcher,
    persona: str,
    *,
    sink: EventSink | None = None,
) -> SessionFactory:
    """Build sessions bound to the dispatcher's declared action space and `persona`."""

    async def _create(peer_id: str, conversation_id: str) -> Session:
        policy = await engine.create_session(peer_id, dispatcher.registry.specs(), persona)
        return Session(peer_id, conversation_id, policy, dispatcher, sink=sink)

    return _create


class SessionRegistry:
    """Owns at most one live session per peer."""

    def __init__(
        self,
        factory: SessionFactory,
        *,
        store: MutableMapping[str, Session] | None = None,
        sink: EventSink | None = None,
    ) -> None:
        self._factory = factory
        self._sessions: MutableMapping[str, Session] = store if store is not None else {}
        self._sink = sink or DEFAULT_SINK

    def get(self, peer_id: str) -> Session | None:
        session = self._sessions.get(peer_id)
        if session is None or not session.is_active:
            return None
        return session

    async def get_or_create(self, peer_id: str, conversation_id: str) -> Session:
        existing = self.get(peer_id)
        if existing is not None:
            return existing

        session = await self._factory(peer_id, conversation_id)
        # The factory may suspend; re-check before recording so a peer never ends up with two sessions.
        raced = self.get(peer_id)
        if raced is not None:
            return raced
        self._sessions[peer_id] = session
        self._sink.emit("session.created", peer=peer_id, conversation=conversation_id, live=len(self._sessions))
        return session

    def remove(self, peer_id: str) -> None:
        if self._sessions.pop(peer_id, None) is not None:
            self._sink.emit("session.removed", peer=peer_id, live=len(self._sessions))

    def peers(self) -> builtins.list[str]:
        return list(self._sessions.keys())

    def __contains__(self, peer_id: object) -> bool:
        return isinstance(peer_id, str) and self.get(peer_id) is not None

    def __len__(self) -> int:
        return len(self._sessions)
