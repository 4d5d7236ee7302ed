"""Application wiring."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from racbot.actions.builtin import build_http_client, register_builtin_actions
from racbot.actions.dispatcher import ActionDispatcher
from racbot.actions.registry import ActionRegistry
from racbot.config import Settings
from racbot.ingest import IngestLoop
from racbot.observability import DEFAULT_SINK, EventSink
from racbot.policy import PolicyEngine
from racbot.session.registry import SessionRegistry, policy_session_factory
from racbot.transport.base import Transport


@dataclass
class App:
    """Everything one running agent needs, built once at startup."""

    settings: Settings
    registry: ActionRegistry
    dispatcher: ActionDispatcher
    sessions: SessionRegistry
    ingest: IngestLoop
    http_client: httpx.AsyncClient

    async def run(self) -> None:
        try:
            await self.ingest.run()
        finally:
            await self.http_client.aclose()


def build_action_registry(settings: Settings, client: httpx.AsyncClient) -> ActionRegistry:
    registry = ActionRegistry()
    register_builtin_actions(registry, settings, client)
    return registry


def build_app(
    settings: Settings,
    transport: Transport,
    engine: PolicyEngine,
    *,
    sink: EventSink | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> App:
    """Wire registry, dispatcher, sessions and ingest loop around `transport` and `engine`."""

    sink = sink or DEFAULT_SINK
    client = http_client or build_http_client(settings)
    registry = build_action_registry(settings, client)
    dispatcher = ActionDispatcher(registry, sink=sink)
    sessions = SessionRegistry(policy_session_factory(engine, dispatcher, settings.persona, sink=sink), sink=sink)
    ingest = IngestLoop(transport, sessions, sink=sink)
    return App(
        settings=settings,
        registry=registry,
        dispatcher=dispatcher,
        sessions=sessions,
        ingest=ingest,
        http_client=client,
    )
