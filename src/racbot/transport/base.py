"""Transport contract consumed by the ingest loop."""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Protocol


class ContentKind(StrEnum):
    TEXT = "text"
    OTHER = "other"


@dataclass(frozen=True)
class InboundMessage:
    """Message received from a peer."""

    conversation_id: str
    sender_peer_id: str
    body: str
    content_kind: ContentKind = ContentKind.TEXT
    metadata: dict[str, Any] = field(default_factory=dict)
    received_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_text(self) -> bool:
        return self.content_kind is ContentKind.TEXT


class Conversation(Protocol):
    """One-to-one conversation that accepts outbound text."""

    @property
    def id(self) -> str: ...

    async def send(self, text: str) -> None: ...


class Transport(Protocol):
    """Ordered, deduplicated message stream plus conversation lookup."""

    @property
    def identity(self) -> str: ...

    async def sync(self) -> None: ...

    def stream_all_messages(self) -> AsyncIterator[InboundMessage]: ...

    async def get_conversation_by_id(self, conversation_id: str) -> Conversation | None: ...
