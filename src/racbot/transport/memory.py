"""In-process transport backed by an asyncio queue."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

from racbot.transport.base import InboundMessage

_CLOSED = object()


@dataclass
class MemoryConversation:
    """Conversation that records every sent text."""

    id: str
    sent: list[str] = field(default_factory=list)
    outbox: asyncio.Queue[str] | None = None

    async def send(self, text: str) -> None:
        self.sent.append(text)
        if self.outbox is not None:
            await self.outbox.put(text)


class InMemoryTransport:
    """Queue-backed transport for the local console and tests."""

    def __init__(self, identity: str = "racbot") -> None:
        self._identity = identity
        self._inbound: asyncio.Queue[object] = asyncio.Queue()
        self._conversations: dict[str, MemoryConversation] = {}
        self.outbox: asyncio.Queue[str] = asyncio.Queue()
        self.synced = False

    @property
    def identity(self) -> str:
        return self._identity

    def open_conversation(self, conversation_id: str) -> MemoryConversation:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            conversation = MemoryConversation(conversation_id, outbox=self.outbox)
            self._conversations[conversation_id] = conversation
        return conversation

    async def publish(self, message: InboundMessage) -> None:
        await self._inbound.put(message)

    async def close(self) -> None:
        await self._inbound.put(_CLOSED)

    async def sync(self) -> None:
        self.synced = True

    async def stream_all_messages(self) -> AsyncIterator[InboundMessage]:
        while True:
            item = await self._inbound.get()
            if item is _CLOSED:
                return
            assert isinstance(item, InboundMessage)
            yield item

    async def get_conversation_by_id(self, conversation_id: str) -> MemoryConversation | None:
        return self._conversations.get(conversation_id)
