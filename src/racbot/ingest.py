"""Inbound stream consumer: route messages to sessions and send replies."""

from __future__ import annotations

from enum import StrEnum

from racbot.logging_utils import bind_peer
from racbot.observability import DEFAULT_SINK, EventSink
from racbot.session.registry import SessionRegistry
from racbot.transport.base import Conversation, InboundMessage, Transport

APOLOGY_TEXT = "Sorry, I encountered an error processing your message."


class Disposition(StrEnum):
    """What happened to one inbound message."""

    IGNORED = "ignored"
    NO_CONVERSATION = "no_conversation"
    REPLIED = "replied"
    SILENT = "silent"
    FAILED = "failed"


class IngestLoop:
    """Sequential consumer of the transport's message stream."""

    def __init__(
        self,
        transport: Transport,
        sessions: SessionRegistry,
        *,
        sink: EventSink | None = None,
        apology: str = APOLOGY_TEXT,
    ) -> None:
        self._transport = transport
        self._sessions = sessions
        self._sink = sink or DEFAULT_SINK
        self._apology = apology

    @property
    def sessions(self) -> SessionRegistry:
        return self._sessions

    async def run(self) -> None:
        try:
            await self._transport.sync()
        except Exception as exc:
            self._sink.emit("ingest.sync.error", level="WARNING", exc=exc)

        self._sink.emit("ingest.waiting")
        async for message in self._transport.stream_all_messages():
            await self.handle(message)
        self._sink.emit("ingest.stream.closed")

    async def handle(self, message: InboundMessage) -> Disposition:
        if self._is_self(message) or not message.is_text:
            return Disposition.IGNORED

        with bind_peer(message.sender_peer_id):
            self._sink.emit(
                "ingest.message.received",
                peer=message.sender_peer_id,
                conversation=message.conversation_id,
                content=message.body[:100],
            )
            conversation = await self._resolve(message.conversation_id)
            if conversation is None:
                self._sink.emit("ingest.conversation.missing", conversation=message.conversation_id)
                return Disposition.NO_CONVERSATION

            try:
                disposition = await self._run_turn(message, conversation)
            except Exception as exc:
                self._sink.emit("ingest.turn.error", level="ERROR", exc=exc, peer=message.sender_peer_id)
                await self._apologize(conversation)
                disposition = Disposition.FAILED
            self._sink.emit("ingest.waiting")
            return disposition

    def _is_self(self, message: InboundMessage) -> bool:
        return message.sender_peer_id.casefold() == self._transport.identity.casefold()

    async def _resolve(self, conversation_id: str) -> Conversation | None:
        try:
            return await self._transport.get_conversation_by_id(conversation_id)
        except Exception as exc:
            self._sink.emit("ingest.conversation.error", level="WARNING", exc=exc, conversation=conversation_id)
            return None

    async def _run_turn(self, message: InboundMessage, conversation: Conversation) -> Disposition:
        peer_id = message.sender_peer_id
        session = await self._sessions.get_or_create(peer_id, message.conversation_id)
        outcome = await session.advance(message.body)

        if outcome.invocation is not None:
            self._sink.emit(
                "ingest.action",
                action=outcome.invocation.action_name,
                status=str(outcome.result.status) if outcome.result else None,
            )
        try:
            if outcome.reply_text:
                await conversation.send(outcome.reply_text)
        finally:
            if outcome.finished:
                self._sink.emit("ingest.session.finished", peer=peer_id)
                self._sessions.remove(peer_id)
        return Disposition.REPLIED if outcome.reply_text else Disposition.SILENT

    async def _apologize(self, conversation: Conversation) -> None:
        try:
            await conversation.send(self._apology)
        except Exception as exc:
            self._sink.emit("ingest.apology.error", level="WARNING", exc=exc, conversation=conversation.id)
