"""Telegram transport using long polling."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

from loguru import logger
from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes, MessageHandler, filters

from racbot.transport.base import ContentKind, InboundMessage

MAX_MESSAGE_LENGTH = 4000


def split_message(text: str, max_len: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Split text into Telegram-sized chunks, preferring line breaks."""
    if len(text) <= max_len:
        return [text]
    chunks: list[str] = []
    while text:
        if len(text) <= max_len:
            chunks.append(text)
            break
        cut = text[:max_len]
        pos = cut.rfind("\n")
        if pos <= 0:
            pos = cut.rfind(" ")
        if pos <= 0:
            pos = max_len
        chunks.append(text[:pos])
        text = text[pos:].lstrip()
    return chunks


@dataclass(frozen=True)
class TelegramConfig:
    """Telegram transport config."""

    token: str
    allow_from: set[str] = field(default_factory=set)


class TelegramConversation:
    """Private chat with one Telegram user."""

    def __init__(self, transport: TelegramTransport, chat_id: str) -> None:
        self._transport = transport
        self._chat_id = chat_id

    @property
    def id(self) -> str:
        return self._chat_id

    async def send(self, text: str) -> None:
        await self._transport.send_text(self._chat_id, text)


class TelegramTransport:
    """Private-chat Telegram bot exposed as a message stream."""

    def __init__(self, config: TelegramConfig) -> None:
        self._config = config
        self._app: Application | None = None
        self._identity = ""
        self._queue: asyncio.Queue[InboundMessage] = asyncio.Queue()
        self._known_chats: set[str] = set()

    @property
    def identity(self) -> str:
        return self._identity

    async def start(self) -> None:
        if not self._config.token:
            raise RuntimeError("telegram token is empty")
        logger.info("telegram.transport.start allow_from_count={}", len(self._config.allow_from))
        self._app = Application.builder().token(self._config.token).build()
        self._app.add_handler(CommandHandler("start", self._on_start))
        self._app.add_handler(MessageHandler(filters.ChatType.PRIVATE & ~filters.COMMAND, self._on_message))
        await self._app.initialize()
        await self._app.start()
        self._identity = str(self._app.bot.id)

    async def sync(self) -> None:
        if self._app is None:
            await self.start()
        assert self._app is not None
        updater = self._app.updater
        if updater is None:
            return
        await updater.start_polling(drop_pending_updates=True, allowed_updates=["message"])
        logger.info("telegram.transport.polling identity={}", self._identity)

    async def stop(self) -> None:
        if self._app is None:
            return
        updater = self._app.updater
        if updater is not None and updater.running:
            await updater.stop()
        await self._app.stop()
        await self._app.shutdown()
        self._app = None
        logger.info("telegram.transport.stopped")

    async def stream_all_messages(self) -> AsyncIterator[InboundMessage]:
        while True:
            yield await self._queue.get()

    async def get_conversation_by_id(self, conversation_id: str) -> TelegramConversation | None:
        if conversation_id not in self._known_chats:
            return None
        return TelegramConversation(self, conversation_id)

    async def send_text(self, chat_id: str, text: str) -> None:
        if self._app is None:
            raise RuntimeError("telegram transport is not started")
        for chunk in split_message(text):
            await self._app.bot.send_message(chat_id=int(chat_id), text=chunk)

    def _is_allowed(self, user_id: int, username: str | None) -> bool:
        if not self._config.allow_from:
            return True
        tokens = {str(user_id)}
        if username:
            tokens.add(username)
        return not tokens.isdisjoint(self._config.allow_from)

    async def _on_start(self, update: Update, _context: ContextTypes.DEFAULT_TYPE) -> None:
        if update.message is None:
            return
        await update.message.reply_text("Echo Whisperer is online. Ask me about bitcoin predictions.")

    async def _on_message(self, update: Update, _context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.message
        user = update.effective_user
        if message is None or user is None:
            return
        if not self._is_allowed(user.id, user.username):
            await message.reply_text("Access denied.")
            return

        chat_id = str(message.chat_id)
        self._known_chats.add(chat_id)
        text = message.text
        logger.info(
            "telegram.transport.inbound chat_id={} sender_id={} text={}",
            chat_id,
            user.id,
            bool(text),
        )
        await self._queue.put(
            InboundMessage(
                conversation_id=chat_id,
                sender_peer_id=str(user.id),
                body=text or "",
                content_kind=ContentKind.TEXT if text else ContentKind.OTHER,
                metadata={
                    "username": user.username or "",
                    "message_id": message.message_id,
                },
            )
        )
