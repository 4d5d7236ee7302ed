"""Message transports."""

from racbot.transport.base import ContentKind, Conversation, InboundMessage, Transport
from racbot.transport.memory import InMemoryTransport, MemoryConversation

__all__ = [
    "ContentKind",
    "Conversation",
    "InMemoryTransport",
    "InboundMessage",
    "MemoryConversation",
    "Transport",
]
