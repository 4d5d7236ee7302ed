"""Per-peer sessions and their registry."""

from racbot.session.registry import SessionFactory, SessionRegistry, policy_session_factory
from racbot.session.session import Session, TurnOutcome, TurnState

__all__ = [
    "Session",
    "SessionFactory",
    "SessionRegistry",
    "TurnOutcome",
    "TurnState",
    "policy_session_factory",
]
