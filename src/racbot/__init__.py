"""racbot - Echo Whisperer chat agent."""

from racbot.actions import ActionDispatcher, ActionInvocation, ActionRegistry, ActionResult
from racbot.ingest import IngestLoop
from racbot.session import Session, SessionRegistry

__version__ = "0.1.0"

__all__ = [
    "ActionDispatcher",
    "ActionInvocation",
    "ActionRegistry",
    "ActionResult",
    "IngestLoop",
    "Session",
    "SessionRegistry",
]
