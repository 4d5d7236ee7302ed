"""Action space: declarations, registry and dispatch."""

from racbot.actions.dispatcher import ActionDispatcher
from racbot.actions.registry import ActionRegistry
from racbot.actions.types import (
    ActionInvocation,
    ActionResult,
    ActionSpec,
    ActionStatus,
    ArgumentKind,
    ArgumentSpec,
    BooleanKind,
    NumberKind,
    StringKind,
)

__all__ = [
    "ActionDispatcher",
    "ActionInvocation",
    "ActionRegistry",
    "ActionResult",
    "ActionSpec",
    "ActionStatus",
    "ArgumentKind",
    "ArgumentSpec",
    "BooleanKind",
    "NumberKind",
    "StringKind",
]
