"""Action declarations, invocations and results."""

from __future__ import annotations

import json
import math
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


@dataclass(frozen=True)
class NumberKind:
    """Numeric argument, optionally bounded and integral."""

    minimum: float | None = None
    maximum: float | None = None
    integer: bool = False

    type_name = "number"

    def check(self, value: Any) -> str | None:
        if isinstance(value, bool) or not isinstance(value, int | float):
            return "must be a number"
        if isinstance(value, float) and not math.isfinite(value):
            return "must be a finite number"
        if (self.minimum is not None and value < self.minimum) or (self.maximum is not None and value > self.maximum):
            low = _fmt(self.minimum, "-inf")
            high = _fmt(self.maximum, "inf")
            return f"must be between {low} and {high}, got {_fmt(value)}"
        if self.integer and isinstance(value, float) and not value.is_integer():
            return "must be an integer"
        return None

    def normalize(self, value: Any) -> Any:
        return int(value) if self.integer else value

    def json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "integer" if self.integer else "number"}
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        return schema


@dataclass(frozen=True)
class StringKind:
    """Free-form string argument."""

    type_name = "string"

    def check(self, value: Any) -> str | None:
        if not isinstance(value, str):
            return "must be a string"
        return None

    def normalize(self, value: Any) -> Any:
        return value

    def json_schema(self) -> dict[str, Any]:
        return {"type": "string"}


@dataclass(frozen=True)
class BooleanKind:
    """True/false argument."""

    type_name = "boolean"

    def check(self, value: Any) -> str | None:
        if not isinstance(value, bool):
            return "must be a boolean"
        return None

    def normalize(self, value: Any) -> Any:
        return value

    def json_schema(self) -> dict[str, Any]:
        return {"type": "boolean"}


type ArgumentKind = NumberKind | StringKind | BooleanKind


def _fmt(value: float | None, missing: str = "") -> str:
    if value is None:
        return missing
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class ArgumentSpec:
    """One declared argument of an action."""

    name: str
    kind: ArgumentKind
    description: str = ""
    required: bool = True


class ActionStatus(StrEnum):
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ActionResult:
    """Uniform outcome of one action dispatch."""

    status: ActionStatus
    payload: str

    @property
    def ok(self) -> bool:
        return self.status is ActionStatus.DONE

    @classmethod
    def done(cls, payload: str | Any) -> ActionResult:
        if not isinstance(payload, str):
            payload = json.dumps(payload, ensure_ascii=False)
        return cls(ActionStatus.DONE, payload)

    @classmethod
    def failed(cls, description: str) -> ActionResult:
        return cls(ActionStatus.FAILED, description)


ActionHandler = Callable[..., Awaitable[ActionResult]]


@dataclass(frozen=True)
class ActionSpec:
    """Declared action: name, argument schema and handler."""

    name: str
    description: str
    handler: ActionHandler
    args: tuple[ArgumentSpec, ...] = ()

    def json_schema(self) -> dict[str, Any]:
        properties: dict[str, Any] = {}
        required: list[str] = []
        for arg in self.args:
            prop = arg.kind.json_schema()
            if arg.description:
                prop["description"] = arg.description
            properties[arg.name] = prop
            if arg.required:
                required.append(arg.name)
        return {"type": "object", "properties": properties, "required": required}


@dataclass(frozen=True)
class ActionInvocation:
    """Request from the policy to run one action."""

    action_name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)
