"""Validate and execute action invocations."""

from __future__ import annotations

import time
from typing import Any

from racbot.actions.registry import ActionRegistry
from racbot.actions.types import ActionInvocation, ActionResult, ActionSpec
from racbot.observability import DEFAULT_SINK, EventSink


class ActionDispatcher:
    """Run one invocation against the registry and always return an `ActionResult`."""

    def __init__(self, registry: ActionRegistry, sink: EventSink | None = None) -> None:
        self._registry = registry
        self._sink = sink or DEFAULT_SINK

    @property
    def registry(self) -> ActionRegistry:
        return self._registry

    async def dispatch(self, invocation: ActionInvocation) -> ActionResult:
        spec = self._registry.get(invocation.action_name)
        if spec is None:
            result = ActionResult.failed(f"unknown action: {invocation.action_name}")
            self._sink.emit("action.dispatch.unknown", level="WARNING", name=invocation.action_name)
            return result

        kwargs, error = self._validate(spec, invocation.arguments)
        if error is not None:
            self._sink.emit("action.dispatch.invalid", level="WARNING", name=spec.name, error=error)
            return ActionResult.failed(error)

        self._sink.emit("action.dispatch.start", name=spec.name, args=kwargs)
        start = time.monotonic()
        try:
            result = await spec.handler(**kwargs)
            if not isinstance(result, ActionResult):
                result = ActionResult.done(result)
        except Exception as exc:
            self._sink.emit("action.dispatch.error", level="ERROR", exc=exc, name=spec.name)
            result = ActionResult.failed(f"execution failed: {exc!s}")
        duration_ms = (time.monotonic() - start) * 1000
        self._sink.emit(
            "action.dispatch.end",
            name=spec.name,
            status=str(result.status),
            duration_ms=round(duration_ms, 3),
        )
        return result

    def _validate(self, spec: ActionSpec, arguments: Any) -> tuple[dict[str, Any], str | None]:
        if not isinstance(arguments, dict):
            try:
                arguments = dict(arguments or {})
            except (TypeError, ValueError):
                return {}, f"invalid arguments for {spec.name}: expected an object"

        kwargs: dict[str, Any] = {}
        for arg in spec.args:
            if arg.name not in arguments or arguments[arg.name] is None:
                if arg.required:
                    return {}, f"missing required argument: {arg.name}"
                continue
            value = arguments[arg.name]
            problem = arg.kind.check(value)
            if problem is not None:
                return {}, f"invalid argument {arg.name}: {problem}"
            kwargs[arg.name] = arg.kind.normalize(value)

        declared = {arg.name for arg in spec.args}
        undeclared = sorted(key for key in arguments if key not in declared)
        if undeclared:
            self._sink.emit("action.dispatch.extra_args", level="DEBUG", name=spec.name, dropped=undeclared)
        return kwargs, None
