"""Registry of callable actions."""

from __future__ import annotations

import builtins
from collections.abc import Callable, Iterable
from typing import Any

from racbot.actions.types import ActionHandler, ActionSpec, ArgumentSpec


class ActionRegistry:
    """Declared action space, keyed by unique action name."""

    def __init__(self) -> None:
        self._actions: dict[str, ActionSpec] = {}

    def add(self, spec: ActionSpec) -> ActionSpec:
        if spec.name in self._actions:
            raise ValueError(f"Duplicate action name: {spec.name}")
        seen: set[str] = set()
        for arg in spec.args:
            if arg.name in seen:
                raise ValueError(f"Duplicate argument {arg.name!r} in action {spec.name}")
            seen.add(arg.name)
        self._actions[spec.name] = spec
        return spec

    def register(
        self,
        *,
        name: str,
        description: str,
        args: Iterable[ArgumentSpec] = (),
    ) -> Callable[[ActionHandler], ActionHandler]:
        """Decorator form of `add`."""

        def decorator(handler: ActionHandler) -> ActionHandler:
            self.add(ActionSpec(name=name, description=description, handler=handler, args=tuple(args)))
            return handler

        return decorator

    def has(self, name: str) -> bool:
        return name in self._actions

    def get(self, name: str) -> ActionSpec | None:
        return self._actions.get(name)

    def specs(self) -> builtins.list[ActionSpec]:
        return sorted(self._actions.values(), key=lambda item: item.name)

    def names(self) -> builtins.list[str]:
        return [spec.name for spec in self.specs()]

    def __len__(self) -> int:
        return len(self._actions)

    def json_schema(self, name: str) -> dict[str, Any]:
        spec = self.get(name)
        if spec is None:
            raise KeyError(name)
        return spec.json_schema()

    def compact_rows(self) -> builtins.list[str]:
        rows: builtins.list[str] = []
        for spec in self.specs():
            params = ", ".join(
                f"{arg.name}: {arg.kind.type_name}{'' if arg.required else '?'}" for arg in spec.args
            )
            rows.append(f"{spec.name}({params}): {spec.description}")
        return rows
