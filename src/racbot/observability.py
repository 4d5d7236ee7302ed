"""Structured event sink used by the dispatch core."""

from __future__ import annotations

import json
from typing import Any, Protocol

from loguru import logger


class EventSink(Protocol):
    """Receives named events with structured fields."""

    def emit(self, event: str, /, *, level: str = "INFO", exc: BaseException | None = None, **fields: Any) -> None: ...


def render_fields(fields: dict[str, Any]) -> str:
    parts: list[str] = []
    for key, value in fields.items():
        if isinstance(value, str):
            rendered = value if value and " " not in value else json.dumps(value, ensure_ascii=False)
        else:
            rendered = repr(value)
        parts.append(f"{key}={rendered}")
    return " ".join(parts)


class LoguruEventSink:
    """Forward events to loguru as `event key=value ...` lines."""

    def emit(self, event: str, /, *, level: str = "INFO", exc: BaseException | None = None, **fields: Any) -> None:
        target = logger.opt(depth=1, exception=exc) if exc is not None else logger.opt(depth=1)
        target.bind(**fields).log(level.upper(), "{} {}", event, render_fields(fields))


DEFAULT_SINK: EventSink = LoguruEventSink()
