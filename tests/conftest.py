from __future__ import annotations

from typing import Any

import pytest


class RecordingSink:
    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def emit(self, event: str, /, *, level: str = "INFO", exc: BaseException | None = None, **fields: Any) -> None:
        self.events.append((event, level, fields))

    def names(self) -> list[str]:
        return [name for name, _, _ in self.events]


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    for key in ("RACBOT_API_KEY", "RACBOT_TELEGRAM_TOKEN", "RACBOT_MODEL", "RACBOT_PERSONA"):
        monkeypatch.delenv(key, raising=False)
