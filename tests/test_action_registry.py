from __future__ import annotations

import pytest

from racbot.actions import ActionRegistry, ActionResult, ActionSpec, ArgumentSpec, NumberKind, StringKind


async def _noop(**_: object) -> ActionResult:
    return ActionResult.done("")


def test_registry_rejects_duplicate_names() -> None:
    registry = ActionRegistry()
    registry.add(ActionSpec(name="a", description="first", handler=_noop))

    with pytest.raises(ValueError, match="Duplicate action name"):
        registry.add(ActionSpec(name="a", description="second", handler=_noop))


def test_registry_rejects_duplicate_argument_names() -> None:
    registry = ActionRegistry()

    with pytest.raises(ValueError, match="Duplicate argument"):
        registry.add(
            ActionSpec(
                name="a",
                description="a",
                handler=_noop,
                args=(ArgumentSpec("x", StringKind()), ArgumentSpec("x", NumberKind())),
            )
        )


def test_registry_lists_specs_sorted_with_compact_rows() -> None:
    registry = ActionRegistry()
    registry.register(name="zeta", description="last")(_noop)
    registry.register(
        name="alpha",
        description="first",
        args=[ArgumentSpec("n", NumberKind(minimum=0)), ArgumentSpec("tag", StringKind(), required=False)],
    )(_noop)

    assert len(registry) == 2
    assert registry.has("alpha")
    assert registry.get("missing") is None
    assert registry.names() == ["alpha", "zeta"]
    assert registry.compact_rows() == ["alpha(n: number, tag: string?): first", "zeta(): last"]


def test_registry_json_schema_unknown_raises() -> None:
    with pytest.raises(KeyError):
        ActionRegistry().json_schema("nope")


def test_action_result_done_serializes_non_strings() -> None:
    assert ActionResult.done({"a": 1}).payload == '{"a": 1}'
    assert ActionResult.done("raw").payload == "raw"
    assert not ActionResult.failed("x").ok
