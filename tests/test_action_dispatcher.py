from __future__ import annotations

import httpx
import pytest

from racbot.actions import (
    ActionDispatcher,
    ActionInvocation,
    ActionRegistry,
    ActionResult,
    ActionStatus,
    ArgumentSpec,
    BooleanKind,
    NumberKind,
    StringKind,
)
from racbot.actions.builtin import build_http_client, register_builtin_actions
from racbot.config import Settings


def _builtin_dispatcher(handler, sink) -> tuple[ActionDispatcher, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    settings = Settings(api_key="k")
    client = build_http_client(settings, transport=httpx.MockTransport(_record))
    registry = ActionRegistry()
    register_builtin_actions(registry, settings, client)
    return ActionDispatcher(registry, sink=sink), seen


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, text='[{"prediction": "up"}]')


@pytest.mark.asyncio
async def test_unknown_action_fails_without_running_any_handler(sink) -> None:
    calls: list[str] = []
    registry = ActionRegistry()

    @registry.register(name="known", description="known")
    async def known() -> ActionResult:
        calls.append("known")
        return ActionResult.done("ok")

    result = await ActionDispatcher(registry, sink=sink).dispatch(ActionInvocation("missing", {}))

    assert result.status is ActionStatus.FAILED
    assert "unknown action" in result.payload
    assert "missing" in result.payload
    assert calls == []
    assert "action.dispatch.unknown" in sink.names()


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, 11])
async def test_prediction_amount_out_of_bounds_fails(sink, amount: int) -> None:
    dispatcher, seen = _builtin_dispatcher(_ok, sink)

    result = await dispatcher.dispatch(ActionInvocation("fetch_bitcoin_prediction", {"amount": amount}))

    assert result.status is ActionStatus.FAILED
    assert "amount" in result.payload
    assert "between 1 and 10" in result.payload
    assert seen == []


@pytest.mark.asyncio
async def test_prediction_in_bounds_returns_payload_verbatim(sink) -> None:
    dispatcher, seen = _builtin_dispatcher(_ok, sink)

    result = await dispatcher.dispatch(ActionInvocation("fetch_bitcoin_prediction", {"amount": 5}))

    assert result.status is ActionStatus.DONE
    assert result.payload == '[{"prediction": "up"}]'
    assert len(seen) == 1
    assert seen[0].url.path == "/echo"
    assert seen[0].url.params["limit"] == "5"
    assert sink.names()[-2:] == ["action.dispatch.start", "action.dispatch.end"]


@pytest.mark.asyncio
async def test_prediction_accepts_integral_float(sink) -> None:
    dispatcher, seen = _builtin_dispatcher(_ok, sink)

    result = await dispatcher.dispatch(ActionInvocation("fetch_bitcoin_prediction", {"amount": 3.0}))

    assert result.ok
    assert seen[0].url.params["limit"] == "3"


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["5", True, 2.5])
async def test_prediction_rejects_wrong_kind(sink, amount: object) -> None:
    dispatcher, seen = _builtin_dispatcher(_ok, sink)

    result = await dispatcher.dispatch(ActionInvocation("fetch_bitcoin_prediction", {"amount": amount}))

    assert result.status is ActionStatus.FAILED
    assert "invalid argument amount" in result.payload
    assert seen == []


@pytest.mark.asyncio
async def test_rug_pull_missing_address_names_the_argument(sink) -> None:
    dispatcher, seen = _builtin_dispatcher(_ok, sink)

    result = await dispatcher.dispatch(ActionInvocation("detect_rug_pull", {}))

    assert result.status is ActionStatus.FAILED
    assert result.payload == "missing required argument: token_address"
    assert seen == []


@pytest.mark.asyncio
async def test_rug_pull_non_success_status_is_described(sink) -> None:
    dispatcher, seen = _builtin_dispatcher(lambda request: httpx.Response(503), sink)

    result = await dispatcher.dispatch(ActionInvocation("detect_rug_pull", {"token_address": "0xabc"}))

    assert result.status is ActionStatus.FAILED
    assert "503" in result.payload
    assert "Service Unavailable" in result.payload
    assert seen[0].url.params["address"] == "0xabc"


@pytest.mark.asyncio
async def test_handler_exception_becomes_failed_result(sink) -> None:
    registry = ActionRegistry()

    @registry.register(name="explode", description="raises")
    async def explode() -> ActionResult:
        raise RuntimeError("kaboom")

    result = await ActionDispatcher(registry, sink=sink).dispatch(ActionInvocation("explode"))

    assert result.status is ActionStatus.FAILED
    assert result.payload == "execution failed: kaboom"
    assert "action.dispatch.error" in sink.names()


@pytest.mark.asyncio
async def test_handler_runs_once_with_declared_arguments_only(sink) -> None:
    calls: list[dict[str, object]] = []
    registry = ActionRegistry()

    @registry.register(
        name="echo",
        description="echo",
        args=[
            ArgumentSpec("text", StringKind()),
            ArgumentSpec("loud", BooleanKind(), required=False),
        ],
    )
    async def echo(**kwargs: object) -> ActionResult:
        calls.append(kwargs)
        return ActionResult.done({"echo": kwargs["text"]})

    result = await ActionDispatcher(registry, sink=sink).dispatch(
        ActionInvocation("echo", {"text": "hi", "extra": 1})
    )

    assert result.ok
    assert result.payload == '{"echo": "hi"}'
    assert calls == [{"text": "hi"}]


@pytest.mark.asyncio
async def test_optional_unbounded_number_passes_through(sink) -> None:
    registry = ActionRegistry()

    @registry.register(name="scale", description="scale", args=[ArgumentSpec("factor", NumberKind(), required=False)])
    async def scale(factor: float = 1.0) -> ActionResult:
        return ActionResult.done(str(factor * 2))

    dispatcher = ActionDispatcher(registry, sink=sink)

    assert (await dispatcher.dispatch(ActionInvocation("scale", {"factor": -1e9}))).payload == "-2000000000.0"
    assert (await dispatcher.dispatch(ActionInvocation("scale", {}))).payload == "2.0"


@pytest.mark.asyncio
async def test_huge_amount_fails_as_out_of_range(sink) -> None:
    dispatcher, seen = _builtin_dispatcher(_ok, sink)

    result = await dispatcher.dispatch(ActionInvocation("fetch_bitcoin_prediction", {"amount": 10**400}))

    assert result.status is ActionStatus.FAILED
    assert "between 1 and 10" in result.payload
    assert seen == []


@pytest.mark.asyncio
@pytest.mark.parametrize("factor", [float("nan"), float("inf"), float("-inf")])
async def test_non_finite_number_is_rejected(sink, factor: float) -> None:
    calls: list[float] = []
    registry = ActionRegistry()

    @registry.register(name="scale", description="scale", args=[ArgumentSpec("factor", NumberKind())])
    async def scale(factor: float) -> ActionResult:
        calls.append(factor)
        return ActionResult.done("scaled")

    result = await ActionDispatcher(registry, sink=sink).dispatch(ActionInvocation("scale", {"factor": factor}))

    assert result.status is ActionStatus.FAILED
    assert result.payload == "invalid argument factor: must be a finite number"
    assert calls == []


@pytest.mark.parametrize(
    ("kind", "value", "message"),
    [
        (NumberKind(minimum=1), 0, "must be between 1 and inf, got 0"),
        (NumberKind(maximum=5), 6, "must be between -inf and 5, got 6"),
        (NumberKind(minimum=0.5, maximum=1.5), 2.25, "must be between 0.5 and 1.5, got 2.25"),
    ],
)
def test_half_open_bounds_are_described(kind: NumberKind, value: float, message: str) -> None:
    assert kind.check(value) == message
