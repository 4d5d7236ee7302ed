"""Racfathers actions backed by the prediction and risk-analysis services."""

from __future__ import annotations

import json

import httpx
from loguru import logger

from racbot.actions.registry import ActionRegistry
from racbot.actions.types import ActionResult, ArgumentSpec, NumberKind, StringKind
from racbot.config import Settings

USER_AGENT = "racbot/0.1"

RACFATHERS_INFO = {
    "name": "Racfathers",
    "description": "A decentralized prediction platform for cryptocurrency markets",
    "features": [
        "Bitcoin price predictions",
        "Rugpull Analysis",
        "Community-driven insights",
        "Decentralized architecture",
        "Real-time market analysis",
    ],
    "website": "https://racfathers.io",
    "social": {
        "twitter": "@racfathers",
        "discord": "discord.gg/racfathers",
    },
}


def build_http_client(settings: Settings, **kwargs: object) -> httpx.AsyncClient:
    """Shared client for action handlers, bounded by `http_timeout_seconds`."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        headers={"User-Agent": USER_AGENT},
        **kwargs,  # type: ignore[arg-type]
    )


async def _get_verbatim(client: httpx.AsyncClient, url: str, params: dict[str, str], failure: str) -> ActionResult:
    try:
        response = await client.get(url, params=params)
    except httpx.TimeoutException:
        return ActionResult.failed(f"{failure}: request timed out")
    except httpx.HTTPError as exc:
        return ActionResult.failed(f"{failure}: {exc!s}")

    if not response.is_success:
        return ActionResult.failed(f"{failure}: {response.status_code} {response.reason_phrase}".rstrip())

    body = response.text
    try:
        json.loads(body)
    except json.JSONDecodeError as exc:
        return ActionResult.failed(f"{failure}: invalid json response: {exc!s}")
    return ActionResult.done(body)


def register_builtin_actions(registry: ActionRegistry, settings: Settings, client: httpx.AsyncClient) -> None:
    """Register the Racfathers action space on `registry`."""

    prediction_url = f"{settings.prediction_api_base.rstrip('/')}/echo"
    rug_pull_url = settings.rug_pull_api_url

    @registry.register(
        name="fetch_bitcoin_prediction",
        description="Fetches the latest bitcoin predictions",
        args=[
            ArgumentSpec(
                "amount",
                NumberKind(minimum=1, maximum=10, integer=True),
                description="Number of predictions to fetch (1-10)",
            )
        ],
    )
    async def fetch_bitcoin_prediction(*, amount: int) -> ActionResult:
        result = await _get_verbatim(client, prediction_url, {"limit": str(amount)}, "Failed to fetch echoes")
        if result.ok:
            logger.info("action.echoes.fetched amount={} bytes={}", amount, len(result.payload))
        return result

    @registry.register(
        name="get_racfathers_info",
        description="Provides information about the Racfathers project",
    )
    async def get_racfathers_info() -> ActionResult:
        return ActionResult.done(RACFATHERS_INFO)

    @registry.register(
        name="detect_rug_pull",
        description="Analyzes a token contract for rug pull risk",
        args=[
            ArgumentSpec(
                "token_address",
                StringKind(),
                description="Contract address of the token to analyze",
            )
        ],
    )
    async def detect_rug_pull(*, token_address: str) -> ActionResult:
        address = token_address.strip()
        if not address:
            return ActionResult.failed("Rug pull analysis failed: token_address is empty")
        return await _get_verbatim(client, rug_pull_url, {"address": address}, "Rug pull analysis failed")
