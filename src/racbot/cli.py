"""racbot command line interface."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from racbot.actions.builtin import build_http_client
from racbot.app import build_action_registry, build_app
from racbot.config import Settings, load_settings
from racbot.errors import ConfigurationError
from racbot.ingest import Disposition
from racbot.integrations.republic_policy import RepublicPolicyEngine
from racbot.logging_utils import configure_logging
from racbot.transport.base import InboundMessage
from racbot.transport.memory import InMemoryTransport

LOCAL_PEER_ID = "local-user"
LOCAL_CONVERSATION_ID = "console"
EXIT_COMMANDS = {"/quit", "/exit"}

app = typer.Typer(name="racbot", help="Echo Whisperer peer-to-peer chat agent", add_completion=False)
console = Console()


def _load(model: str | None) -> Settings:
    settings = load_settings(model=model)
    try:
        settings.require_api_key()
    except ConfigurationError as exc:
        console.print(f"[red]configuration error:[/red] {exc}")
        raise typer.Exit(1) from exc
    return settings


@app.command()
def run(
    model: str | None = typer.Option(None, "--model", help="Override the policy model (provider:model)"),
) -> None:
    """Serve peers over Telegram until interrupted."""
    from racbot.transport.telegram import TelegramConfig, TelegramTransport

    settings = _load(model)
    configure_logging(level=settings.log_level)
    try:
        token = settings.require_telegram_token()
    except ConfigurationError as exc:
        console.print(f"[red]configuration error:[/red] {exc}")
        raise typer.Exit(1) from exc

    transport = TelegramTransport(TelegramConfig(token=token, allow_from=settings.allow_from))

    async def _serve() -> None:
        racbot_app = build_app(settings, transport, RepublicPolicyEngine.from_settings(settings))
        try:
            await racbot_app.run()
        finally:
            await transport.stop()

    try:
        asyncio.run(_serve())
    except KeyboardInterrupt:
        console.print("stopped")


@app.command()
def chat(
    model: str | None = typer.Option(None, "--model", help="Override the policy model (provider:model)"),
) -> None:
    """Talk to the agent from the terminal."""
    settings = _load(model)
    configure_logging(profile="chat", level=settings.log_level)

    async def _chat() -> None:
        transport = InMemoryTransport()
        conversation = transport.open_conversation(LOCAL_CONVERSATION_ID)
        racbot_app = build_app(settings, transport, RepublicPolicyEngine.from_settings(settings))
        try:
            while True:
                line = (await asyncio.to_thread(console.input, "[bold]you>[/bold] ")).strip()
                if line in EXIT_COMMANDS:
                    break
                if not line:
                    continue
                seen = len(conversation.sent)
                disposition = await racbot_app.ingest.handle(
                    InboundMessage(conversation_id=LOCAL_CONVERSATION_ID, sender_peer_id=LOCAL_PEER_ID, body=line)
                )
                for reply in conversation.sent[seen:]:
                    console.print(f"[bold cyan]echo>[/bold cyan] {reply}")
                ended = disposition in (Disposition.REPLIED, Disposition.SILENT) and LOCAL_PEER_ID not in racbot_app.sessions
                if ended:
                    console.print("[dim](conversation ended)[/dim]")
        finally:
            await racbot_app.http_client.aclose()

    try:
        asyncio.run(_chat())
    except (KeyboardInterrupt, EOFError):
        console.print()


@app.command()
def actions() -> None:
    """List the declared action space."""
    settings = load_settings()

    async def _rows() -> list[str]:
        async with build_http_client(settings) as client:
            return build_action_registry(settings, client).compact_rows()

    for row in asyncio.run(_rows()):
        typer.echo(row)
