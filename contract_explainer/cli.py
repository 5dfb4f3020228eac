"""Click CLI for the explainer service."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any

import click

from .service import ContractExplainerService
from .settings import get_settings


def _build_service() -> ContractExplainerService:
    return ContractExplainerService()


def _echo_reply(reply: str, output_json: bool) -> None:
    if output_json:
        click.echo(json.dumps({"response": reply}, indent=2))
    elif reply:
        click.echo(reply)
    else:
        click.echo("⚠️  The model returned an empty response.")


def _run(coro: Coroutine[Any, Any, str]) -> str:
    return asyncio.run(coro)


def _read_code(code: str | None, file: Path | None) -> str:
    if file is not None:
        return file.read_text(encoding="utf-8")
    if code is None:
        raise click.UsageError("Provide contract code with --code or --file")
    return code


json_option = click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output raw JSON instead of formatted text",
)
code_options = [
    click.option("--code", default=None, help="Contract source code"),
    click.option(
        "--file",
        "file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help="Read contract source code from a file",
    ),
]


def _with_code_options(func: Callable[..., Any]) -> Callable[..., Any]:
    for option in reversed(code_options):
        func = option(func)
    return func


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL")
def cli(log_level: str | None) -> None:
    """Smart Contract Explainer CLI."""
    logging.basicConfig(level=(log_level or get_settings().log_level).upper())


@cli.command("explain")
@_with_code_options
@click.option("--question", default=None, help="Question about the contract")
@json_option
def explain_cmd(
    code: str | None, file: Path | None, question: str | None, output_json: bool
) -> None:
    """Explain a smart contract."""
    source = _read_code(code, file)
    service = _build_service()
    reply = _run(service.explain_smart_contract(source, question))
    _echo_reply(reply, output_json)


@cli.command("security")
@_with_code_options
@json_option
def security_cmd(code: str | None, file: Path | None, output_json: bool) -> None:
    """Run a security analysis of a smart contract."""
    source = _read_code(code, file)
    service = _build_service()
    reply = _run(service.analyze_contract_security(source))
    _echo_reply(reply, output_json)


@cli.command("ask")
@click.argument("question")
@json_option
def ask_cmd(question: str, output_json: bool) -> None:
    """Ask a free-form smart contract question."""
    service = _build_service()
    _echo_reply(_run(service.ask_question(question)), output_json)


@cli.command("concept")
@click.argument("concept")
@json_option
def concept_cmd(concept: str, output_json: bool) -> None:
    """Explain a blockchain concept."""
    service = _build_service()
    _echo_reply(_run(service.explain_concept(concept)), output_json)


@cli.command("chat")
def chat_cmd() -> None:
    """Run an interactive multi-turn chat. Type 'quit' to exit."""
    service = _build_service()
    click.echo("Smart contract chat started. Type 'quit' to exit.")

    async def _loop() -> None:
        while True:
            message = click.prompt("You", prompt_suffix="> ").strip()
            if message.lower() in {"quit", "exit"}:
                break
            reply = await service.send_chat_message(message)
            click.echo(f"\nAssistant> {reply}\n")

    try:
        asyncio.run(_loop())
    except (EOFError, click.Abort):
        pass
    click.echo(f"Chat ended after {service.chat_turn_count()} turn(s).")


@cli.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, type=int, show_default=True)
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve_cmd(host: str, port: int, reload: bool) -> None:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "contract_explainer.api:app", host=host, port=port, reload=reload
    )


if __name__ == "__main__":
    cli()
