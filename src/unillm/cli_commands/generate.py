"""``unillm generate``: send one prompt to a live model."""

from __future__ import annotations

import asyncio
import sys

import click
from rich.markup import escape

from unillm.api.errors import UnillmError
from unillm.api.stream import ErrorEvent, ReasoningDeltaEvent, TextDeltaEvent
from unillm.cli_commands._output import console, print_response, print_warnings
from unillm.generate import generate_text, stream_text
from unillm.providers import LanguageModel, get_model


@click.command("generate")
@click.argument("provider", type=click.Choice(["anthropic", "openai"]))
@click.argument("model_id")
@click.argument("prompt")
@click.option("--system", "-s", default=None, help="System prompt.")
@click.option("--max-tokens", type=int, default=None, help="Maximum output tokens.")
@click.option("--temperature", type=float, default=None, help="Sampling temperature.")
@click.option("--stream", is_flag=True, help="Print text as it arrives.")
@click.option("--telemetry", is_flag=True, help="Export tracing spans to the console.")
def generate_cmd(
    provider: str,
    model_id: str,
    prompt: str,
    system: str | None,
    max_tokens: int | None,
    temperature: float | None,
    stream: bool,
    telemetry: bool,
) -> None:
    """Send PROMPT to MODEL_ID at PROVIDER and print the answer.

    The API key is read from the provider's environment variable.
    """
    if telemetry:
        from unillm.utils.telemetry import configure_telemetry

        configure_telemetry()

    model = get_model(provider, model_id)
    overrides: dict[str, object] = {}
    if max_tokens is not None:
        overrides["max_output_tokens"] = max_tokens
    if temperature is not None:
        overrides["temperature"] = temperature

    run = _stream if stream else _generate
    try:
        asyncio.run(run(model, prompt, system, overrides))
    except UnillmError as exc:
        console.print(f"[red]Generation error:[/red] {exc}")
        sys.exit(1)


async def _generate(
    model: LanguageModel, prompt: str, system: str | None, overrides: dict[str, object]
) -> None:
    try:
        response = await generate_text(prompt, model=model, system=system, **overrides)
    finally:
        await _close(model)
    print_warnings(response.warnings)
    console.print(response.text, markup=False, highlight=False)
    print_response(response)


async def _stream(
    model: LanguageModel, prompt: str, system: str | None, overrides: dict[str, object]
) -> None:
    try:
        result = await stream_text(prompt, model=model, system=system, **overrides)
        print_warnings(result.warnings)
        async with result.events as events:
            async for event in events:
                if isinstance(event, TextDeltaEvent):
                    console.print(event.text_delta, end="", markup=False, highlight=False)
                elif isinstance(event, ReasoningDeltaEvent):
                    console.print(f"[dim]{escape(event.text_delta)}[/dim]", end="")
                elif isinstance(event, ErrorEvent):
                    console.print()
                    raise UnillmError(event.message)
        console.print()
    finally:
        await _close(model)


async def _close(model: LanguageModel) -> None:
    aclose = getattr(model, "aclose", None)
    if aclose is not None:
        await aclose()
