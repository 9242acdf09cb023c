"""``unillm encode`` / ``decode`` / ``normalize``: run the codecs offline."""

from __future__ import annotations

import sys

import click
from pydantic import ValidationError

from unillm.api.errors import UnillmError
from unillm.api.messages import MessageList
from unillm.cli_commands._output import (
    console,
    load_json,
    load_request,
    print_json,
    print_response,
    print_warnings,
)
from unillm.codec import get_codec, merge_messages, providers

_PROVIDER = click.Choice(providers())


@click.command("encode")
@click.argument("provider", type=_PROVIDER)
@click.argument("request_file", type=click.Path(exists=True))
@click.option("--model", "-m", "model_id", required=True, help="Model id to encode for.")
@click.option("--stream", is_flag=True, help="Encode a streaming request.")
@click.option("--json", "as_json", is_flag=True, help="Output the request as JSON only.")
def encode_cmd(provider: str, request_file: str, model_id: str, stream: bool, as_json: bool) -> None:
    """Encode REQUEST_FILE into PROVIDER's wire format.

    REQUEST_FILE holds ``{"messages": [...], "options": {...}}`` or just a
    list of messages.
    """
    codec = get_codec(provider)
    try:
        messages, options = load_request(request_file)
        if stream:
            request = codec.encode_stream(model_id, messages, options)
        else:
            request = codec.encode(model_id, messages, options)
    except (OSError, ValueError, UnillmError) as exc:
        console.print(f"[red]Encode error:[/red] {exc}")
        sys.exit(1)

    if as_json:
        print_json(request.model_dump(mode="json"))
        return

    console.print(f"\n[bold]{provider} request[/bold]")
    if request.headers:
        console.print(f"  Headers: {', '.join(sorted(request.headers))}")
    if request.betas:
        console.print(f"  Betas: {', '.join(request.betas)}")
    print_json(request.body)
    print_warnings(request.warnings)


@click.command("decode")
@click.argument("provider", type=_PROVIDER)
@click.argument("response_file", type=click.Path(exists=True))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def decode_cmd(provider: str, response_file: str, as_json: bool) -> None:
    """Decode a raw PROVIDER response in RESPONSE_FILE."""
    codec = get_codec(provider)
    try:
        response = codec.decode(load_json(response_file))
    except (OSError, ValueError, UnillmError) as exc:
        console.print(f"[red]Decode error:[/red] {exc}")
        sys.exit(1)

    if as_json:
        console.print_json(response.model_dump_json(exclude_none=True))
    else:
        print_response(response)


@click.command("normalize")
@click.argument("messages_file", type=click.Path(exists=True))
def normalize_cmd(messages_file: str) -> None:
    """Merge consecutive same-role messages in MESSAGES_FILE and print the result."""
    try:
        messages, _ = load_request(messages_file)
        merged = merge_messages(messages)
    except (OSError, ValueError, ValidationError, UnillmError) as exc:
        console.print(f"[red]Normalize error:[/red] {exc}")
        sys.exit(1)

    console.print_json(MessageList.dump_json(merged, exclude_none=True).decode())
