"""Shared CLI input loaders and output formatters."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from rich.console import Console
from rich.table import Table

from unillm.api.messages import BaseMessage, Message, MessageList
from unillm.api.options import CallOptions
from unillm.api.response import CallWarning, Response

console = Console()


class RequestFile(BaseModel):
    """A prompt file: ``{"messages": [...], "options": {...}}``."""

    messages: list[Message]
    options: CallOptions = Field(default_factory=CallOptions)


def load_request(path: str | Path) -> tuple[list[BaseMessage], CallOptions]:
    """Read a prompt file.  A bare JSON list is taken as the messages."""
    data: Any = json.loads(Path(path).read_text())
    if isinstance(data, list):
        return list(MessageList.validate_python(data)), CallOptions()
    request = RequestFile.model_validate(data)
    return list(request.messages), request.options


def load_json(path: str | Path) -> Any:
    return json.loads(Path(path).read_text())


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))


def print_warnings(warnings: list[CallWarning]) -> None:
    """Pretty-print call warnings as a table (nothing when empty)."""
    if not warnings:
        return
    table = Table(title="Warnings")
    table.add_column("Type", style="yellow")
    table.add_column("Subject", style="cyan")
    table.add_column("Details")

    for warning in warnings:
        subject = warning.setting or (_tool_name(warning) if warning.tool else "") or "-"
        table.add_row(warning.type, subject, _truncate(warning.details or warning.message or ""))

    console.print(table)


def print_response(response: Response) -> None:
    """Pretty-print a decoded response."""
    console.print(f"\n[bold]Finish reason:[/bold] {response.finish_reason.value}")
    usage = response.usage
    console.print(
        f"[bold]Usage:[/bold] {usage.input_tokens} in / {usage.output_tokens} out "
        f"/ {usage.total_tokens} total"
    )

    if not response.content:
        return

    table = Table(title="Content")
    table.add_column("#", justify="right")
    table.add_column("Type", style="cyan")
    table.add_column("Value")
    for i, block in enumerate(response.content):
        table.add_row(str(i), block.type, _truncate(_describe(block)))
    console.print(table)


def _tool_name(warning: CallWarning) -> str:
    tool = warning.tool
    if tool is None:
        return ""
    return getattr(tool, "id", None) or tool.name


def _describe(block: BaseModel) -> str:
    for field in ("text", "args", "url", "data"):
        value = getattr(block, field, None)
        if isinstance(value, str) and value:
            if field == "args":
                return f"{getattr(block, 'tool_name', '?')}({value})"
            return value
    return ""


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
