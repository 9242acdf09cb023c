"""High-level helpers: one call, any model."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from unillm.api.messages import BaseMessage, SystemMessage, UserMessage
from unillm.api.options import CallOptions
from unillm.api.response import Response
from unillm.api.stream import StreamResponse
from unillm.providers.base import LanguageModel


def build_messages(
    prompt: str | Sequence[BaseMessage], *, system: str | None = None
) -> list[BaseMessage]:
    """A string prompt becomes one user message; ``system`` is prepended."""
    if isinstance(prompt, str):
        messages: list[BaseMessage] = [UserMessage.of_text(prompt)]
    else:
        messages = list(prompt)
    if system is not None:
        messages.insert(0, SystemMessage.of(system))
    return messages


def build_options(options: CallOptions | None, overrides: dict[str, Any]) -> CallOptions:
    """Apply keyword overrides on top of *options* (validated as :class:`CallOptions`)."""
    if not overrides:
        return options or CallOptions()
    base = options.model_dump() if options is not None else {}
    return CallOptions.model_validate({**base, **overrides})


async def generate_text(
    prompt: str | Sequence[BaseMessage],
    *,
    model: LanguageModel,
    system: str | None = None,
    options: CallOptions | None = None,
    **overrides: Any,
) -> Response:
    """Run one non-streaming call.

    Usage::

        response = await generate_text("Hi", model=OpenAIModel("gpt-4o"), temperature=0)
        print(response.text)
    """
    messages = build_messages(prompt, system=system)
    return await model.generate(messages, build_options(options, overrides))


async def stream_text(
    prompt: str | Sequence[BaseMessage],
    *,
    model: LanguageModel,
    system: str | None = None,
    options: CallOptions | None = None,
    **overrides: Any,
) -> StreamResponse:
    """Open a streaming call; iterate the result for events."""
    messages = build_messages(prompt, system=system)
    return await model.stream(messages, build_options(options, overrides))
