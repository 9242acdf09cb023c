"""Assembly of a complete Anthropic Messages API request."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from unillm.api.errors import InvalidArgumentError
from unillm.api.messages import BaseMessage
from unillm.api.options import CallOptions
from unillm.api.response import CallWarning
from unillm.codec.anthropic.encode_prompt import encode_prompt
from unillm.codec.anthropic.encode_tools import encode_tools
from unillm.codec.anthropic.metadata import get_anthropic_metadata
from unillm.codec.base import EncodedRequest, unique

DEFAULT_MAX_TOKENS = 4096
BETA_HEADER = "anthropic-beta"


def encode_params(
    model_id: str,
    messages: Sequence[BaseMessage],
    options: CallOptions | None = None,
) -> EncodedRequest:
    """Encode prompt, options and tools into one request body.

    Betas from the prompt and the tools are merged, de-duplicated and also
    emitted as the ``anthropic-beta`` header.
    """
    options = options or CallOptions()
    prompt = encode_prompt(messages)
    body, warnings = encode_call_options(options)
    tools = encode_tools(options.tools, options.tool_choice)
    warnings.extend(tools.warnings)

    body["model"] = model_id
    if prompt.system:
        body["system"] = prompt.system
    body["messages"] = prompt.messages
    if tools.tools:
        body["tools"] = tools.tools
    if tools.tool_choice is not None:
        body["tool_choice"] = tools.tool_choice

    betas = unique([*prompt.betas, *tools.betas])
    headers = dict(options.headers)
    if betas:
        headers[BETA_HEADER] = ",".join(betas)

    return EncodedRequest(body=body, headers=headers, warnings=warnings, betas=betas)


def encode_call_options(options: CallOptions) -> tuple[dict[str, Any], list[CallWarning]]:
    """Map sampling settings, collecting warnings for the ones Anthropic lacks."""
    body: dict[str, Any] = {"max_tokens": options.max_output_tokens or DEFAULT_MAX_TOKENS}
    if options.temperature is not None:
        body["temperature"] = options.temperature
    if options.top_p is not None:
        body["top_p"] = options.top_p
    if options.top_k is not None:
        body["top_k"] = options.top_k
    if options.stop_sequences:
        body["stop_sequences"] = list(options.stop_sequences)

    warnings = _unsupported_warnings(options)
    warnings.extend(_encode_thinking(body, options))
    return body, warnings


def _unsupported_warnings(options: CallOptions) -> list[CallWarning]:
    warnings: list[CallWarning] = []
    if options.frequency_penalty is not None:
        warnings.append(CallWarning.unsupported_setting("frequency_penalty"))
    if options.presence_penalty is not None:
        warnings.append(CallWarning.unsupported_setting("presence_penalty"))
    if options.seed is not None:
        warnings.append(CallWarning.unsupported_setting("seed"))
    if options.response_format is not None and options.response_format.type != "text":
        warnings.append(
            CallWarning.unsupported_setting(
                "response_format", "JSON response format is not supported."
            )
        )
    return warnings


def _encode_thinking(body: dict[str, Any], options: CallOptions) -> list[CallWarning]:
    metadata = get_anthropic_metadata(options)
    thinking = metadata.thinking if metadata is not None else None
    if thinking is None or not thinking.enabled:
        return []

    if thinking.budget_tokens <= 0:
        raise InvalidArgumentError("provider_metadata.anthropic.thinking", "thinking requires a budget")

    body["thinking"] = {"type": "enabled", "budget_tokens": thinking.budget_tokens}
    body["max_tokens"] += thinking.budget_tokens

    warnings: list[CallWarning] = []
    for setting in ("temperature", "top_k", "top_p"):
        if body.pop(setting, None) is not None:
            warnings.append(
                CallWarning.unsupported_setting(
                    setting, f"{setting} is not supported when thinking is enabled"
                )
            )
    return warnings
