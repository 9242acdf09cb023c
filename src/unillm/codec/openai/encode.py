"""Assembly of a complete OpenAI Responses API request."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from unillm.api.messages import BaseMessage
from unillm.api.options import CallOptions, ResponseFormat
from unillm.api.response import CallWarning
from unillm.codec.base import EncodedRequest
from unillm.codec.openai.encode_prompt import ModelConfig, encode_prompt
from unillm.codec.openai.encode_tools import encode_tools
from unillm.codec.openai.jsonschema import encode_schema
from unillm.codec.openai.metadata import OpenAIMetadata, get_openai_metadata

DEFAULT_SCHEMA_NAME = "response"


def encode(
    model_id: str,
    messages: Sequence[BaseMessage],
    options: CallOptions | None = None,
) -> EncodedRequest:
    options = options or CallOptions()
    config = ModelConfig.for_model(model_id)
    metadata = get_openai_metadata(options) or OpenAIMetadata()
    strict = metadata.strict_schemas if metadata.strict_schemas is not None else True

    body: dict[str, Any] = {"model": model_id}
    warnings = unsupported_warnings(options)
    apply_sampling(body, options)

    if options.response_format is not None and options.response_format.type == "json":
        body["text"] = {"format": encode_response_format(options.response_format, strict=strict)}

    apply_metadata(body, metadata)
    warnings.extend(apply_reasoning(body, options, config, metadata))

    tools = encode_tools(options.tools, options.tool_choice, strict=strict)
    if tools.tools:
        body["tools"] = tools.tools
    if tools.tool_choice is not None:
        body["tool_choice"] = tools.tool_choice
    warnings.extend(tools.warnings)

    prompt = encode_prompt(messages, config)
    body["input"] = prompt.input
    warnings.extend(prompt.warnings)

    return EncodedRequest(body=body, headers=dict(options.headers), warnings=warnings)


def unsupported_warnings(options: CallOptions) -> list[CallWarning]:
    warnings: list[CallWarning] = []
    if options.frequency_penalty is not None:
        warnings.append(CallWarning.unsupported_setting("frequency_penalty"))
    if options.presence_penalty is not None:
        warnings.append(CallWarning.unsupported_setting("presence_penalty"))
    if options.top_k is not None:
        warnings.append(CallWarning.unsupported_setting("top_k"))
    if options.seed is not None:
        warnings.append(CallWarning.unsupported_setting("seed"))
    if options.stop_sequences:
        warnings.append(CallWarning.unsupported_setting("stop_sequences"))
    return warnings


def apply_sampling(body: dict[str, Any], options: CallOptions) -> None:
    if options.temperature is not None:
        body["temperature"] = options.temperature
    if options.top_p is not None:
        body["top_p"] = options.top_p
    if options.max_output_tokens:
        body["max_output_tokens"] = options.max_output_tokens


def encode_response_format(response_format: ResponseFormat, *, strict: bool = True) -> dict[str, Any]:
    """``json`` with a schema becomes ``json_schema``, without one ``json_object``."""
    if response_format.json_schema is None:
        return {"type": "json_object"}

    fmt: dict[str, Any] = {
        "type": "json_schema",
        "name": response_format.name or DEFAULT_SCHEMA_NAME,
        "schema": encode_schema(response_format.json_schema, argument="response_format.json_schema"),
        "strict": strict,
    }
    if response_format.description:
        fmt["description"] = response_format.description
    return fmt


def apply_metadata(body: dict[str, Any], metadata: OpenAIMetadata) -> None:
    if metadata.parallel_tool_calls is not None:
        body["parallel_tool_calls"] = metadata.parallel_tool_calls
    if metadata.previous_response_id:
        body["previous_response_id"] = metadata.previous_response_id
    if metadata.store is not None:
        body["store"] = metadata.store
    if metadata.user:
        body["user"] = metadata.user
    if metadata.instructions:
        body["instructions"] = metadata.instructions


def apply_reasoning(
    body: dict[str, Any],
    options: CallOptions,
    config: ModelConfig,
    metadata: OpenAIMetadata,
) -> list[CallWarning]:
    """Set reasoning options and strip the samplers reasoning models reject."""
    if not config.is_reasoning_model:
        return []

    reasoning: dict[str, Any] = {}
    if metadata.reasoning_effort:
        reasoning["effort"] = metadata.reasoning_effort
    if metadata.reasoning_summary:
        reasoning["summary"] = metadata.reasoning_summary
    if reasoning:
        body["reasoning"] = reasoning

    warnings: list[CallWarning] = []
    if options.temperature is not None:
        body.pop("temperature", None)
        warnings.append(
            CallWarning.unsupported_setting(
                "temperature", "temperature is not supported for reasoning models"
            )
        )
    if options.top_p is not None:
        body.pop("top_p", None)
        warnings.append(
            CallWarning.unsupported_setting("top_p", "top_p is not supported for reasoning models")
        )
    return warnings
