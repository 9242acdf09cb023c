"""Anthropic Messages API response -> unified :class:`Response`."""

from __future__ import annotations

import json
import logging
from typing import Any

from unillm.api.content import (
    ContentBlock,
    ReasoningBlock,
    RedactedReasoningBlock,
    TextBlock,
    ToolCallBlock,
)
from unillm.api.errors import InvalidResponseDataError
from unillm.api.metadata import ProviderMetadata
from unillm.api.response import FinishReason, Response, ResponseInfo, Usage
from unillm.codec.anthropic.metadata import PROVIDER, AnthropicMetadata, AnthropicUsage

logger = logging.getLogger(__name__)

_FINISH_REASONS = {
    "end_turn": FinishReason.STOP,
    "stop_sequence": FinishReason.STOP,
    "pause_turn": FinishReason.STOP,
    "tool_use": FinishReason.TOOL_CALLS,
    "max_tokens": FinishReason.LENGTH,
    "refusal": FinishReason.CONTENT_FILTER,
}


def decode_response(raw: dict[str, Any] | None) -> Response:
    """Decode a complete message object.

    Raises:
        InvalidResponseDataError: If *raw* is ``None``.
    """
    if raw is None:
        raise InvalidResponseDataError(raw, "nil message provided")

    usage = decode_anthropic_usage(raw.get("usage"))
    return Response(
        content=decode_content(raw.get("content") or []),
        finish_reason=decode_finish_reason(raw.get("stop_reason")),
        usage=decode_usage(usage),
        provider_metadata=usage_metadata(usage),
        response_info=ResponseInfo(id=raw.get("id"), model_id=raw.get("model")),
    )


def decode_finish_reason(stop_reason: str | None) -> FinishReason:
    return _FINISH_REASONS.get(stop_reason or "", FinishReason.UNKNOWN)


def decode_anthropic_usage(raw: dict[str, Any] | None) -> AnthropicUsage:
    raw = raw or {}
    return AnthropicUsage(
        input_tokens=raw.get("input_tokens") or 0,
        output_tokens=raw.get("output_tokens") or 0,
        cache_creation_input_tokens=raw.get("cache_creation_input_tokens") or 0,
        cache_read_input_tokens=raw.get("cache_read_input_tokens") or 0,
    )


def decode_usage(usage: AnthropicUsage) -> Usage:
    return Usage(
        input_tokens=usage.input_tokens,
        output_tokens=usage.output_tokens,
        total_tokens=usage.input_tokens + usage.output_tokens,
        cached_input_tokens=usage.cache_read_input_tokens,
    )


def usage_metadata(usage: AnthropicUsage) -> ProviderMetadata:
    return ProviderMetadata({PROVIDER: AnthropicMetadata(usage=usage)})


def decode_content(blocks: list[dict[str, Any]]) -> list[ContentBlock]:
    """Decode content blocks in order, dropping empty text and thinking."""
    content: list[ContentBlock] = []
    for block in blocks:
        decoded = decode_block(block)
        if decoded is not None:
            content.append(decoded)
    return content


def decode_block(block: dict[str, Any]) -> ContentBlock | None:
    block_type = block.get("type")
    if block_type == "text":
        text = block.get("text") or ""
        return TextBlock(text=text) if text else None
    if block_type == "tool_use":
        tool_input = block.get("input")
        return ToolCallBlock(
            tool_call_id=block.get("id", ""),
            tool_name=block.get("name", ""),
            args=json.dumps(tool_input) if tool_input is not None else "{}",
        )
    if block_type == "thinking":
        thinking = block.get("thinking") or ""
        if not thinking:
            return None
        return ReasoningBlock(text=thinking, signature=block.get("signature") or None)
    if block_type == "redacted_thinking":
        data = block.get("data") or ""
        return RedactedReasoningBlock(data=data) if data else None

    logger.debug("Skipping unsupported Anthropic content block type %r", block_type)
    return None
