"""Anthropic server-sent events -> unified stream events.

Event order on the wire is ``message_start``, then for every content block
``content_block_start``, any number of ``content_block_delta`` and
``content_block_stop``, then ``message_delta`` and ``message_stop``.
"""

from __future__ import annotations

import logging
from typing import Any

from unillm.api.content import ToolCallBlock
from unillm.api.errors import InvalidResponseDataError
from unillm.api.stream import (
    ErrorEvent,
    FinishEvent,
    ReasoningDeltaEvent,
    ReasoningSignatureEvent,
    RedactedReasoningEvent,
    ResponseMetadataEvent,
    StreamEvent,
    TextDeltaEvent,
    ToolCallDeltaEvent,
    ToolCallEvent,
)
from unillm.codec.anthropic.decode import (
    decode_anthropic_usage,
    decode_finish_reason,
    decode_usage,
    usage_metadata,
)
from unillm.codec.anthropic.metadata import AnthropicUsage

logger = logging.getLogger(__name__)


class _ToolUse:
    def __init__(self, tool_call_id: str, tool_name: str) -> None:
        self.tool_call_id = tool_call_id
        self.tool_name = tool_name
        self.chunks: list[str] = []


class AnthropicStreamDecoder:
    """Stateful decoder for one Anthropic stream."""

    def __init__(self) -> None:
        self._usage = AnthropicUsage()
        self._stop_reason: str | None = None
        self._tool_uses: dict[int, _ToolUse] = {}

    def decode(self, chunk: dict[str, Any]) -> list[StreamEvent]:
        event_type = chunk.get("type")
        if event_type == "message_start":
            return self._message_start(chunk.get("message") or {})
        if event_type == "content_block_start":
            return self._block_start(chunk.get("index", 0), chunk.get("content_block") or {})
        if event_type == "content_block_delta":
            return self._block_delta(chunk.get("index", 0), chunk.get("delta") or {})
        if event_type == "content_block_stop":
            return self._block_stop(chunk.get("index", 0))
        if event_type == "message_delta":
            self._message_delta(chunk)
            return []
        if event_type == "error":
            error = chunk.get("error") or {}
            return [ErrorEvent(message=error.get("message") or str(error))]
        if event_type not in ("message_stop", "ping"):
            logger.debug("Ignoring Anthropic stream event %r", event_type)
        return []

    def finish(self) -> FinishEvent:
        return FinishEvent(
            finish_reason=decode_finish_reason(self._stop_reason),
            usage=decode_usage(self._usage),
            provider_metadata=usage_metadata(self._usage),
        )

    # -- handlers ----------------------------------------------------------

    def _message_start(self, message: dict[str, Any]) -> list[StreamEvent]:
        self._usage = decode_anthropic_usage(message.get("usage"))
        return [ResponseMetadataEvent(id=message.get("id"), model_id=message.get("model"))]

    def _block_start(self, index: int, block: dict[str, Any]) -> list[StreamEvent]:
        block_type = block.get("type")
        if block_type == "text":
            text = block.get("text") or ""
            return [TextDeltaEvent(text_delta=text, index=index)] if text else []
        if block_type == "thinking":
            thinking = block.get("thinking") or ""
            return [ReasoningDeltaEvent(text_delta=thinking, index=index)] if thinking else []
        if block_type == "redacted_thinking":
            return [RedactedReasoningEvent(data=block.get("data") or "")]
        if block_type == "tool_use":
            tool_use = _ToolUse(block.get("id", ""), block.get("name", ""))
            self._tool_uses[index] = tool_use
            return [
                ToolCallDeltaEvent(
                    index=index,
                    tool_call_id=tool_use.tool_call_id,
                    tool_name=tool_use.tool_name,
                )
            ]
        logger.debug("Ignoring Anthropic content block type %r", block_type)
        return []

    def _block_delta(self, index: int, delta: dict[str, Any]) -> list[StreamEvent]:
        delta_type = delta.get("type")
        if delta_type == "text_delta":
            return [TextDeltaEvent(text_delta=delta.get("text", ""), index=index)]
        if delta_type == "thinking_delta":
            return [ReasoningDeltaEvent(text_delta=delta.get("thinking", ""), index=index)]
        if delta_type == "signature_delta":
            return [ReasoningSignatureEvent(signature=delta.get("signature", ""), index=index)]
        if delta_type == "input_json_delta":
            tool_use = self._tool_uses.get(index)
            if tool_use is None:
                raise InvalidResponseDataError(
                    delta, f"input_json_delta for unknown content block index {index}"
                )
            partial = delta.get("partial_json", "")
            tool_use.chunks.append(partial)
            return [
                ToolCallDeltaEvent(
                    index=index,
                    tool_call_id=tool_use.tool_call_id,
                    tool_name=tool_use.tool_name,
                    args_delta=partial,
                )
            ]
        logger.debug("Ignoring Anthropic delta type %r", delta_type)
        return []

    def _block_stop(self, index: int) -> list[StreamEvent]:
        tool_use = self._tool_uses.pop(index, None)
        if tool_use is None:
            return []
        block = ToolCallBlock(
            tool_call_id=tool_use.tool_call_id,
            tool_name=tool_use.tool_name,
            args="".join(tool_use.chunks) or "{}",
        )
        return [ToolCallEvent(index=index, tool_call=block)]

    def _message_delta(self, chunk: dict[str, Any]) -> None:
        delta = chunk.get("delta") or {}
        if delta.get("stop_reason"):
            self._stop_reason = delta["stop_reason"]
        usage = chunk.get("usage") or {}
        for field in (
            "input_tokens",
            "output_tokens",
            "cache_creation_input_tokens",
            "cache_read_input_tokens",
        ):
            if usage.get(field) is not None:
                setattr(self._usage, field, usage[field])
