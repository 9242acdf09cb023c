"""OpenAI Responses API streaming events -> unified stream events."""

from __future__ import annotations

import logging
from typing import Any

from unillm.api.content import SourceBlock
from unillm.api.errors import InvalidResponseDataError
from unillm.api.stream import (
    ErrorEvent,
    FinishEvent,
    ReasoningDeltaEvent,
    ResponseMetadataEvent,
    SourceEvent,
    StreamEvent,
    TextDeltaEvent,
    ToolCallDeltaEvent,
    ToolCallEvent,
)
from unillm.codec.openai.decode import (
    HOSTED_CALL_TYPES,
    decode_finish_reason,
    decode_function_call,
    decode_hosted_call,
    decode_openai_usage,
    decode_timestamp,
    decode_usage,
    incomplete_reason,
    response_metadata,
)
from unillm.codec.openai.metadata import OpenAIUsage

logger = logging.getLogger(__name__)

# Known events that carry nothing the unified stream exposes.
_IGNORED_EVENTS = frozenset(
    {
        "response.in_progress",
        "response.content_part.added",
        "response.content_part.done",
        "response.output_text.done",
        "response.refusal.delta",
        "response.refusal.done",
        "response.function_call_arguments.done",
        "response.file_search_call.in_progress",
        "response.file_search_call.searching",
        "response.file_search_call.completed",
        "response.web_search_call.in_progress",
        "response.web_search_call.searching",
        "response.web_search_call.completed",
        "response.reasoning_summary_part.added",
        "response.reasoning_summary_part.done",
        "response.reasoning_summary_text.done",
    }
)


class _FunctionCall:
    def __init__(self, tool_call_id: str, tool_name: str) -> None:
        self.tool_call_id = tool_call_id
        self.tool_name = tool_name


class OpenAIStreamDecoder:
    """Stateful decoder for one Responses API stream.

    Function calls are tracked by ``output_index``, which is also the
    ``index`` of the emitted tool-call events.
    """

    def __init__(self) -> None:
        self._response_id: str | None = None
        self._usage_raw: dict[str, Any] | None = None
        self._usage = OpenAIUsage()
        self._incomplete_reason: str | None = None
        self._status: str | None = None
        self._has_tool_calls = False
        self._calls: dict[int, _FunctionCall] = {}
        self._annotation_count = 0

    def decode(self, chunk: dict[str, Any]) -> list[StreamEvent]:
        event_type = chunk.get("type")
        if event_type == "response.output_text.delta":
            return [
                TextDeltaEvent(text_delta=chunk.get("delta", ""), index=chunk.get("output_index"))
            ]
        if event_type == "response.reasoning_summary_text.delta":
            return [
                ReasoningDeltaEvent(
                    text_delta=chunk.get("delta", ""), index=chunk.get("output_index")
                )
            ]
        if event_type == "response.output_item.added":
            return self._item_added(chunk.get("output_index", 0), chunk.get("item") or {})
        if event_type == "response.function_call_arguments.delta":
            return self._arguments_delta(chunk)
        if event_type == "response.output_item.done":
            return self._item_done(chunk.get("output_index", 0), chunk.get("item") or {})
        if event_type in ("response.output_text.annotation.added", "response.text_annotation.delta"):
            return self._annotation(chunk.get("annotation") or {})
        if event_type == "response.created":
            return self._created(chunk.get("response") or {})
        if event_type in ("response.completed", "response.incomplete", "response.failed"):
            self._completed(chunk.get("response") or {})
            return []
        if event_type == "error":
            return [ErrorEvent(message=f"{chunk.get('code')}: {chunk.get('message')}")]
        if event_type not in _IGNORED_EVENTS:
            logger.debug("Ignoring OpenAI stream event %r", event_type)
        return []

    def finish(self) -> FinishEvent:
        return FinishEvent(
            finish_reason=decode_finish_reason(
                self._incomplete_reason, self._has_tool_calls, status=self._status
            ),
            usage=decode_usage(self._usage_raw),
            provider_metadata=response_metadata(self._response_id, self._usage),
        )

    # -- handlers ----------------------------------------------------------

    def _created(self, response: dict[str, Any]) -> list[StreamEvent]:
        self._response_id = response.get("id")
        return [
            ResponseMetadataEvent(
                id=response.get("id"),
                timestamp=decode_timestamp(response.get("created_at")),
                model_id=response.get("model"),
            )
        ]

    def _completed(self, response: dict[str, Any]) -> None:
        if response.get("usage") is not None:
            self._usage_raw = response["usage"]
            self._usage = decode_openai_usage(self._usage_raw)
        reason = incomplete_reason(response)
        if reason:
            self._incomplete_reason = reason
        self._status = response.get("status") or self._status

    def _item_added(self, index: int, item: dict[str, Any]) -> list[StreamEvent]:
        if item.get("type") != "function_call":
            return []
        call = _FunctionCall(item.get("call_id", ""), item.get("name", ""))
        self._calls[index] = call
        self._has_tool_calls = True
        return [
            ToolCallDeltaEvent(
                index=index,
                tool_call_id=call.tool_call_id,
                tool_name=call.tool_name,
                args_delta=item.get("arguments", ""),
            )
        ]

    def _arguments_delta(self, chunk: dict[str, Any]) -> list[StreamEvent]:
        index = chunk.get("output_index", 0)
        call = self._calls.get(index)
        if call is None:
            raise InvalidResponseDataError(
                chunk, f"function call arguments delta for unknown output index {index}"
            )
        return [
            ToolCallDeltaEvent(
                index=index,
                tool_call_id=call.tool_call_id,
                tool_name=call.tool_name,
                args_delta=chunk.get("delta", ""),
            )
        ]

    def _item_done(self, index: int, item: dict[str, Any]) -> list[StreamEvent]:
        item_type = item.get("type")
        if item_type == "function_call":
            self._calls.pop(index, None)
            return [ToolCallEvent(index=index, tool_call=decode_function_call(item))]
        if item_type in HOSTED_CALL_TYPES:
            self._has_tool_calls = True
            return [ToolCallEvent(index=index, tool_call=decode_hosted_call(item))]
        return []

    def _annotation(self, annotation: dict[str, Any]) -> list[StreamEvent]:
        if annotation.get("type") != "url_citation":
            return []
        source = SourceBlock(
            id=f"source-{self._annotation_count}",
            url=annotation.get("url", ""),
            title=annotation.get("title") or None,
        )
        self._annotation_count += 1
        return [SourceEvent(source=source)]
