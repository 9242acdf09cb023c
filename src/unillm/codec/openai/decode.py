"""OpenAI Responses API response -> unified :class:`Response`."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from unillm.api.content import (
    ContentBlock,
    ReasoningBlock,
    SourceBlock,
    TextBlock,
    ToolCallBlock,
)
from unillm.api.errors import InvalidResponseDataError
from unillm.api.metadata import ProviderMetadata, with_provider_metadata
from unillm.api.response import FinishReason, Response, ResponseInfo, Usage
from unillm.codec.openai.metadata import (
    PROVIDER,
    ComputerSafetyCheck,
    OpenAIMetadata,
    OpenAIUsage,
)
from unillm.codec.openai.tools import (
    COMPUTER_USE_TOOL_ID,
    FILE_SEARCH_TOOL_ID,
    WEB_SEARCH_TOOL_ID,
)

logger = logging.getLogger(__name__)

HOSTED_CALL_TYPES = {
    "file_search_call": FILE_SEARCH_TOOL_ID,
    "web_search_call": WEB_SEARCH_TOOL_ID,
    "computer_call": COMPUTER_USE_TOOL_ID,
}


def decode_response(raw: dict[str, Any] | None) -> Response:
    """Decode a complete response object.

    Raises:
        InvalidResponseDataError: If *raw* is ``None`` or a function call
            lacks its name or call id.
    """
    if raw is None:
        raise InvalidResponseDataError(raw, "nil response provided")

    content = decode_output(raw.get("output") or [])
    has_tool_calls = any(isinstance(b, ToolCallBlock) for b in content)
    usage = decode_openai_usage(raw.get("usage"))

    return Response(
        content=content,
        finish_reason=decode_finish_reason(
            incomplete_reason(raw), has_tool_calls, status=raw.get("status")
        ),
        usage=decode_usage(raw.get("usage")),
        provider_metadata=response_metadata(raw.get("id"), usage),
        response_info=ResponseInfo(
            id=raw.get("id"),
            timestamp=decode_timestamp(raw.get("created_at")),
            model_id=raw.get("model"),
        ),
    )


def incomplete_reason(raw: dict[str, Any]) -> str | None:
    details = raw.get("incomplete_details") or {}
    return details.get("reason")


def decode_timestamp(created_at: int | float | None) -> datetime | None:
    if not created_at:
        return None
    return datetime.fromtimestamp(created_at, tz=UTC)


def decode_finish_reason(
    reason: str | None, has_tool_calls: bool, *, status: str | None = None
) -> FinishReason:
    if status == "failed":
        return FinishReason.ERROR
    if reason == "max_output_tokens":
        return FinishReason.LENGTH
    if reason == "content_filter":
        return FinishReason.CONTENT_FILTER
    if has_tool_calls:
        return FinishReason.TOOL_CALLS
    if not reason:
        return FinishReason.STOP
    return FinishReason.UNKNOWN


# ---------------------------------------------------------------------------
# Usage
# ---------------------------------------------------------------------------


def decode_openai_usage(raw: dict[str, Any] | None) -> OpenAIUsage:
    raw = raw or {}
    input_details = raw.get("input_tokens_details") or {}
    output_details = raw.get("output_tokens_details") or {}
    return OpenAIUsage(
        input_tokens=raw.get("input_tokens") or 0,
        cached_tokens=input_details.get("cached_tokens") or 0,
        output_tokens=raw.get("output_tokens") or 0,
        reasoning_tokens=output_details.get("reasoning_tokens") or 0,
    )


def decode_usage(raw: dict[str, Any] | None) -> Usage:
    """Token usage; ``total_tokens`` is computed when the vendor reports 0."""
    usage = decode_openai_usage(raw)
    total = (raw or {}).get("total_tokens") or usage.input_tokens + usage.output_tokens
    return Usage(
        input_tokens=usage.input_tokens,
        output_tokens=usage.output_tokens,
        total_tokens=total,
        reasoning_tokens=usage.reasoning_tokens,
        cached_input_tokens=usage.cached_tokens,
    )


def response_metadata(response_id: str | None, usage: OpenAIUsage) -> ProviderMetadata:
    return with_provider_metadata(PROVIDER, OpenAIMetadata(response_id=response_id, usage=usage))


# ---------------------------------------------------------------------------
# Output items
# ---------------------------------------------------------------------------


def decode_output(items: list[dict[str, Any]]) -> list[ContentBlock]:
    """Decode output items in order.

    Text of a message is followed directly by the sources cited in it.
    """
    content: list[ContentBlock] = []
    for item in items:
        item_type = item.get("type")
        if item_type == "message":
            content.extend(decode_message(item))
        elif item_type == "function_call":
            content.append(decode_function_call(item))
        elif item_type in HOSTED_CALL_TYPES:
            content.append(decode_hosted_call(item))
        elif item_type == "reasoning":
            content.append(decode_reasoning(item))
        else:
            logger.debug("Skipping unsupported OpenAI output item type %r", item_type)
    return content


def decode_message(item: dict[str, Any]) -> list[ContentBlock]:
    blocks: list[ContentBlock] = []
    for part in item.get("content") or []:
        if part.get("type") != "output_text":
            continue
        text = part.get("text") or ""
        if text:
            blocks.append(TextBlock(text=text))
        blocks.extend(decode_annotations(part.get("annotations") or []))
    return blocks


def decode_annotations(annotations: list[dict[str, Any]]) -> list[SourceBlock]:
    """``url_citation`` annotations become sources numbered by annotation index."""
    return [
        SourceBlock(
            id=f"source-{i}",
            url=annotation.get("url", ""),
            title=annotation.get("title") or None,
        )
        for i, annotation in enumerate(annotations)
        if annotation.get("type") == "url_citation"
    ]


def decode_function_call(item: dict[str, Any]) -> ToolCallBlock:
    if not item.get("name"):
        raise InvalidResponseDataError(item, "function call missing name")
    if not item.get("call_id"):
        raise InvalidResponseDataError(item, "function call missing call_id")
    return ToolCallBlock(
        tool_call_id=item["call_id"],
        tool_name=item["name"],
        args=item.get("arguments") or "{}",
    )


def decode_hosted_call(item: dict[str, Any]) -> ToolCallBlock:
    """A call OpenAI made to one of its own tools; the raw item is the args."""
    block = ToolCallBlock(
        tool_call_id=item.get("call_id") or item.get("id", ""),
        tool_name=HOSTED_CALL_TYPES[item["type"]],
        args=json.dumps(item),
    )
    checks = item.get("pending_safety_checks")
    if item["type"] == "computer_call" and checks is not None:
        metadata = OpenAIMetadata(
            computer_safety_checks=[ComputerSafetyCheck.model_validate(c) for c in checks]
        )
        block.provider_metadata = with_provider_metadata(PROVIDER, metadata)
    return block


def decode_reasoning(item: dict[str, Any]) -> ReasoningBlock:
    summaries = [s.get("text") or "" for s in item.get("summary") or []]
    block = ReasoningBlock(text="\n".join(t for t in summaries if t))
    if item.get("id"):
        block.provider_metadata = with_provider_metadata(PROVIDER, OpenAIMetadata(item_id=item["id"]))
    return block
