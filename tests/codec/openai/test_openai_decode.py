"""Tests for decoding OpenAI Responses API responses."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import pytest

from unillm.api.content import ReasoningBlock, SourceBlock, TextBlock, ToolCallBlock
from unillm.api.errors import InvalidResponseDataError
from unillm.api.response import FinishReason
from unillm.codec.openai import get_openai_metadata
from unillm.codec.openai.decode import decode_finish_reason, decode_response
from unillm.codec.openai.tools import COMPUTER_USE_TOOL_ID, WEB_SEARCH_TOOL_ID


def _response(output: list[dict[str, Any]], **overrides: Any) -> dict[str, Any]:
    raw: dict[str, Any] = {
        "id": "resp_1",
        "object": "response",
        "created_at": 1741294021,
        "model": "gpt-4o-2024-08-06",
        "status": "completed",
        "output": output,
        "usage": {
            "input_tokens": 10,
            "input_tokens_details": {"cached_tokens": 4},
            "output_tokens": 6,
            "output_tokens_details": {"reasoning_tokens": 2},
            "total_tokens": 16,
        },
    }
    raw.update(overrides)
    return raw


def _message(text: str, annotations: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    return {
        "type": "message",
        "id": "msg_1",
        "role": "assistant",
        "content": [{"type": "output_text", "text": text, "annotations": annotations or []}],
    }


class TestDecodeResponse:
    def test_text(self) -> None:
        response = decode_response(_response([_message("Hello")]))

        assert response.content == [TextBlock(text="Hello")]
        assert response.finish_reason == FinishReason.STOP
        assert response.usage.input_tokens == 10
        assert response.usage.output_tokens == 6
        assert response.usage.total_tokens == 16
        assert response.usage.reasoning_tokens == 2
        assert response.usage.cached_input_tokens == 4
        assert response.response_info is not None
        assert response.response_info.id == "resp_1"
        assert response.response_info.timestamp == datetime.fromtimestamp(1741294021, tz=UTC)

    def test_none_raises(self) -> None:
        with pytest.raises(InvalidResponseDataError):
            decode_response(None)

    def test_metadata_carries_response_id_and_usage(self) -> None:
        metadata = get_openai_metadata(decode_response(_response([])).provider_metadata)
        assert metadata is not None
        assert metadata.response_id == "resp_1"
        assert metadata.usage is not None
        assert metadata.usage.cached_tokens == 4

    def test_total_computed_when_missing(self) -> None:
        raw = _response([], usage={"input_tokens": 3, "output_tokens": 2})
        assert decode_response(raw).usage.total_tokens == 5

    def test_annotations_become_sources(self) -> None:
        annotations = [
            {"type": "url_citation", "url": "https://a.test", "title": "A"},
            {"type": "file_citation", "file_id": "f"},
            {"type": "url_citation", "url": "https://c.test", "title": ""},
        ]
        response = decode_response(_response([_message("Cited.", annotations)]))
        assert response.content == [
            TextBlock(text="Cited."),
            SourceBlock(id="source-0", url="https://a.test", title="A"),
            SourceBlock(id="source-2", url="https://c.test"),
        ]

    def test_function_call(self) -> None:
        item = {
            "type": "function_call",
            "id": "fc_1",
            "call_id": "call_1",
            "name": "get_weather",
            "arguments": '{"city":"Oslo"}',
        }
        response = decode_response(_response([item]))
        assert response.finish_reason == FinishReason.TOOL_CALLS
        assert response.tool_calls == [
            ToolCallBlock(tool_call_id="call_1", tool_name="get_weather", args='{"city":"Oslo"}')
        ]

    @pytest.mark.parametrize("missing", ["name", "call_id"])
    def test_function_call_missing_field_raises(self, missing: str) -> None:
        item = {"type": "function_call", "call_id": "c", "name": "f", "arguments": "{}"}
        del item[missing]
        with pytest.raises(InvalidResponseDataError, match=missing):
            decode_response(_response([item]))

    def test_web_search_call(self) -> None:
        item = {"type": "web_search_call", "id": "ws_1", "status": "completed"}
        response = decode_response(_response([item, _message("Found it.")]))

        (call,) = response.tool_calls
        assert call.tool_call_id == "ws_1"
        assert call.tool_name == WEB_SEARCH_TOOL_ID
        assert json.loads(call.args) == item
        assert response.finish_reason == FinishReason.TOOL_CALLS

    def test_computer_call_safety_checks(self) -> None:
        item = {
            "type": "computer_call",
            "id": "cu_1",
            "call_id": "call_7",
            "action": {"type": "screenshot"},
            "pending_safety_checks": [{"id": "sc_1", "code": "malicious_instructions", "message": "m"}],
            "status": "completed",
        }
        (call,) = decode_response(_response([item])).tool_calls
        assert call.tool_call_id == "call_7"
        assert call.tool_name == COMPUTER_USE_TOOL_ID

        metadata = get_openai_metadata(call)
        assert metadata is not None
        assert [c.id for c in metadata.computer_safety_checks] == ["sc_1"]

    def test_reasoning(self) -> None:
        item = {
            "type": "reasoning",
            "id": "rs_1",
            "summary": [
                {"type": "summary_text", "text": "First."},
                {"type": "summary_text", "text": "Second."},
            ],
        }
        (block,) = decode_response(_response([item])).content
        assert isinstance(block, ReasoningBlock)
        assert block.text == "First.\nSecond."
        metadata = get_openai_metadata(block)
        assert metadata is not None
        assert metadata.item_id == "rs_1"

    def test_reasoning_without_summary_keeps_item_id(self) -> None:
        (block,) = decode_response(_response([{"type": "reasoning", "id": "rs_2", "summary": []}])).content
        assert isinstance(block, ReasoningBlock)
        assert block.text == ""
        assert get_openai_metadata(block).item_id == "rs_2"  # type: ignore[union-attr]

    def test_unknown_item_skipped(self) -> None:
        response = decode_response(_response([{"type": "image_generation_call"}, _message("x")]))
        assert response.content == [TextBlock(text="x")]

    def test_incomplete(self) -> None:
        raw = _response(
            [_message("Trunc")],
            status="incomplete",
            incomplete_details={"reason": "max_output_tokens"},
        )
        assert decode_response(raw).finish_reason == FinishReason.LENGTH


class TestFinishReason:
    @pytest.mark.parametrize(
        ("reason", "has_tool_calls", "status", "expected"),
        [
            (None, False, "completed", FinishReason.STOP),
            (None, True, "completed", FinishReason.TOOL_CALLS),
            ("max_output_tokens", True, "incomplete", FinishReason.LENGTH),
            ("content_filter", False, "incomplete", FinishReason.CONTENT_FILTER),
            ("mystery", False, "incomplete", FinishReason.UNKNOWN),
            (None, False, "failed", FinishReason.ERROR),
        ],
    )
    def test_mapping(
        self, reason: str | None, has_tool_calls: bool, status: str, expected: FinishReason
    ) -> None:
        assert decode_finish_reason(reason, has_tool_calls, status=status) == expected
