"""Tests for decoding Anthropic Messages API responses."""

from __future__ import annotations

import json

import pytest

from unillm.api.content import ReasoningBlock, RedactedReasoningBlock, TextBlock, ToolCallBlock
from unillm.api.errors import InvalidResponseDataError
from unillm.api.response import FinishReason
from unillm.codec.anthropic import get_anthropic_metadata
from unillm.codec.anthropic.decode import decode_finish_reason, decode_response


def _message(**overrides: object) -> dict[str, object]:
    raw: dict[str, object] = {
        "id": "msg_01",
        "type": "message",
        "role": "assistant",
        "model": "claude-3-5-sonnet-latest",
        "content": [{"type": "text", "text": "Hello!"}],
        "stop_reason": "end_turn",
        "usage": {"input_tokens": 12, "output_tokens": 4},
    }
    raw.update(overrides)
    return raw


class TestDecodeResponse:
    def test_text_response(self) -> None:
        response = decode_response(_message())

        assert response.content == [TextBlock(text="Hello!")]
        assert response.text == "Hello!"
        assert response.finish_reason == FinishReason.STOP
        assert response.usage.input_tokens == 12
        assert response.usage.output_tokens == 4
        assert response.usage.total_tokens == 16
        assert response.response_info is not None
        assert response.response_info.id == "msg_01"
        assert response.response_info.model_id == "claude-3-5-sonnet-latest"

    def test_none_raises(self) -> None:
        with pytest.raises(InvalidResponseDataError):
            decode_response(None)

    def test_empty_text_yields_no_blocks(self) -> None:
        response = decode_response(_message(content=[{"type": "text", "text": ""}]))
        assert response.content == []

    def test_tool_use(self) -> None:
        raw = _message(
            content=[
                {"type": "text", "text": "Checking."},
                {
                    "type": "tool_use",
                    "id": "toolu_1",
                    "name": "get_weather",
                    "input": {"city": "Oslo"},
                },
            ],
            stop_reason="tool_use",
        )
        response = decode_response(raw)

        assert response.finish_reason == FinishReason.TOOL_CALLS
        assert response.tool_calls == [
            ToolCallBlock(tool_call_id="toolu_1", tool_name="get_weather", args='{"city": "Oslo"}')
        ]
        assert json.loads(response.tool_calls[0].args) == {"city": "Oslo"}

    def test_tool_use_without_input(self) -> None:
        raw = _message(content=[{"type": "tool_use", "id": "t", "name": "ping"}])
        assert decode_response(raw).tool_calls[0].args == "{}"

    def test_thinking_blocks(self) -> None:
        raw = _message(
            content=[
                {"type": "thinking", "thinking": "Let me see.", "signature": "sig"},
                {"type": "thinking", "thinking": "", "signature": "empty"},
                {"type": "redacted_thinking", "data": "opaque"},
                {"type": "text", "text": "42"},
            ]
        )
        response = decode_response(raw)

        assert response.content == [
            ReasoningBlock(text="Let me see.", signature="sig"),
            RedactedReasoningBlock(data="opaque"),
            TextBlock(text="42"),
        ]

    def test_unknown_block_skipped(self) -> None:
        raw = _message(content=[{"type": "server_tool_use", "id": "x"}, {"type": "text", "text": "a"}])
        assert decode_response(raw).content == [TextBlock(text="a")]

    def test_cache_usage_in_metadata(self) -> None:
        raw = _message(
            usage={
                "input_tokens": 10,
                "output_tokens": 5,
                "cache_creation_input_tokens": 100,
                "cache_read_input_tokens": 50,
            }
        )
        response = decode_response(raw)

        assert response.usage.cached_input_tokens == 50
        metadata = get_anthropic_metadata(response.provider_metadata)
        assert metadata is not None
        assert metadata.usage is not None
        assert metadata.usage.cache_creation_input_tokens == 100
        assert metadata.usage.cache_read_input_tokens == 50

    def test_missing_usage(self) -> None:
        response = decode_response(_message(usage=None))
        assert response.usage.total_tokens == 0


class TestFinishReason:
    @pytest.mark.parametrize(
        ("stop_reason", "expected"),
        [
            ("end_turn", FinishReason.STOP),
            ("stop_sequence", FinishReason.STOP),
            ("tool_use", FinishReason.TOOL_CALLS),
            ("max_tokens", FinishReason.LENGTH),
            ("refusal", FinishReason.CONTENT_FILTER),
            ("something_new", FinishReason.UNKNOWN),
            (None, FinishReason.UNKNOWN),
        ],
    )
    def test_mapping(self, stop_reason: str | None, expected: FinishReason) -> None:
        assert decode_finish_reason(stop_reason) == expected
