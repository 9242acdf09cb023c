"""Tests for the Anthropic stream decoder."""

from __future__ import annotations

from typing import Any

from unillm.api.content import ReasoningBlock, TextBlock, ToolCallBlock
from unillm.api.errors import InvalidResponseDataError
from unillm.api.response import FinishReason
from unillm.api.stream import (
    ErrorEvent,
    EventStream,
    FinishEvent,
    ReasoningDeltaEvent,
    ReasoningSignatureEvent,
    ResponseMetadataEvent,
    StreamEvent,
    TextDeltaEvent,
    ToolCallDeltaEvent,
    ToolCallEvent,
    collect_stream,
)
from unillm.codec.anthropic.decode import decode_response
from unillm.codec.anthropic.decode_stream import AnthropicStreamDecoder


class _ListSource:
    def __init__(self, chunks: list[dict[str, Any]]) -> None:
        self._chunks = list(chunks)
        self.closed = False

    def __aiter__(self) -> _ListSource:
        return self

    async def __anext__(self) -> dict[str, Any]:
        if not self._chunks:
            raise StopAsyncIteration
        return self._chunks.pop(0)

    async def aclose(self) -> None:
        self.closed = True


def _message_start() -> dict[str, Any]:
    return {
        "type": "message_start",
        "message": {
            "id": "msg_01",
            "model": "claude-3-5-sonnet-latest",
            "usage": {"input_tokens": 25, "output_tokens": 1},
        },
    }


def _message_end(stop_reason: str, output_tokens: int) -> list[dict[str, Any]]:
    return [
        {
            "type": "message_delta",
            "delta": {"stop_reason": stop_reason},
            "usage": {"output_tokens": output_tokens},
        },
        {"type": "message_stop"},
    ]


_TEXT_STREAM: list[dict[str, Any]] = [
    _message_start(),
    {"type": "content_block_start", "index": 0, "content_block": {"type": "text", "text": ""}},
    {"type": "ping"},
    {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": "Hel"}},
    {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": "lo"}},
    {"type": "content_block_stop", "index": 0},
    *_message_end("end_turn", 6),
]

_TOOL_STREAM: list[dict[str, Any]] = [
    _message_start(),
    {
        "type": "content_block_start",
        "index": 1,
        "content_block": {"type": "tool_use", "id": "toolu_1", "name": "get_weather", "input": {}},
    },
    {
        "type": "content_block_delta",
        "index": 1,
        "delta": {"type": "input_json_delta", "partial_json": '{"city": '},
    },
    {
        "type": "content_block_delta",
        "index": 1,
        "delta": {"type": "input_json_delta", "partial_json": '"Oslo"}'},
    },
    {"type": "content_block_stop", "index": 1},
    *_message_end("tool_use", 20),
]


async def _events(chunks: list[dict[str, Any]]) -> list[StreamEvent]:
    stream = EventStream(_ListSource(chunks), AnthropicStreamDecoder())
    return [event async for event in stream]


class TestAnthropicStreamDecoder:
    async def test_text_stream(self) -> None:
        events = await _events(_TEXT_STREAM)

        assert events[0] == ResponseMetadataEvent(id="msg_01", model_id="claude-3-5-sonnet-latest")
        assert events[1:3] == [
            TextDeltaEvent(text_delta="Hel", index=0),
            TextDeltaEvent(text_delta="lo", index=0),
        ]
        finish = events[-1]
        assert isinstance(finish, FinishEvent)
        assert finish.finish_reason == FinishReason.STOP
        assert finish.usage.input_tokens == 25
        assert finish.usage.output_tokens == 6
        assert finish.usage.total_tokens == 31

    async def test_tool_call_stream(self) -> None:
        events = await _events(_TOOL_STREAM)

        deltas = [e for e in events if isinstance(e, ToolCallDeltaEvent)]
        assert [d.args_delta for d in deltas] == ["", '{"city": ', '"Oslo"}']
        assert all(d.index == 1 and d.tool_call_id == "toolu_1" for d in deltas)

        calls = [e for e in events if isinstance(e, ToolCallEvent)]
        assert calls == [
            ToolCallEvent(
                index=1,
                tool_call=ToolCallBlock(
                    tool_call_id="toolu_1", tool_name="get_weather", args='{"city": "Oslo"}'
                ),
            )
        ]
        assert events[-1].finish_reason == FinishReason.TOOL_CALLS  # type: ignore[union-attr]

    async def test_tool_call_without_arguments(self) -> None:
        decoder = AnthropicStreamDecoder()
        decoder.decode(
            {
                "type": "content_block_start",
                "index": 0,
                "content_block": {"type": "tool_use", "id": "t", "name": "ping"},
            }
        )
        (event,) = decoder.decode({"type": "content_block_stop", "index": 0})
        assert isinstance(event, ToolCallEvent)
        assert event.tool_call.args == "{}"

    def test_thinking_deltas(self) -> None:
        decoder = AnthropicStreamDecoder()
        start = {"type": "content_block_start", "index": 0, "content_block": {"type": "thinking", "thinking": ""}}
        assert decoder.decode(start) == []
        assert decoder.decode(
            {"type": "content_block_delta", "index": 0, "delta": {"type": "thinking_delta", "thinking": "Hmm"}}
        ) == [ReasoningDeltaEvent(text_delta="Hmm", index=0)]
        assert decoder.decode(
            {"type": "content_block_delta", "index": 0, "delta": {"type": "signature_delta", "signature": "s"}}
        ) == [ReasoningSignatureEvent(signature="s", index=0)]

    async def test_unknown_tool_index_ends_stream_with_error(self) -> None:
        chunks = [
            _message_start(),
            {
                "type": "content_block_delta",
                "index": 3,
                "delta": {"type": "input_json_delta", "partial_json": "{"},
            },
            {"type": "content_block_stop", "index": 3},
        ]
        events = await _events(chunks)

        assert isinstance(events[-1], ErrorEvent)
        assert "unknown content block index 3" in events[-1].message
        assert not any(isinstance(e, FinishEvent) for e in events)

    async def test_vendor_error_event(self) -> None:
        chunks = [
            _message_start(),
            {"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}},
            {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": "x"}},
        ]
        events = await _events(chunks)
        assert events[-1] == ErrorEvent(message="Overloaded")
        assert len(events) == 2

    async def test_collect(self) -> None:
        chunks = [
            _message_start(),
            {"type": "content_block_start", "index": 0, "content_block": {"type": "thinking", "thinking": ""}},
            {"type": "content_block_delta", "index": 0, "delta": {"type": "thinking_delta", "thinking": "Plan."}},
            {"type": "content_block_delta", "index": 0, "delta": {"type": "signature_delta", "signature": "sig"}},
            {"type": "content_block_stop", "index": 0},
            *_TEXT_STREAM[1:],
        ]
        response = await collect_stream(EventStream(_ListSource(chunks), AnthropicStreamDecoder()))

        assert response.content == [
            ReasoningBlock(text="Plan.", signature="sig"),
            TextBlock(text="Hello"),
        ]
        assert response.finish_reason == FinishReason.STOP
        assert response.response_info is not None
        assert response.response_info.id == "msg_01"

    async def test_collect_keeps_thinking_blocks_apart(self) -> None:
        blocks = [
            {"type": "thinking", "thinking": "A", "signature": "s1"},
            {"type": "thinking", "thinking": "B", "signature": "s2"},
            {"type": "text", "text": "one"},
            {"type": "text", "text": "two"},
        ]
        chunks: list[dict[str, Any]] = [_message_start()]
        for index, block in enumerate(blocks):
            if block["type"] == "thinking":
                start = {"type": "thinking", "thinking": ""}
                deltas = [
                    {"type": "thinking_delta", "thinking": block["thinking"]},
                    {"type": "signature_delta", "signature": block["signature"]},
                ]
            else:
                start = {"type": "text", "text": ""}
                deltas = [{"type": "text_delta", "text": block["text"]}]
            chunks.append({"type": "content_block_start", "index": index, "content_block": start})
            chunks.extend(
                {"type": "content_block_delta", "index": index, "delta": delta} for delta in deltas
            )
            chunks.append({"type": "content_block_stop", "index": index})
        chunks.extend(_message_end("end_turn", 9))

        streamed = await collect_stream(EventStream(_ListSource(chunks), AnthropicStreamDecoder()))
        decoded = decode_response(
            {"id": "msg_01", "content": blocks, "stop_reason": "end_turn", "usage": {}}
        )

        assert streamed.content == [
            ReasoningBlock(text="A", signature="s1"),
            ReasoningBlock(text="B", signature="s2"),
            TextBlock(text="one"),
            TextBlock(text="two"),
        ]
        assert streamed.content == decoded.content

    async def test_malformed_block_ends_stream_with_error(self) -> None:
        source = _ListSource(
            [
                _message_start(),
                {
                    "type": "content_block_start",
                    "index": 0,
                    "content_block": {"type": "tool_use", "id": None, "name": "ping"},
                },
                {"type": "content_block_stop", "index": 0},
            ]
        )
        events = [event async for event in EventStream(source, AnthropicStreamDecoder())]

        assert isinstance(events[-1], ErrorEvent)
        assert isinstance(events[-1].exception, InvalidResponseDataError)
        assert events[-1].exception.data["content_block"]["id"] is None
        assert not any(isinstance(e, FinishEvent) for e in events)
        assert source.closed

    async def test_non_dict_delta_ends_stream_with_error(self) -> None:
        source = _ListSource(
            [_message_start(), {"type": "content_block_delta", "index": 0, "delta": "oops"}]
        )
        events = [event async for event in EventStream(source, AnthropicStreamDecoder())]

        assert len(events) == 2
        assert isinstance(events[-1], ErrorEvent)
        assert "Malformed stream chunk" in events[-1].message
        assert source.closed
