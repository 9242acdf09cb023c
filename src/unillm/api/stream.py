"""Streaming events and the explicit event-stream iterator.

A vendor stream is consumed through :class:`EventStream`, a forward-only
async iterator that pulls raw chunks from a :class:`ChunkSource`, hands
each one to a vendor :class:`StreamDecoder` and yields the resulting
:class:`StreamEvent` values in order.  The first decode error produces a
single :class:`ErrorEvent` and ends the stream; the stream never tries to
resynchronize.  Closing the stream (explicitly, through ``async with``, or
by cancelling the consuming task) closes the chunk source and with it the
underlying connection.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from datetime import datetime
from typing import Annotated, Any, Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field

from unillm.api.content import (
    ContentBlock,
    ReasoningBlock,
    RedactedReasoningBlock,
    SourceBlock,
    TextBlock,
    ToolCallBlock,
)
from unillm.api.errors import InvalidResponseDataError, UnillmError
from unillm.api.metadata import ProviderMetadata
from unillm.api.response import (
    CallWarning,
    FinishReason,
    RequestInfo,
    Response,
    ResponseInfo,
    Usage,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class TextDeltaEvent(BaseModel):
    """A fragment of text.

    ``index`` identifies the content block the fragment belongs to; deltas
    without one continue the preceding block of the same kind.
    """

    type: Literal["text-delta"] = "text-delta"
    text_delta: str
    index: int | None = None


class ReasoningDeltaEvent(BaseModel):
    type: Literal["reasoning-delta"] = "reasoning-delta"
    text_delta: str
    index: int | None = None


class ReasoningSignatureEvent(BaseModel):
    """Signature of a reasoning block, sent after its text."""

    type: Literal["reasoning-signature"] = "reasoning-signature"
    signature: str
    index: int | None = None


class RedactedReasoningEvent(BaseModel):
    type: Literal["redacted-reasoning"] = "redacted-reasoning"
    data: str


class SourceEvent(BaseModel):
    type: Literal["source"] = "source"
    source: SourceBlock


class ToolCallDeltaEvent(BaseModel):
    """A fragment of a tool call's argument text.

    Fragments share an ``index`` per call and are concatenated by the
    consumer; they are never valid JSON on their own.
    """

    type: Literal["tool-call-delta"] = "tool-call-delta"
    index: int
    tool_call_id: str
    tool_name: str
    args_delta: str = ""


class ToolCallEvent(BaseModel):
    """A tool call whose arguments are complete."""

    type: Literal["tool-call"] = "tool-call"
    index: int
    tool_call: ToolCallBlock


class ResponseMetadataEvent(BaseModel):
    type: Literal["response-metadata"] = "response-metadata"
    id: str | None = None
    timestamp: datetime | None = None
    model_id: str | None = None


class FinishEvent(BaseModel):
    """Terminal event of a successful stream."""

    type: Literal["finish"] = "finish"
    finish_reason: FinishReason = FinishReason.UNKNOWN
    usage: Usage = Field(default_factory=Usage)
    provider_metadata: ProviderMetadata = Field(default_factory=ProviderMetadata)


class ErrorEvent(BaseModel):
    """Terminal event of a failed stream.

    ``exception`` holds the original error when there is one; it is not
    serialized.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    type: Literal["error"] = "error"
    message: str
    exception: Exception | None = Field(default=None, exclude=True)

    @classmethod
    def from_exception(cls, exc: Exception) -> ErrorEvent:
        return cls(message=str(exc), exception=exc)


StreamEvent = Annotated[
    TextDeltaEvent
    | ReasoningDeltaEvent
    | ReasoningSignatureEvent
    | RedactedReasoningEvent
    | SourceEvent
    | ToolCallDeltaEvent
    | ToolCallEvent
    | ResponseMetadataEvent
    | FinishEvent
    | ErrorEvent,
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Collaborator protocols
# ---------------------------------------------------------------------------


class ChunkSource(Protocol):
    """Raw vendor chunks, already parsed from the transport framing."""

    def __aiter__(self) -> ChunkSource: ...

    async def __anext__(self) -> dict[str, Any]: ...

    async def aclose(self) -> None: ...


class StreamDecoder(Protocol):
    """Per-call, stateful translation of vendor chunks into events."""

    def decode(self, chunk: dict[str, Any]) -> list[StreamEvent]:
        """Translate one chunk.  May raise :class:`UnillmError`."""
        ...

    def finish(self) -> FinishEvent:
        """Build the terminal event once the source is exhausted."""
        ...


# ---------------------------------------------------------------------------
# EventStream
# ---------------------------------------------------------------------------


class EventStream:
    """Forward-only async iterator of :class:`StreamEvent`.

    Usage::

        async with model_stream.events as events:
            async for event in events:
                ...
    """

    def __init__(self, source: ChunkSource, decoder: StreamDecoder) -> None:
        self._source = source
        self._decoder = decoder
        self._pending: deque[StreamEvent] = deque()
        self._done = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> EventStream:
        return self

    async def __anext__(self) -> StreamEvent:
        while not self._pending:
            if self._done:
                await self.aclose()
                raise StopAsyncIteration
            await self._pull()
        return self._pending.popleft()

    async def _pull(self) -> None:
        try:
            chunk = await self._source.__anext__()
        except StopAsyncIteration:
            self._done = True
            self._pending.append(self._decoder.finish())
            return
        except asyncio.CancelledError:
            await self.aclose()
            raise
        except UnillmError as exc:
            self._fail(exc)
            return

        try:
            events = self._decoder.decode(chunk)
        except UnillmError as exc:
            self._fail(exc)
            return
        except (KeyError, TypeError, AttributeError, ValueError) as exc:
            # pydantic's ValidationError is a ValueError.
            error = InvalidResponseDataError(chunk, f"Malformed stream chunk: {exc}")
            error.__cause__ = exc
            self._fail(error)
            return

        for event in events:
            self._pending.append(event)
            if isinstance(event, ErrorEvent):
                self._done = True
                break

    def _fail(self, exc: UnillmError) -> None:
        logger.debug("Stream terminated by error: %s", exc)
        self._pending.append(ErrorEvent.from_exception(exc))
        self._done = True

    async def aclose(self) -> None:
        """Stop consumption and release the chunk source.  Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._done = True
        self._pending.clear()
        await self._source.aclose()

    async def __aenter__(self) -> EventStream:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()


class StreamResponse:
    """A streaming call in progress.

    Iterating it yields the events of :attr:`events`.  :attr:`warnings` were
    collected while encoding and are known before the first event.
    """

    def __init__(
        self,
        events: EventStream,
        warnings: list[CallWarning] | None = None,
        request_info: RequestInfo | None = None,
    ) -> None:
        self.events = events
        self.warnings = warnings or []
        self.request_info = request_info

    def __aiter__(self) -> EventStream:
        return self.events

    async def aclose(self) -> None:
        await self.events.aclose()

    async def __aenter__(self) -> StreamResponse:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def collect(self) -> Response:
        """Drain the stream into a :class:`Response`."""
        response = await collect_stream(self.events)
        response.warnings = [*self.warnings, *response.warnings]
        response.request_info = self.request_info
        return response


# ---------------------------------------------------------------------------
# Accumulation
# ---------------------------------------------------------------------------


class _TextState:
    def __init__(self, kind: str) -> None:
        self.kind = kind
        self.chunks: list[str] = []
        self.signature: str | None = None


class _ToolCallState:
    def __init__(self, tool_call_id: str, tool_name: str) -> None:
        self.tool_call_id = tool_call_id
        self.tool_name = tool_name
        self.chunks: list[str] = []
        self.final: ToolCallBlock | None = None

    def block(self) -> ToolCallBlock:
        if self.final is not None:
            return self.final
        return ToolCallBlock(
            tool_call_id=self.tool_call_id,
            tool_name=self.tool_name,
            args="".join(self.chunks) or "{}",
        )


class StreamCollector:
    """Folds stream events back into a :class:`Response`.

    Text and reasoning deltas are grouped by their block ``index``; deltas
    without an index join the preceding block of the same kind.  Tool-call
    argument deltas are concatenated per index and only the complete text is
    kept.  An :class:`ErrorEvent` raises its exception.
    """

    def __init__(self) -> None:
        self._parts: list[Any] = []
        self._calls: dict[int, _ToolCallState] = {}
        self._texts: dict[tuple[str, int], _TextState] = {}
        self._finish: FinishEvent | None = None
        self._info: ResponseInfo | None = None

    def add(self, event: StreamEvent) -> None:
        if isinstance(event, TextDeltaEvent):
            self._text_state("text", event.index).chunks.append(event.text_delta)
        elif isinstance(event, ReasoningDeltaEvent):
            self._text_state("reasoning", event.index).chunks.append(event.text_delta)
        elif isinstance(event, ReasoningSignatureEvent):
            self._text_state("reasoning", event.index).signature = event.signature
        elif isinstance(event, RedactedReasoningEvent):
            self._parts.append(RedactedReasoningBlock(data=event.data))
        elif isinstance(event, SourceEvent):
            self._parts.append(event.source)
        elif isinstance(event, ToolCallDeltaEvent):
            self._call_state(event.index, event.tool_call_id, event.tool_name).chunks.append(
                event.args_delta
            )
        elif isinstance(event, ToolCallEvent):
            state = self._call_state(
                event.index, event.tool_call.tool_call_id, event.tool_call.tool_name
            )
            state.final = event.tool_call
        elif isinstance(event, ResponseMetadataEvent):
            self._info = ResponseInfo(
                id=event.id, timestamp=event.timestamp, model_id=event.model_id
            )
        elif isinstance(event, FinishEvent):
            self._finish = event
        elif isinstance(event, ErrorEvent):
            if event.exception is not None:
                raise event.exception
            raise UnillmError(event.message)

    def _text_state(self, kind: str, index: int | None) -> _TextState:
        if index is not None:
            state = self._texts.get((kind, index))
            if state is None:
                state = _TextState(kind)
                self._texts[(kind, index)] = state
                self._parts.append(state)
            return state
        last = self._parts[-1] if self._parts else None
        if isinstance(last, _TextState) and last.kind == kind:
            return last
        state = _TextState(kind)
        self._parts.append(state)
        return state

    def _call_state(self, index: int, tool_call_id: str, tool_name: str) -> _ToolCallState:
        state = self._calls.get(index)
        if state is None:
            state = _ToolCallState(tool_call_id, tool_name)
            self._calls[index] = state
            self._parts.append(state)
        return state

    def response(self) -> Response:
        content: list[ContentBlock] = []
        for part in self._parts:
            if isinstance(part, _ToolCallState):
                content.append(part.block())
            elif isinstance(part, _TextState):
                text = "".join(part.chunks)
                if part.kind == "text" and text:
                    content.append(TextBlock(text=text))
                elif part.kind == "reasoning" and (text or part.signature):
                    content.append(ReasoningBlock(text=text, signature=part.signature))
            else:
                content.append(part)

        finish = self._finish or FinishEvent()
        return Response(
            content=content,
            finish_reason=finish.finish_reason,
            usage=finish.usage,
            provider_metadata=finish.provider_metadata,
            response_info=self._info,
        )


async def collect_stream(events: EventStream) -> Response:
    """Consume *events* completely and return the accumulated response."""
    collector = StreamCollector()
    async with events:
        async for event in events:
            collector.add(event)
    return collector.response()
