"""In-memory language model for tests and offline development."""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence
from typing import Any

from unillm.api.errors import UnillmError
from unillm.api.messages import BaseMessage
from unillm.api.options import CallOptions
from unillm.api.response import Response
from unillm.api.stream import EventStream, FinishEvent, StreamEvent, StreamResponse


class _ReplaySource:
    """Chunk source whose chunks are already-decoded stream events."""

    def __init__(self, events: Sequence[StreamEvent]) -> None:
        self._events = deque(events)
        self.closed = False

    def __aiter__(self) -> _ReplaySource:
        return self

    async def __anext__(self) -> dict[str, Any]:
        if self.closed or not self._events:
            raise StopAsyncIteration
        return {"event": self._events.popleft()}

    async def aclose(self) -> None:
        self.closed = True


class _PassThroughDecoder:
    def __init__(self) -> None:
        self._finish: FinishEvent | None = None

    def decode(self, chunk: dict[str, Any]) -> list[StreamEvent]:
        event: StreamEvent = chunk["event"]
        if isinstance(event, FinishEvent):
            self._finish = event
            return []
        return [event]

    def finish(self) -> FinishEvent:
        return self._finish or FinishEvent()


class MockLanguageModel:
    """Replays queued results and records every call.

    Queue :class:`Response` objects for :meth:`generate` and event lists for
    :meth:`stream`.  An exception in either queue is raised instead.

    Usage::

        model = MockLanguageModel(responses=[Response(content=[TextBlock(text="hi")])])
        await model.generate([UserMessage.of_text("hello")])
        assert model.calls[0].messages[0].role == "user"
    """

    class Call:
        def __init__(self, messages: Sequence[BaseMessage], options: CallOptions | None) -> None:
            self.messages = list(messages)
            self.options = options

    def __init__(
        self,
        *,
        responses: Sequence[Response | Exception] = (),
        streams: Sequence[Sequence[StreamEvent] | Exception] = (),
        provider: str = "mock",
        model_id: str = "mock-model",
    ) -> None:
        self._responses: deque[Response | Exception] = deque(responses)
        self._streams: deque[Sequence[StreamEvent] | Exception] = deque(streams)
        self._provider = provider
        self._model_id = model_id
        self.calls: list[MockLanguageModel.Call] = []

    @property
    def provider(self) -> str:
        return self._provider

    @property
    def model_id(self) -> str:
        return self._model_id

    async def generate(
        self, messages: Sequence[BaseMessage], options: CallOptions | None = None
    ) -> Response:
        self.calls.append(self.Call(messages, options))
        if not self._responses:
            msg = "MockLanguageModel has no queued responses"
            raise UnillmError(msg)
        result = self._responses.popleft()
        if isinstance(result, Exception):
            raise result
        return result

    async def stream(
        self, messages: Sequence[BaseMessage], options: CallOptions | None = None
    ) -> StreamResponse:
        self.calls.append(self.Call(messages, options))
        if not self._streams:
            msg = "MockLanguageModel has no queued streams"
            raise UnillmError(msg)
        result = self._streams.popleft()
        if isinstance(result, Exception):
            raise result
        return StreamResponse(EventStream(_ReplaySource(result), _PassThroughDecoder()))
