"""Language models: a codec plus a transport behind one async interface."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from unillm.api.messages import BaseMessage
from unillm.api.options import CallOptions
from unillm.api.response import RequestInfo, Response
from unillm.api.stream import EventStream, StreamResponse
from unillm.codec.base import Codec, EncodedRequest
from unillm.providers.config import ProviderConfig
from unillm.providers.transport import HTTPTransport
from unillm.utils.telemetry import (
    ATTR_MODEL,
    ATTR_PROVIDER,
    ATTR_STREAMING,
    ATTR_WARNINGS,
    get_tracer,
    record_response,
)

logger = logging.getLogger(__name__)

_tracer = get_tracer(__name__)


@runtime_checkable
class LanguageModel(Protocol):
    """Anything that can answer a prompt, whole or streamed."""

    @property
    def provider(self) -> str: ...

    @property
    def model_id(self) -> str: ...

    async def generate(
        self, messages: Sequence[BaseMessage], options: CallOptions | None = None
    ) -> Response: ...

    async def stream(
        self, messages: Sequence[BaseMessage], options: CallOptions | None = None
    ) -> StreamResponse: ...


class CodecModel:
    """A :class:`LanguageModel` for a vendor HTTP API.

    Subclasses pick the codec, the endpoint path and the default config.
    Encoding happens before any I/O, so prompt and argument errors raise
    without touching the network.
    """

    path: str = ""

    def __init__(
        self,
        model_id: str,
        codec: Codec,
        *,
        transport: HTTPTransport,
    ) -> None:
        self._model_id = model_id
        self.codec = codec
        self.transport = transport

    @property
    def provider(self) -> str:
        return self.codec.provider

    @property
    def model_id(self) -> str:
        return self._model_id

    @classmethod
    def _transport(
        cls, config: ProviderConfig | None, transport: HTTPTransport | None, default: type[ProviderConfig]
    ) -> HTTPTransport:
        if transport is not None:
            return transport
        return HTTPTransport(config or default())  # pyright: ignore[reportCallIssue]

    async def generate(
        self, messages: Sequence[BaseMessage], options: CallOptions | None = None
    ) -> Response:
        """Encode, send and decode one call.

        Warnings collected while encoding are attached to the response.
        """
        with _tracer.start_as_current_span("model.generate") as span:
            span.set_attribute(ATTR_MODEL, self.model_id)
            span.set_attribute(ATTR_PROVIDER, self.provider)
            span.set_attribute(ATTR_STREAMING, False)

            request = self.codec.encode(self.model_id, messages, options)
            self._log_warnings(request)
            span.set_attribute(ATTR_WARNINGS, len(request.warnings))

            raw = await self.transport.send(self.path, request.body, request.headers)
            response = self.codec.decode(raw)
            response.warnings = [*request.warnings, *response.warnings]
            response.request_info = RequestInfo(body=json.dumps(request.body))

            record_response(span, response)
            return response

    async def stream(
        self, messages: Sequence[BaseMessage], options: CallOptions | None = None
    ) -> StreamResponse:
        """Open a streaming call.

        The returned stream owns the HTTP response; close it (or exhaust
        it) to release the connection.
        """
        with _tracer.start_as_current_span("model.stream") as span:
            span.set_attribute(ATTR_MODEL, self.model_id)
            span.set_attribute(ATTR_PROVIDER, self.provider)
            span.set_attribute(ATTR_STREAMING, True)

            request = self.codec.encode_stream(self.model_id, messages, options)
            self._log_warnings(request)
            span.set_attribute(ATTR_WARNINGS, len(request.warnings))

            source = await self.transport.stream(self.path, request.body, request.headers)
            events = EventStream(source, self.codec.stream_decoder())
            return StreamResponse(
                events,
                warnings=request.warnings,
                request_info=RequestInfo(body=json.dumps(request.body)),
            )

    async def aclose(self) -> None:
        await self.transport.aclose()

    def _log_warnings(self, request: EncodedRequest) -> None:
        for warning in request.warnings:
            logger.debug("%s/%s call warning: %s", self.provider, self.model_id, warning)
