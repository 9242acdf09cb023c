"""AnthropicCodec: the Anthropic Messages API behind the :class:`Codec` protocol."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from unillm.codec.anthropic.decode import decode_response
from unillm.codec.anthropic.decode_stream import AnthropicStreamDecoder
from unillm.codec.anthropic.encode_params import encode_params
from unillm.codec.anthropic.metadata import PROVIDER

if TYPE_CHECKING:
    from unillm.api.messages import BaseMessage
    from unillm.api.options import CallOptions
    from unillm.api.response import Response
    from unillm.codec.base import EncodedRequest


class AnthropicCodec:
    """Stateless translator between unified types and the Messages API."""

    provider = PROVIDER

    def encode(
        self,
        model_id: str,
        messages: Sequence[BaseMessage],
        options: CallOptions | None = None,
    ) -> EncodedRequest:
        return encode_params(model_id, messages, options)

    def encode_stream(
        self,
        model_id: str,
        messages: Sequence[BaseMessage],
        options: CallOptions | None = None,
    ) -> EncodedRequest:
        request = self.encode(model_id, messages, options)
        request.body["stream"] = True
        return request

    def decode(self, raw: dict[str, Any] | None) -> Response:
        return decode_response(raw)

    def stream_decoder(self) -> AnthropicStreamDecoder:
        return AnthropicStreamDecoder()
