"""Anthropic Messages API model."""

from __future__ import annotations

from unillm.codec.anthropic import AnthropicCodec
from unillm.providers.base import CodecModel
from unillm.providers.config import AnthropicConfig
from unillm.providers.transport import HTTPTransport


class AnthropicModel(CodecModel):
    """Claude models through ``POST /v1/messages``.

    Usage::

        model = AnthropicModel("claude-3-7-sonnet-latest")
        response = await model.generate([UserMessage.of_text("Hi")])
    """

    path = "/messages"

    def __init__(
        self,
        model_id: str,
        *,
        config: AnthropicConfig | None = None,
        transport: HTTPTransport | None = None,
    ) -> None:
        super().__init__(
            model_id,
            AnthropicCodec(),
            transport=self._transport(config, transport, AnthropicConfig),
        )
