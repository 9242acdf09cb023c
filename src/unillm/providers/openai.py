"""OpenAI Responses API model."""

from __future__ import annotations

from unillm.codec.openai import OpenAICodec
from unillm.providers.base import CodecModel
from unillm.providers.config import OpenAIConfig
from unillm.providers.transport import HTTPTransport


class OpenAIModel(CodecModel):
    """OpenAI models through ``POST /v1/responses``."""

    path = "/responses"

    def __init__(
        self,
        model_id: str,
        *,
        config: OpenAIConfig | None = None,
        transport: HTTPTransport | None = None,
    ) -> None:
        super().__init__(
            model_id,
            OpenAICodec(),
            transport=self._transport(config, transport, OpenAIConfig),
        )
