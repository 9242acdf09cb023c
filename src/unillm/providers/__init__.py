"""Language models backed by vendor HTTP APIs."""

from unillm.api.errors import NoSuchProviderError
from unillm.providers.anthropic import AnthropicModel
from unillm.providers.base import CodecModel, LanguageModel
from unillm.providers.config import AnthropicConfig, OpenAIConfig, ProviderConfig
from unillm.providers.mock import MockLanguageModel
from unillm.providers.openai import OpenAIModel
from unillm.providers.transport import HTTPTransport, SSEChunkSource

__all__ = [
    "AnthropicConfig",
    "AnthropicModel",
    "CodecModel",
    "HTTPTransport",
    "LanguageModel",
    "MockLanguageModel",
    "OpenAIConfig",
    "OpenAIModel",
    "ProviderConfig",
    "SSEChunkSource",
    "get_model",
]


def get_model(provider: str, model_id: str) -> LanguageModel:
    """Build the model for *provider* with its default configuration.

    Raises:
        NoSuchProviderError: For providers other than anthropic and openai.
    """
    if provider == "anthropic":
        return AnthropicModel(model_id)
    if provider == "openai":
        return OpenAIModel(model_id)
    raise NoSuchProviderError(provider)
