"""Lookup of vendor codecs by provider name."""

from __future__ import annotations

from unillm.api.errors import NoSuchProviderError
from unillm.codec.anthropic import AnthropicCodec
from unillm.codec.base import Codec
from unillm.codec.openai import OpenAICodec


def get_codec(provider: str) -> Codec:
    """Return the codec for *provider* (``"anthropic"`` or ``"openai"``).

    Raises:
        NoSuchProviderError: If no codec is registered under that name.
    """
    mapping: dict[str, Codec] = {
        "anthropic": AnthropicCodec(),
        "openai": OpenAICodec(),
    }
    codec = mapping.get(provider)
    if codec is None:
        raise NoSuchProviderError(provider)
    return codec


def providers() -> list[str]:
    return ["anthropic", "openai"]
