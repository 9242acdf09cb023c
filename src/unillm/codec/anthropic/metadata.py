"""Anthropic entries of the provider metadata bag (namespace ``"anthropic"``)."""

from __future__ import annotations

from pydantic import BaseModel

from unillm.api.metadata import HasProviderMetadata, ProviderMetadata, get_metadata

PROVIDER = "anthropic"


class ThinkingConfig(BaseModel):
    """Extended-thinking settings.

    ``budget_tokens`` is how many tokens the model may spend reasoning; the
    API requires at least 1024 and less than ``max_tokens``.
    """

    enabled: bool = False
    budget_tokens: int = 0


class AnthropicUsage(BaseModel):
    """Usage counters as reported by the API, cache counters included."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0


class AnthropicMetadata(BaseModel):
    """Request knobs and response extras for Anthropic.

    ``cache_control`` (``"ephemeral"``) marks a message or block as a prompt
    cache breakpoint.  ``thinking`` belongs on call options.  ``usage`` is
    filled in on responses.
    """

    cache_control: str | None = None
    thinking: ThinkingConfig | None = None
    usage: AnthropicUsage | None = None


def get_anthropic_metadata(
    source: HasProviderMetadata | ProviderMetadata | None,
) -> AnthropicMetadata | None:
    return get_metadata(PROVIDER, source, AnthropicMetadata)
