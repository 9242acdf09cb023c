"""OpenAI entries of the provider metadata bag (namespace ``"openai"``).

A single model serves requests (call options), individual blocks and
responses; each field documents where it is read or written.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from unillm.api.metadata import HasProviderMetadata, ProviderMetadata, get_metadata

PROVIDER = "openai"


class OpenAIUsage(BaseModel):
    input_tokens: int = 0
    cached_tokens: int = 0
    output_tokens: int = 0
    reasoning_tokens: int = 0


class ComputerSafetyCheck(BaseModel):
    """A pending safety check attached to a computer call."""

    id: str
    code: str | None = None
    message: str | None = None


class OpenAIMetadata(BaseModel):
    # -- requests (call options) --
    parallel_tool_calls: bool | None = None
    previous_response_id: str | None = None
    store: bool | None = None
    user: str | None = None
    instructions: str | None = None
    strict_schemas: bool | None = None
    """Strict JSON schema adherence for response formats and tools.  Defaults to true."""
    reasoning_effort: str | None = None
    reasoning_summary: str | None = None

    # -- blocks --
    image_detail: str | None = None
    """``high``, ``low`` or ``auto`` on image blocks."""
    filename: str | None = None
    item_id: str | None = None
    """Output item id of a reasoning block, needed to send it back."""

    # -- responses --
    response_id: str | None = None
    usage: OpenAIUsage | None = None
    computer_safety_checks: list[ComputerSafetyCheck] = Field(
        default_factory=lambda: list[ComputerSafetyCheck]()
    )


def get_openai_metadata(
    source: HasProviderMetadata | ProviderMetadata | None,
) -> OpenAIMetadata | None:
    return get_metadata(PROVIDER, source, OpenAIMetadata)
