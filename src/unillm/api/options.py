"""Per-call generation options."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from unillm.api.metadata import ProviderMetadata
from unillm.api.tools import ToolChoice, ToolDefinition


class ResponseFormat(BaseModel):
    """Requested output format.

    ``json`` may carry a JSON schema plus a name/description that vendors
    use as guidance.
    """

    type: Literal["text", "json"] = "text"
    json_schema: dict[str, Any] | None = None
    name: str | None = None
    description: str | None = None


class CallOptions(BaseModel):
    """Sampling settings, tools and vendor knobs for one call.

    Vendors silently lacking a setting report it as an
    ``unsupported-setting`` warning rather than failing.
    """

    max_output_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None
    top_k: int | None = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None
    stop_sequences: list[str] = Field(default_factory=lambda: list[str]())
    seed: int | None = None
    headers: dict[str, str] = Field(default_factory=lambda: dict[str, str]())
    tools: list[ToolDefinition] = Field(default_factory=lambda: list[ToolDefinition]())
    tool_choice: ToolChoice | None = None
    response_format: ResponseFormat | None = None
    provider_metadata: ProviderMetadata = Field(default_factory=ProviderMetadata)
