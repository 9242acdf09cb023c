"""Unified response types: finish reasons, usage, warnings and the response."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from unillm.api.content import (
    ContentBlock,
    Reasoning,
    SourceBlock,
    TextBlock,
    ToolCallBlock,
)
from unillm.api.metadata import ProviderMetadata
from unillm.api.tools import ToolDefinition


class FinishReason(str, Enum):
    """Why the model stopped generating."""

    STOP = "stop"
    LENGTH = "length"
    CONTENT_FILTER = "content-filter"
    TOOL_CALLS = "tool-calls"
    ERROR = "error"
    OTHER = "other"
    UNKNOWN = "unknown"


class Usage(BaseModel):
    """Token accounting for one call."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    reasoning_tokens: int | None = None
    cached_input_tokens: int | None = None


# ---------------------------------------------------------------------------
# Warnings
# ---------------------------------------------------------------------------


class CallWarning(BaseModel):
    """A non-fatal problem found while preparing a call.

    ``setting`` names the :class:`~unillm.api.options.CallOptions` field that
    was dropped, ``tool`` the tool that could not be sent.
    """

    type: Literal["unsupported-setting", "unsupported-tool", "other"]
    setting: str | None = None
    tool: ToolDefinition | None = None
    details: str | None = None
    message: str | None = None

    @classmethod
    def unsupported_setting(cls, setting: str, details: str | None = None) -> CallWarning:
        return cls(type="unsupported-setting", setting=setting, details=details)

    @classmethod
    def unsupported_tool(cls, tool: ToolDefinition, details: str | None = None) -> CallWarning:
        return cls(type="unsupported-tool", tool=tool, details=details)

    @classmethod
    def other(cls, message: str) -> CallWarning:
        return cls(type="other", message=message)


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------


class RequestInfo(BaseModel):
    """The raw request body that was sent, for debugging."""

    body: str = ""


class ResponseInfo(BaseModel):
    """Identifiers the vendor attached to its response."""

    id: str | None = None
    timestamp: datetime | None = None
    model_id: str | None = None


class Response(BaseModel):
    """The decoded result of a non-streaming call."""

    content: list[ContentBlock] = Field(default_factory=lambda: list[ContentBlock]())
    finish_reason: FinishReason = FinishReason.UNKNOWN
    usage: Usage = Field(default_factory=Usage)
    warnings: list[CallWarning] = Field(default_factory=lambda: list[CallWarning]())
    provider_metadata: ProviderMetadata = Field(default_factory=ProviderMetadata)
    request_info: RequestInfo | None = None
    response_info: ResponseInfo | None = None

    @property
    def text(self) -> str:
        """All text blocks joined together."""
        return "".join(b.text for b in self.content if isinstance(b, TextBlock))

    @property
    def tool_calls(self) -> list[ToolCallBlock]:
        return [b for b in self.content if isinstance(b, ToolCallBlock)]

    @property
    def reasoning(self) -> list[Reasoning]:
        return [b for b in self.content if isinstance(b, Reasoning)]

    @property
    def sources(self) -> list[SourceBlock]:
        return [b for b in self.content if isinstance(b, SourceBlock)]
