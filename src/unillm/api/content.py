"""Content blocks: the typed units that make up message content.

Every block is tagged with a ``type`` string, which is both the JSON
discriminator and the dispatch key used by the vendor codecs.  Binary data is
held as ``bytes`` and serialized as base64 in JSON.
"""

from __future__ import annotations

import base64
import json
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    BeforeValidator,
    Field,
    PlainSerializer,
    model_validator,
)

from unillm.api.errors import JSONParseError
from unillm.api.metadata import ProviderMetadata


def _decode_base64(value: Any) -> Any:
    if isinstance(value, str):
        return base64.b64decode(value, validate=True)
    return value


def _encode_base64(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


Base64Data = Annotated[
    bytes,
    BeforeValidator(_decode_base64),
    PlainSerializer(_encode_base64, return_type=str, when_used="json"),
]
"""``bytes`` in memory, base64 text on the wire."""


class BaseBlock(BaseModel):
    """Fields shared by all content blocks."""

    provider_metadata: ProviderMetadata = Field(default_factory=ProviderMetadata)


# ---------------------------------------------------------------------------
# Media blocks
# ---------------------------------------------------------------------------


class TextBlock(BaseBlock):
    """Plain text."""

    type: Literal["text"] = "text"
    text: str


class _MediaBlock(BaseBlock):
    """A block addressed either by URL or by inline data, never both."""

    url: str | None = None
    data: Base64Data | None = None
    media_type: str | None = None

    @model_validator(mode="after")
    def _check_source(self) -> _MediaBlock:
        if (self.url is None) == (self.data is None):
            msg = f"{self.__class__.__name__} requires exactly one of url or data"
            raise ValueError(msg)
        return self


class ImageBlock(_MediaBlock):
    """An image, by URL or inline bytes."""

    type: Literal["image"] = "image"


class FileBlock(_MediaBlock):
    """A document, by URL or inline bytes.

    ``filename`` is only ever sent to the vendor; responses never echo it.
    """

    type: Literal["file"] = "file"
    filename: str | None = None


# ---------------------------------------------------------------------------
# Tool blocks
# ---------------------------------------------------------------------------


class ToolCallBlock(BaseBlock):
    """A tool invocation requested by the model.

    ``args`` is the raw JSON text produced by the model.  It is kept
    unparsed because model output is not guaranteed to be valid JSON.
    """

    type: Literal["tool-call"] = "tool-call"
    tool_call_id: str
    tool_name: str
    args: str = "{}"

    def parsed_args(self) -> Any:
        """Parse :attr:`args`, raising :class:`JSONParseError` on bad input."""
        try:
            return json.loads(self.args or "{}")
        except json.JSONDecodeError as exc:
            raise JSONParseError(self.args, exc) from exc


class ToolResultBlock(BaseBlock):
    """The outcome of a tool call.

    When ``content`` is set it supersedes ``result``; consumers must ignore
    ``result`` in that case.
    """

    type: Literal["tool-result"] = "tool-result"
    tool_call_id: str
    tool_name: str = ""
    result: Any = None
    is_error: bool = False
    content: list[ContentBlock] | None = None


# ---------------------------------------------------------------------------
# Reasoning and sources
# ---------------------------------------------------------------------------


class Reasoning(BaseBlock):
    """Marker base for blocks that carry model reasoning."""


class ReasoningBlock(Reasoning):
    """Visible reasoning text, optionally signed by the vendor."""

    type: Literal["reasoning"] = "reasoning"
    text: str
    signature: str | None = None


class RedactedReasoningBlock(Reasoning):
    """Reasoning the vendor returned in encrypted form."""

    type: Literal["redacted-reasoning"] = "redacted-reasoning"
    data: str


class SourceBlock(BaseBlock):
    """A source (usually a web citation) the model relied on."""

    type: Literal["source"] = "source"
    id: str
    url: str
    title: str | None = None


ContentBlock = Annotated[
    TextBlock
    | ImageBlock
    | FileBlock
    | ToolCallBlock
    | ToolResultBlock
    | ReasoningBlock
    | RedactedReasoningBlock
    | SourceBlock,
    Field(discriminator="type"),
]

ToolResultBlock.model_rebuild()
