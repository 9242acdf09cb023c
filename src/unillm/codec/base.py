"""Codec protocol: the contract every vendor codec satisfies.

A codec converts between the unified model and one vendor's wire format.
It holds no per-call state; streaming state lives in the
:class:`~unillm.api.stream.StreamDecoder` returned by
:meth:`Codec.stream_decoder`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any, Literal, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from unillm.api.errors import InvalidPromptError
from unillm.api.response import CallWarning

if TYPE_CHECKING:
    from unillm.api.content import FileBlock, ImageBlock, ToolResultBlock
    from unillm.api.messages import BaseMessage
    from unillm.api.options import CallOptions
    from unillm.api.response import Response
    from unillm.api.stream import StreamDecoder


class EncodedRequest(BaseModel):
    """A vendor request ready for the transport.

    ``betas`` lists the feature-gate tokens the request needs, already
    de-duplicated; vendors that take them as a header also have them in
    ``headers``.
    """

    body: dict[str, Any]
    headers: dict[str, str] = Field(default_factory=lambda: dict[str, str]())
    warnings: list[CallWarning] = Field(default_factory=lambda: list[CallWarning]())
    betas: list[str] = Field(default_factory=lambda: list[str]())


@runtime_checkable
class Codec(Protocol):
    """Bidirectional translation for a single vendor."""

    provider: str

    def encode(
        self,
        model_id: str,
        messages: Sequence[BaseMessage],
        options: CallOptions | None = None,
    ) -> EncodedRequest:
        """Build the vendor request.  Fatal problems raise, others warn."""
        ...

    def encode_stream(
        self,
        model_id: str,
        messages: Sequence[BaseMessage],
        options: CallOptions | None = None,
    ) -> EncodedRequest:
        """Like :meth:`encode`, for a streaming call."""
        ...

    def decode(self, raw: dict[str, Any] | None) -> Response:
        """Convert a complete vendor response."""
        ...

    def stream_decoder(self) -> StreamDecoder:
        """Return fresh decoding state for one streaming call."""
        ...


# ---------------------------------------------------------------------------
# Helpers shared by the vendor encoders
# ---------------------------------------------------------------------------


def media_source(block: ImageBlock | FileBlock) -> Literal["url", "data"]:
    """Tell whether *block* is addressed by URL or inline data.

    Validation already rejects ill-formed blocks, but blocks built with
    ``model_construct`` skip it.
    """
    has_url = bool(block.url)
    has_data = block.data is not None
    if has_url == has_data:
        msg = f"{block.type} block must have exactly one of url or data"
        raise InvalidPromptError(msg, prompt=block)
    return "url" if has_url else "data"


def require_tool_call_id(block: ToolResultBlock) -> str:
    if not block.tool_call_id:
        msg = "tool result block has an empty tool_call_id"
        raise InvalidPromptError(msg, prompt=block)
    return block.tool_call_id


def unique(items: Iterable[str]) -> list[str]:
    """De-duplicate *items*, keeping first-seen order."""
    return list(dict.fromkeys(items))
