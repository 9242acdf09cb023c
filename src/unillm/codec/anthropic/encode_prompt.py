"""Unified messages -> Anthropic Messages API ``system`` and ``messages``."""

from __future__ import annotations

import base64
import json
import posixpath
from collections.abc import Sequence
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, Field

from unillm.api.content import (
    BaseBlock,
    ContentBlock,
    FileBlock,
    ImageBlock,
    ReasoningBlock,
    RedactedReasoningBlock,
    TextBlock,
    ToolCallBlock,
    ToolResultBlock,
)
from unillm.api.errors import InvalidPromptError, JSONParseError, UnsupportedFunctionalityError
from unillm.api.messages import (
    AssistantMessage,
    BaseMessage,
    SystemMessage,
    ToolMessage,
    UserMessage,
)
from unillm.codec.anthropic.metadata import get_anthropic_metadata
from unillm.codec.base import media_source, require_tool_call_id
from unillm.codec.normalize import merge_messages

PDF_BETA = "pdfs-2024-09-25"
DEFAULT_IMAGE_MEDIA_TYPE = "image/jpeg"


class AnthropicPrompt(BaseModel):
    """The prompt-derived part of a Messages API request."""

    system: list[dict[str, Any]] = Field(default_factory=lambda: list[dict[str, Any]]())
    messages: list[dict[str, Any]] = Field(default_factory=lambda: list[dict[str, Any]]())
    betas: list[str] = Field(default_factory=lambda: list[str]())


def encode_prompt(messages: Sequence[BaseMessage]) -> AnthropicPrompt:
    """Merge and encode *messages*.

    System messages become top-level ``system`` blocks and must all come
    before the conversation starts.  Tool results are sent as ``user``
    messages, which is where the API expects them.

    Raises:
        InvalidPromptError: On misplaced system messages, unknown message
            or block types and ill-formed blocks.
    """
    prompt = AnthropicPrompt()
    seen_non_system = False

    for message in merge_messages(messages):
        if isinstance(message, SystemMessage):
            if seen_non_system and prompt.system:
                msg = "multiple system messages separated by user/assistant messages are not supported"
                raise InvalidPromptError(msg, prompt=messages)
            prompt.system.append(_with_cache_control(_text(message.content), message))
        elif isinstance(message, UserMessage):
            seen_non_system = True
            content = [_encode_user_block(b, prompt.betas) for b in message.content]
            prompt.messages.append({"role": "user", "content": content})
        elif isinstance(message, AssistantMessage):
            seen_non_system = True
            content = [_encode_assistant_block(b) for b in message.content]
            prompt.messages.append({"role": "assistant", "content": content})
        elif isinstance(message, ToolMessage):
            seen_non_system = True
            content = [_encode_tool_result(b) for b in message.content]
            prompt.messages.append({"role": "user", "content": content})
        else:
            msg = f"unsupported message type: {type(message).__name__}"
            raise InvalidPromptError(msg, prompt=messages)

    return prompt


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


def _text(text: str) -> dict[str, Any]:
    return {"type": "text", "text": text}


def _with_cache_control(param: dict[str, Any], source: BaseBlock | BaseMessage) -> dict[str, Any]:
    metadata = get_anthropic_metadata(source)
    if metadata is not None and metadata.cache_control == "ephemeral":
        param["cache_control"] = {"type": "ephemeral"}
    return param


def _encode_user_block(block: ContentBlock, betas: list[str]) -> dict[str, Any]:
    if isinstance(block, TextBlock):
        return _with_cache_control(_text(block.text), block)
    if isinstance(block, ImageBlock):
        return encode_image(block)
    if isinstance(block, FileBlock):
        return _encode_file(block, betas)
    msg = f"unsupported user content block type: {block.type}"
    raise InvalidPromptError(msg, prompt=block)


def encode_image(block: ImageBlock) -> dict[str, Any]:
    if media_source(block) == "url":
        source: dict[str, Any] = {"type": "url", "url": block.url}
    else:
        assert block.data is not None
        source = {
            "type": "base64",
            "media_type": block.media_type or DEFAULT_IMAGE_MEDIA_TYPE,
            "data": base64.b64encode(block.data).decode("ascii"),
        }
    return _with_cache_control({"type": "image", "source": source}, block)


def _is_pdf_url(url: str) -> bool:
    path = urlparse(url).path
    return posixpath.splitext(path)[1].lower() == ".pdf"


def _encode_file(block: FileBlock, betas: list[str]) -> dict[str, Any]:
    is_pdf = block.media_type == "application/pdf"

    if media_source(block) == "url":
        assert block.url is not None
        is_pdf = is_pdf or _is_pdf_url(block.url)
        if is_pdf:
            source: dict[str, Any] = {"type": "url", "url": block.url}
        else:
            source = {"type": "text", "media_type": "text/plain", "data": block.url}
    else:
        assert block.data is not None
        if is_pdf:
            source = {
                "type": "base64",
                "media_type": "application/pdf",
                "data": base64.b64encode(block.data).decode("ascii"),
            }
        elif block.media_type in (None, "", "text/plain"):
            source = {
                "type": "text",
                "media_type": "text/plain",
                "data": block.data.decode("utf-8"),
            }
        else:
            raise UnsupportedFunctionalityError(
                "file-media-type",
                f"unsupported media type for file block: {block.media_type}",
            )

    if is_pdf:
        betas.append(PDF_BETA)

    param: dict[str, Any] = {"type": "document", "source": source}
    if block.filename:
        param["title"] = block.filename
    return _with_cache_control(param, block)


def _encode_assistant_block(block: ContentBlock) -> dict[str, Any]:
    if isinstance(block, TextBlock):
        return _with_cache_control(_text(block.text), block)
    if isinstance(block, ToolCallBlock):
        try:
            tool_input = block.parsed_args()
        except JSONParseError as exc:
            msg = f"tool call {block.tool_call_id} has malformed arguments"
            raise InvalidPromptError(msg, prompt=block) from exc
        param = {
            "type": "tool_use",
            "id": block.tool_call_id,
            "name": block.tool_name,
            "input": tool_input,
        }
        return _with_cache_control(param, block)
    if isinstance(block, ReasoningBlock):
        return {"type": "thinking", "thinking": block.text, "signature": block.signature or ""}
    if isinstance(block, RedactedReasoningBlock):
        return {"type": "redacted_thinking", "data": block.data}
    msg = f"unsupported assistant content block type: {block.type}"
    raise InvalidPromptError(msg, prompt=block)


def _encode_tool_result(block: ToolResultBlock) -> dict[str, Any]:
    tool_call_id = require_tool_call_id(block)

    if block.content is not None:
        content: list[dict[str, Any]] = []
        for part in block.content:
            if isinstance(part, TextBlock):
                content.append(_with_cache_control(_text(part.text), part))
            elif isinstance(part, ImageBlock):
                content.append(encode_image(part))
            else:
                msg = f"unsupported tool result content type: {part.type}"
                raise InvalidPromptError(msg, prompt=block)
    else:
        content = [_text(_result_text(block.result))]

    param: dict[str, Any] = {
        "type": "tool_result",
        "tool_use_id": tool_call_id,
        "content": content,
        "is_error": block.is_error,
    }
    return _with_cache_control(param, block)


def _result_text(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result)
