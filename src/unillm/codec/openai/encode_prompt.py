"""Unified messages -> OpenAI Responses API ``input`` items."""

from __future__ import annotations

import base64
import json
from collections.abc import Sequence
from typing import Any, Literal

from pydantic import BaseModel, Field

from unillm.api.content import (
    ContentBlock,
    FileBlock,
    ImageBlock,
    ReasoningBlock,
    TextBlock,
    ToolCallBlock,
    ToolResultBlock,
)
from unillm.api.errors import InvalidPromptError, UnsupportedFunctionalityError
from unillm.api.messages import (
    AssistantMessage,
    BaseMessage,
    SystemMessage,
    ToolMessage,
    UserMessage,
)
from unillm.api.response import CallWarning
from unillm.codec.base import media_source, require_tool_call_id
from unillm.codec.normalize import merge_messages
from unillm.codec.openai.metadata import get_openai_metadata
from unillm.codec.openai.tools import COMPUTER_USE_TOOL_ID

SystemMessageMode = Literal["system", "developer", "remove"]

DEFAULT_FILENAME = "file.pdf"
_IMAGE_DETAILS = ("high", "low", "auto")


class ModelConfig(BaseModel):
    """Model-family quirks that change how a prompt is encoded."""

    is_reasoning_model: bool = False
    system_message_mode: SystemMessageMode = "system"

    @classmethod
    def for_model(cls, model_id: str) -> ModelConfig:
        """o-series models reason; o1-mini and o1-preview take no system prompt."""
        if model_id.startswith("o"):
            if model_id.startswith(("o1-mini", "o1-preview")):
                return cls(is_reasoning_model=True, system_message_mode="remove")
            return cls(is_reasoning_model=True, system_message_mode="developer")
        return cls()


class OpenAIPrompt(BaseModel):
    input: list[dict[str, Any]] = Field(default_factory=lambda: list[dict[str, Any]]())
    warnings: list[CallWarning] = Field(default_factory=lambda: list[CallWarning]())


def encode_prompt(messages: Sequence[BaseMessage], config: ModelConfig | None = None) -> OpenAIPrompt:
    """Merge and encode *messages* as Responses API input items.

    Assistant messages fan out into one item per block because text, tool
    calls and reasoning are separate item types in this API.
    """
    config = config or ModelConfig()
    prompt = OpenAIPrompt()

    for message in merge_messages(messages):
        if isinstance(message, SystemMessage):
            if config.system_message_mode == "remove":
                prompt.warnings.append(
                    CallWarning.other("system messages are removed for this model")
                )
                continue
            prompt.input.append({"role": config.system_message_mode, "content": message.content})
        elif isinstance(message, UserMessage):
            content = [encode_user_block(b) for b in message.content]
            prompt.input.append({"role": "user", "content": content})
        elif isinstance(message, AssistantMessage):
            prompt.input.extend(_encode_assistant(message, prompt.warnings))
        elif isinstance(message, ToolMessage):
            prompt.input.extend(encode_tool_result(b) for b in message.content)
        else:
            msg = f"unsupported message type: {type(message).__name__}"
            raise InvalidPromptError(msg, prompt=messages)

    return prompt


# ---------------------------------------------------------------------------
# User content
# ---------------------------------------------------------------------------


def encode_user_block(block: ContentBlock) -> dict[str, Any]:
    if isinstance(block, TextBlock):
        return {"type": "input_text", "text": block.text}
    if isinstance(block, ImageBlock):
        return encode_image(block)
    if isinstance(block, FileBlock):
        return encode_file(block)
    msg = f"unsupported user content block type: {block.type}"
    raise InvalidPromptError(msg, prompt=block)


def _data_url(media_type: str, data: bytes) -> str:
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


def encode_image(block: ImageBlock) -> dict[str, Any]:
    if media_source(block) == "url":
        image_url = block.url
    else:
        assert block.data is not None
        image_url = _data_url(block.media_type or "image/jpeg", block.data)

    param: dict[str, Any] = {"type": "input_image", "image_url": image_url}
    metadata = get_openai_metadata(block)
    if metadata is not None and metadata.image_detail:
        if metadata.image_detail not in _IMAGE_DETAILS:
            msg = (
                f"invalid image detail level: {metadata.image_detail} "
                "(must be one of 'high', 'low', or 'auto')"
            )
            raise InvalidPromptError(msg, prompt=block)
        param["detail"] = metadata.image_detail
    return param


def encode_file(block: FileBlock) -> dict[str, Any]:
    if media_source(block) == "url":
        raise UnsupportedFunctionalityError(
            "file-url", "file URLs in user messages are not supported"
        )
    if block.media_type != "application/pdf":
        raise UnsupportedFunctionalityError(
            "file-media-type", "only PDF files are supported in user messages"
        )
    assert block.data is not None

    metadata = get_openai_metadata(block)
    filename = block.filename or (metadata.filename if metadata else None) or DEFAULT_FILENAME
    return {
        "type": "input_file",
        "filename": filename,
        "file_data": _data_url(block.media_type, block.data),
    }


# ---------------------------------------------------------------------------
# Assistant content
# ---------------------------------------------------------------------------


def _encode_assistant(message: AssistantMessage, warnings: list[CallWarning]) -> list[dict[str, Any]]:
    items: list[dict[str, Any]] = []
    for block in message.content:
        if isinstance(block, TextBlock):
            items.append(
                {
                    "role": "assistant",
                    "content": [{"type": "output_text", "text": block.text}],
                }
            )
        elif isinstance(block, ToolCallBlock):
            if not block.tool_name:
                msg = "tool call is missing tool name"
                raise InvalidPromptError(msg, prompt=block)
            items.append(
                {
                    "type": "function_call",
                    "call_id": block.tool_call_id,
                    "name": block.tool_name,
                    "arguments": block.args,
                }
            )
        elif isinstance(block, ReasoningBlock):
            item = _encode_reasoning(block)
            if item is None:
                warnings.append(
                    CallWarning.other("reasoning blocks without an OpenAI item id are not sent")
                )
            else:
                items.append(item)
        else:
            msg = f"unsupported content block type in assistant message: {block.type}"
            raise InvalidPromptError(msg, prompt=block)
    return items


def _encode_reasoning(block: ReasoningBlock) -> dict[str, Any] | None:
    metadata = get_openai_metadata(block)
    if metadata is None or not metadata.item_id:
        return None
    summary = [{"type": "summary_text", "text": block.text}] if block.text else []
    return {"type": "reasoning", "id": metadata.item_id, "summary": summary}


# ---------------------------------------------------------------------------
# Tool results
# ---------------------------------------------------------------------------


def encode_tool_result(block: ToolResultBlock) -> dict[str, Any]:
    call_id = require_tool_call_id(block)

    if block.tool_name in (COMPUTER_USE_TOOL_ID, "computer_use_preview"):
        return _encode_computer_result(block, call_id)

    if block.content is not None:
        output: Any = [encode_user_block(part) for part in block.content]
    else:
        output = json.dumps(block.result)
    return {"type": "function_call_output", "call_id": call_id, "output": output}


def _encode_computer_result(block: ToolResultBlock, call_id: str) -> dict[str, Any]:
    content = block.content or []
    if len(content) != 1 or not isinstance(content[0], ImageBlock):
        msg = "computer use tool result must hold exactly one image block"
        raise InvalidPromptError(msg, prompt=block)

    image = content[0]
    if media_source(image) == "url":
        image_url = image.url
    else:
        assert image.data is not None
        image_url = _data_url(image.media_type or "image/png", image.data)

    item: dict[str, Any] = {
        "type": "computer_call_output",
        "call_id": call_id,
        "output": {"type": "computer_screenshot", "image_url": image_url},
    }
    metadata = get_openai_metadata(block)
    if metadata is not None and metadata.computer_safety_checks:
        item["acknowledged_safety_checks"] = [
            check.model_dump(exclude_none=True) for check in metadata.computer_safety_checks
        ]
    return item
