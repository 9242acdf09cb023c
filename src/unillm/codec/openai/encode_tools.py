"""Unified tools and tool choice -> Responses API ``tools`` / ``tool_choice``."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, Field, ValidationError

from unillm.api.errors import InvalidArgumentError
from unillm.api.response import CallWarning
from unillm.api.tools import FunctionTool, ProviderDefinedTool, ToolChoice, ToolDefinition
from unillm.codec.openai.jsonschema import encode_schema
from unillm.codec.openai.tools import (
    COMPUTER_USE_TOOL_ID,
    FILE_SEARCH_TOOL_ID,
    HOSTED_TOOL_IDS,
    WEB_SEARCH_TOOL_ID,
    ComputerUseToolArgs,
    FileSearchToolArgs,
    WebSearchToolArgs,
)

logger = logging.getLogger(__name__)

A = TypeVar("A", bound=BaseModel)


class OpenAITools(BaseModel):
    tools: list[dict[str, Any]] = Field(default_factory=lambda: list[dict[str, Any]]())
    tool_choice: str | dict[str, Any] | None = None
    warnings: list[CallWarning] = Field(default_factory=lambda: list[CallWarning]())


def encode_tools(
    tools: Sequence[ToolDefinition],
    tool_choice: ToolChoice | None,
    *,
    strict: bool = True,
) -> OpenAITools:
    result = OpenAITools()
    if not tools and tool_choice is None:
        return result

    for tool in tools:
        if isinstance(tool, FunctionTool):
            result.tools.append(encode_function_tool(tool, strict=strict))
        elif isinstance(tool, ProviderDefinedTool):
            param = encode_provider_tool(tool)
            if param is None:
                logger.warning("Dropping unsupported tool %s", tool.id)
                result.warnings.append(CallWarning.unsupported_tool(tool))
            else:
                result.tools.append(param)
        else:
            result.warnings.append(CallWarning.unsupported_tool(tool))

    result.tool_choice = encode_tool_choice(tool_choice)
    return result


def encode_function_tool(tool: FunctionTool, *, strict: bool = True) -> dict[str, Any]:
    param: dict[str, Any] = {
        "type": "function",
        "name": tool.name,
        "parameters": encode_schema(tool.input_schema, argument=f"tools[{tool.name}].input_schema"),
        "strict": strict,
    }
    if tool.description:
        param["description"] = tool.description
    return param


def _args(tool: ProviderDefinedTool, model: type[A]) -> A:
    try:
        return model.model_validate(tool.args)
    except ValidationError as exc:
        raise InvalidArgumentError(f"tools[{tool.id}].args", str(exc)) from exc


def encode_provider_tool(tool: ProviderDefinedTool) -> dict[str, Any] | None:
    """Encode a hosted tool, or return ``None`` for ids this encoder does not know."""
    if tool.id == FILE_SEARCH_TOOL_ID:
        file_search = _args(tool, FileSearchToolArgs)
        param: dict[str, Any] = {
            "type": "file_search",
            "vector_store_ids": file_search.vector_store_ids,
        }
        if file_search.max_num_results is not None:
            param["max_num_results"] = file_search.max_num_results
        return param

    if tool.id == WEB_SEARCH_TOOL_ID:
        web_search = _args(tool, WebSearchToolArgs)
        param = {"type": "web_search_preview"}
        if web_search.search_context_size:
            param["search_context_size"] = web_search.search_context_size
        if web_search.user_location is not None:
            param["user_location"] = {
                "type": "approximate",
                **web_search.user_location.model_dump(exclude_none=True),
            }
        return param

    if tool.id == COMPUTER_USE_TOOL_ID:
        computer = _args(tool, ComputerUseToolArgs)
        return {
            "type": "computer_use_preview",
            "display_width": computer.display_width,
            "display_height": computer.display_height,
            "environment": computer.environment,
        }

    return None


def encode_tool_choice(tool_choice: ToolChoice | None) -> str | dict[str, Any] | None:
    """``auto``, ``none`` and ``required`` pass through as strings.

    Forcing a specific tool uses the hosted ``{"type": <name>}`` form for
    OpenAI's own tools and ``{"type": "function", ...}`` otherwise.
    """
    if tool_choice is None:
        return None
    if tool_choice.type != "tool":
        return tool_choice.type
    if not tool_choice.tool_name:
        raise InvalidArgumentError("tool_choice", "tool choice 'tool' requires a tool name")
    if tool_choice.tool_name in HOSTED_TOOL_IDS:
        return {"type": tool_choice.tool_name}
    return {"type": "function", "name": tool_choice.tool_name}
