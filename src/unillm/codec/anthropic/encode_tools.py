"""Unified tools and tool choice -> Anthropic ``tools`` / ``tool_choice``."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, Field, ValidationError

from unillm.api.errors import InvalidArgumentError, UnsupportedFunctionalityError
from unillm.api.response import CallWarning
from unillm.api.tools import FunctionTool, ProviderDefinedTool, ToolChoice, ToolDefinition
from unillm.codec.anthropic.tools import (
    BASH_TOOL_ID,
    COMPUTER_TOOL_ID,
    TEXT_EDITOR_TOOL_ID,
    BashToolArgs,
    ComputerToolArgs,
    TextEditorToolArgs,
)
from unillm.codec.base import unique
from unillm.codec.jsonschema import translate_schema

logger = logging.getLogger(__name__)

A = TypeVar("A", bound=BaseModel)

COMPUTER_USE_BETAS = {
    "20250124": "computer-use-2025-01-24",
    "20241022": "computer-use-2024-10-22",
}


class AnthropicTools(BaseModel):
    tools: list[dict[str, Any]] = Field(default_factory=lambda: list[dict[str, Any]]())
    tool_choice: dict[str, Any] | None = None
    betas: list[str] = Field(default_factory=lambda: list[str]())
    warnings: list[CallWarning] = Field(default_factory=lambda: list[CallWarning]())


def encode_tools(tools: Sequence[ToolDefinition], tool_choice: ToolChoice | None) -> AnthropicTools:
    """Encode the tool list and the tool-choice policy.

    Anthropic has no "none" tool choice, so ``none`` is simulated by sending
    no tools at all.  Betas and warnings gathered from the dropped tools are
    still returned.
    """
    result = AnthropicTools()
    if not tools and tool_choice is None:
        return result

    betas: list[str] = []
    for tool in tools:
        if isinstance(tool, FunctionTool):
            result.tools.append(encode_function_tool(tool))
        elif isinstance(tool, ProviderDefinedTool):
            param, tool_betas = encode_provider_tool(tool)
            betas.extend(tool_betas)
            if param is None:
                logger.warning("Dropping unsupported tool %s", tool.id)
                result.warnings.append(CallWarning.unsupported_tool(tool))
            else:
                result.tools.append(param)
        else:
            result.warnings.append(CallWarning.unsupported_tool(tool))
    result.betas = unique(betas)

    if tool_choice is not None and tool_choice.type == "none":
        result.tools = []
        return result

    result.tool_choice = encode_tool_choice(tool_choice)
    return result


def encode_function_tool(tool: FunctionTool) -> dict[str, Any]:
    schema = translate_schema(tool.input_schema, argument=f"tools[{tool.name}].input_schema")
    param: dict[str, Any] = {"name": tool.name, "input_schema": schema.to_dict()}
    if tool.description:
        param["description"] = tool.description
    return param


def _args(tool: ProviderDefinedTool, model: type[A]) -> A:
    try:
        return model.model_validate(tool.args)
    except ValidationError as exc:
        raise InvalidArgumentError(f"tools[{tool.id}].args", str(exc)) from exc


def _beta_for(tool: ProviderDefinedTool, version: str) -> str:
    beta = COMPUTER_USE_BETAS.get(version or "20250124")
    if beta is None:
        raise UnsupportedFunctionalityError(
            f"{tool.id}@{version}",
            f"unsupported {tool.id} tool version: {version}",
        )
    return beta


def encode_provider_tool(tool: ProviderDefinedTool) -> tuple[dict[str, Any] | None, list[str]]:
    """Encode an Anthropic built-in tool.

    Returns ``(None, [])`` for tool ids this encoder does not know.
    """
    if tool.id == COMPUTER_TOOL_ID:
        computer = _args(tool, ComputerToolArgs)
        version = computer.version or "20250124"
        beta = _beta_for(tool, version)
        param: dict[str, Any] = {
            "type": f"computer_{version}",
            "name": "computer",
            "display_width_px": computer.display_width_px,
            "display_height_px": computer.display_height_px,
        }
        if computer.display_number:
            param["display_number"] = computer.display_number
        return param, [beta]

    if tool.id == TEXT_EDITOR_TOOL_ID:
        version = _args(tool, TextEditorToolArgs).version or "20250124"
        beta = _beta_for(tool, version)
        return {"type": f"text_editor_{version}", "name": "str_replace_editor"}, [beta]

    if tool.id == BASH_TOOL_ID:
        version = _args(tool, BashToolArgs).version or "20250124"
        beta = _beta_for(tool, version)
        return {"type": f"bash_{version}", "name": "bash"}, [beta]

    return None, []


def encode_tool_choice(tool_choice: ToolChoice | None) -> dict[str, Any] | None:
    if tool_choice is None or tool_choice.type == "none":
        return None
    if tool_choice.type == "auto":
        return {"type": "auto"}
    if tool_choice.type == "required":
        return {"type": "any"}
    if not tool_choice.tool_name:
        raise InvalidArgumentError("tool_choice", "tool choice 'tool' requires a tool name")
    return {"type": "tool", "name": tool_choice.tool_name}
