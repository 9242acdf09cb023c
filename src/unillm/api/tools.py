"""Tool definitions and the tool-choice policy."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field


class FunctionTool(BaseModel):
    """A user-defined function the model may call.

    ``input_schema`` is a JSON-schema-like dict describing the arguments.
    It must describe an object.
    """

    type: Literal["function"] = "function"
    name: str
    description: str | None = None
    input_schema: dict[str, Any] | None = None


class ProviderDefinedTool(BaseModel):
    """A vendor built-in tool (computer control, bash, web search, ...).

    ``id`` is namespaced as ``"<vendor>.<tool-name>"`` and selects the
    concrete tool in the vendor encoder.  ``args`` holds the tool's
    configuration and is validated by that encoder.
    """

    type: Literal["provider-defined"] = "provider-defined"
    id: str
    name: str
    args: dict[str, Any] = Field(default_factory=lambda: dict[str, Any]())

    @property
    def vendor(self) -> str:
        return self.id.split(".", 1)[0]


ToolDefinition = Annotated[FunctionTool | ProviderDefinedTool, Field(discriminator="type")]


class ToolChoice(BaseModel):
    """How the model should pick tools.

    ``auto`` lets the model decide, ``none`` forbids tool calls,
    ``required`` forces some tool call and ``tool`` forces :attr:`tool_name`.
    """

    type: Literal["auto", "none", "required", "tool"] = "auto"
    tool_name: str | None = None

    @classmethod
    def parse(cls, value: str) -> ToolChoice:
        """Parse ``auto``, ``none``, ``required`` or ``tool:<name>``."""
        if value.startswith("tool:"):
            name = value.removeprefix("tool:")
            if not name:
                msg = "tool choice 'tool:' requires a tool name"
                raise ValueError(msg)
            return cls(type="tool", tool_name=name)
        if value not in ("auto", "none", "required"):
            msg = f"unknown tool choice: {value!r}"
            raise ValueError(msg)
        return cls(type=value)  # pyright: ignore[reportArgumentType]

    def __str__(self) -> str:
        if self.type == "tool":
            return f"tool:{self.tool_name}"
        return self.type
