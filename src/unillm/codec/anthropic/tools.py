"""Anthropic built-in tools (computer use, text editor, bash).

The factories return :class:`~unillm.api.tools.ProviderDefinedTool` values
that the Anthropic encoder recognizes by ``id``.  :class:`ComputerToolCall`
parses the arguments the model sends back when it calls the computer tool.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from unillm.api.tools import ProviderDefinedTool

COMPUTER_TOOL_ID = "anthropic.computer"
TEXT_EDITOR_TOOL_ID = "anthropic.text_editor"
BASH_TOOL_ID = "anthropic.bash"

DEFAULT_TOOL_VERSION = "20250124"
RECOMMENDED_DISPLAY_WIDTH = 1280
RECOMMENDED_DISPLAY_HEIGHT = 800

ComputerAction = Literal[
    "key",
    "hold_key",
    "type",
    "cursor_position",
    "mouse_move",
    "left_mouse_down",
    "left_mouse_up",
    "left_click",
    "left_click_drag",
    "right_click",
    "middle_click",
    "double_click",
    "triple_click",
    "scroll",
    "wait",
    "screenshot",
]


# ---------------------------------------------------------------------------
# Tool configuration
# ---------------------------------------------------------------------------


class ComputerToolArgs(BaseModel):
    """Configuration of the computer-use tool."""

    version: str = DEFAULT_TOOL_VERSION
    display_width_px: int = RECOMMENDED_DISPLAY_WIDTH
    display_height_px: int = RECOMMENDED_DISPLAY_HEIGHT
    display_number: int | None = None


class TextEditorToolArgs(BaseModel):
    version: str = DEFAULT_TOOL_VERSION


class BashToolArgs(BaseModel):
    version: str = DEFAULT_TOOL_VERSION


def computer_tool(
    display_width_px: int = RECOMMENDED_DISPLAY_WIDTH,
    display_height_px: int = RECOMMENDED_DISPLAY_HEIGHT,
    *,
    version: str = DEFAULT_TOOL_VERSION,
    display_number: int | None = None,
) -> ProviderDefinedTool:
    """Let the model drive a mouse and keyboard and take screenshots."""
    args = ComputerToolArgs(
        version=version,
        display_width_px=display_width_px,
        display_height_px=display_height_px,
        display_number=display_number,
    )
    return ProviderDefinedTool(
        id=COMPUTER_TOOL_ID,
        name="computer",
        args=args.model_dump(exclude_none=True),
    )


def text_editor_tool(*, version: str = DEFAULT_TOOL_VERSION) -> ProviderDefinedTool:
    """Let the model view and edit files."""
    return ProviderDefinedTool(
        id=TEXT_EDITOR_TOOL_ID,
        name="str_replace_editor",
        args=TextEditorToolArgs(version=version).model_dump(),
    )


def bash_tool(*, version: str = DEFAULT_TOOL_VERSION) -> ProviderDefinedTool:
    """Let the model run shell commands."""
    return ProviderDefinedTool(
        id=BASH_TOOL_ID,
        name="bash",
        args=BashToolArgs(version=version).model_dump(),
    )


# ---------------------------------------------------------------------------
# Tool call arguments
# ---------------------------------------------------------------------------


class ComputerToolCall(BaseModel):
    """Arguments of a call to the computer tool.  Only ``action`` is required."""

    action: ComputerAction
    text: str | None = None
    coordinate: tuple[int, int] | None = None
    start_coordinate: tuple[int, int] | None = None
    duration: float | None = None
    scroll_amount: int | None = None
    scroll_direction: Literal["up", "down", "left", "right"] | None = None


class TextEditorToolCall(BaseModel):
    """Arguments of a call to the text editor tool."""

    command: Literal["view", "create", "str_replace", "insert", "undo_edit"]
    path: str
    file_text: str | None = None
    old_str: str | None = None
    new_str: str | None = None
    insert_line: int | None = None
    view_range: list[int] | None = None


class BashToolCall(BaseModel):
    command: str | None = None
    restart: bool = False
