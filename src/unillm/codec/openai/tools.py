"""OpenAI hosted tools (file search, web search, computer use)."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from unillm.api.tools import ProviderDefinedTool

FILE_SEARCH_TOOL_ID = "openai.file_search"
WEB_SEARCH_TOOL_ID = "openai.web_search_preview"
COMPUTER_USE_TOOL_ID = "openai.computer_use_preview"

HOSTED_TOOL_IDS = {
    "file_search": FILE_SEARCH_TOOL_ID,
    "web_search_preview": WEB_SEARCH_TOOL_ID,
    "computer_use_preview": COMPUTER_USE_TOOL_ID,
}
"""Hosted tool name -> provider tool id."""

ComputerEnvironment = Literal["mac", "windows", "ubuntu", "browser"]


class FileSearchToolArgs(BaseModel):
    """Search the given vector stores."""

    vector_store_ids: list[str] = Field(default_factory=lambda: list[str]())
    max_num_results: int | None = None


class WebSearchUserLocation(BaseModel):
    city: str | None = None
    country: str | None = None
    region: str | None = None
    timezone: str | None = None


class WebSearchToolArgs(BaseModel):
    search_context_size: Literal["low", "medium", "high"] | None = None
    user_location: WebSearchUserLocation | None = None


class ComputerUseToolArgs(BaseModel):
    display_width: int = Field(gt=0)
    display_height: int = Field(gt=0)
    environment: ComputerEnvironment


def file_search_tool(
    vector_store_ids: list[str], *, max_num_results: int | None = None
) -> ProviderDefinedTool:
    args = FileSearchToolArgs(vector_store_ids=vector_store_ids, max_num_results=max_num_results)
    return ProviderDefinedTool(
        id=FILE_SEARCH_TOOL_ID,
        name="file_search",
        args=args.model_dump(exclude_none=True),
    )


def web_search_tool(
    *,
    search_context_size: Literal["low", "medium", "high"] | None = None,
    user_location: WebSearchUserLocation | None = None,
) -> ProviderDefinedTool:
    """Let the model search the web; results come back as source blocks."""
    args = WebSearchToolArgs(search_context_size=search_context_size, user_location=user_location)
    return ProviderDefinedTool(
        id=WEB_SEARCH_TOOL_ID,
        name="web_search_preview",
        args=args.model_dump(exclude_none=True),
    )


def computer_use_tool(
    display_width: int, display_height: int, environment: ComputerEnvironment
) -> ProviderDefinedTool:
    args = ComputerUseToolArgs(
        display_width=display_width,
        display_height=display_height,
        environment=environment,
    )
    return ProviderDefinedTool(
        id=COMPUTER_USE_TOOL_ID,
        name="computer_use_preview",
        args=args.model_dump(),
    )
