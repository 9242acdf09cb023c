"""Anthropic Messages API codec."""

from unillm.codec.anthropic.codec import AnthropicCodec
from unillm.codec.anthropic.metadata import (
    PROVIDER,
    AnthropicMetadata,
    AnthropicUsage,
    ThinkingConfig,
    get_anthropic_metadata,
)
from unillm.codec.anthropic.tools import bash_tool, computer_tool, text_editor_tool

__all__ = [
    "PROVIDER",
    "AnthropicCodec",
    "AnthropicMetadata",
    "AnthropicUsage",
    "ThinkingConfig",
    "bash_tool",
    "computer_tool",
    "get_anthropic_metadata",
    "text_editor_tool",
]
