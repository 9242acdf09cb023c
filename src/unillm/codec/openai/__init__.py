"""OpenAI Responses API codec."""

from unillm.codec.openai.codec import OpenAICodec
from unillm.codec.openai.encode_prompt import ModelConfig
from unillm.codec.openai.metadata import (
    PROVIDER,
    ComputerSafetyCheck,
    OpenAIMetadata,
    OpenAIUsage,
    get_openai_metadata,
)
from unillm.codec.openai.tools import (
    WebSearchUserLocation,
    computer_use_tool,
    file_search_tool,
    web_search_tool,
)

__all__ = [
    "PROVIDER",
    "ComputerSafetyCheck",
    "ModelConfig",
    "OpenAICodec",
    "OpenAIMetadata",
    "OpenAIUsage",
    "WebSearchUserLocation",
    "computer_use_tool",
    "file_search_tool",
    "get_openai_metadata",
    "web_search_tool",
]
