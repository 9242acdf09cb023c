"""Unified, vendor-neutral model for LLM calls."""

from unillm.api.content import (
    BaseBlock,
    ContentBlock,
    FileBlock,
    ImageBlock,
    Reasoning,
    ReasoningBlock,
    RedactedReasoningBlock,
    SourceBlock,
    TextBlock,
    ToolCallBlock,
    ToolResultBlock,
)
from unillm.api.errors import (
    APICallError,
    InvalidArgumentError,
    InvalidPromptError,
    InvalidResponseDataError,
    JSONParseError,
    LoadAPIKeyError,
    NoSuchProviderError,
    UnillmError,
    UnsupportedFunctionalityError,
)
from unillm.api.messages import (
    AssistantMessage,
    BaseMessage,
    Message,
    MessageList,
    SystemMessage,
    ToolMessage,
    UserMessage,
)
from unillm.api.metadata import ProviderMetadata, get_metadata, with_provider_metadata
from unillm.api.options import CallOptions, ResponseFormat
from unillm.api.response import (
    CallWarning,
    FinishReason,
    RequestInfo,
    Response,
    ResponseInfo,
    Usage,
)
from unillm.api.stream import (
    ErrorEvent,
    EventStream,
    FinishEvent,
    ReasoningDeltaEvent,
    ReasoningSignatureEvent,
    RedactedReasoningEvent,
    ResponseMetadataEvent,
    SourceEvent,
    StreamCollector,
    StreamEvent,
    StreamResponse,
    TextDeltaEvent,
    ToolCallDeltaEvent,
    ToolCallEvent,
    collect_stream,
)
from unillm.api.tools import FunctionTool, ProviderDefinedTool, ToolChoice, ToolDefinition

__all__ = [
    "APICallError",
    "AssistantMessage",
    "BaseBlock",
    "BaseMessage",
    "CallOptions",
    "CallWarning",
    "ContentBlock",
    "ErrorEvent",
    "EventStream",
    "FileBlock",
    "FinishEvent",
    "FinishReason",
    "FunctionTool",
    "ImageBlock",
    "InvalidArgumentError",
    "InvalidPromptError",
    "InvalidResponseDataError",
    "JSONParseError",
    "LoadAPIKeyError",
    "Message",
    "MessageList",
    "NoSuchProviderError",
    "ProviderDefinedTool",
    "ProviderMetadata",
    "Reasoning",
    "ReasoningBlock",
    "ReasoningDeltaEvent",
    "ReasoningSignatureEvent",
    "RedactedReasoningBlock",
    "RedactedReasoningEvent",
    "RequestInfo",
    "Response",
    "ResponseFormat",
    "ResponseInfo",
    "ResponseMetadataEvent",
    "SourceBlock",
    "SourceEvent",
    "StreamCollector",
    "StreamEvent",
    "StreamResponse",
    "SystemMessage",
    "TextBlock",
    "TextDeltaEvent",
    "ToolCallBlock",
    "ToolCallDeltaEvent",
    "ToolCallEvent",
    "ToolChoice",
    "ToolDefinition",
    "ToolMessage",
    "ToolResultBlock",
    "UnillmError",
    "UnsupportedFunctionalityError",
    "Usage",
    "UserMessage",
    "collect_stream",
    "get_metadata",
    "with_provider_metadata",
]
