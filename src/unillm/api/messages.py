"""Role-tagged conversation messages.

A message's class *is* its role: each variant pins ``role`` to a single
literal, so the stored value can never disagree with the type.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter

from unillm.api.content import ContentBlock, TextBlock, ToolResultBlock
from unillm.api.metadata import ProviderMetadata


class BaseMessage(BaseModel):
    """Fields shared by every message variant."""

    role: str
    provider_metadata: ProviderMetadata = Field(default_factory=ProviderMetadata)


class SystemMessage(BaseMessage):
    """System instructions, always plain text."""

    role: Literal["system"] = "system"
    content: str

    @classmethod
    def of(cls, text: str) -> SystemMessage:
        return cls(content=text)


class UserMessage(BaseMessage):
    """Input from the end user."""

    role: Literal["user"] = "user"
    content: list[ContentBlock] = Field(default_factory=lambda: list[ContentBlock]())

    @classmethod
    def of_text(cls, text: str) -> UserMessage:
        """Create a user message with a single text block."""
        return cls(content=[TextBlock(text=text)])


class AssistantMessage(BaseMessage):
    """Output previously produced by the model."""

    role: Literal["assistant"] = "assistant"
    content: list[ContentBlock] = Field(default_factory=lambda: list[ContentBlock]())

    @classmethod
    def of_text(cls, text: str) -> AssistantMessage:
        return cls(content=[TextBlock(text=text)])


class ToolMessage(BaseMessage):
    """Results of tool calls, sent back to the model."""

    role: Literal["tool"] = "tool"
    content: list[ToolResultBlock] = Field(default_factory=lambda: list[ToolResultBlock]())


Message = Annotated[
    SystemMessage | UserMessage | AssistantMessage | ToolMessage,
    Field(discriminator="role"),
]

MessageList = TypeAdapter(list[Message])
"""Validates and serializes whole conversations to and from JSON."""
