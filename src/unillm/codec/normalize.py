"""Merging of consecutive same-role messages.

Most vendors reject (or silently mishandle) two adjacent messages with the
same role, so every encoder runs :func:`merge_messages` first.  Merging
never looks inside the provider metadata bags; it only moves them.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, TypeVar

from unillm.api.errors import InvalidPromptError
from unillm.api.messages import (
    AssistantMessage,
    BaseMessage,
    SystemMessage,
    ToolMessage,
    UserMessage,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseMessage)


def merge_messages(messages: Sequence[BaseMessage]) -> list[BaseMessage]:
    """Collapse every maximal run of same-role messages into one message.

    * System runs are joined with ``"\\n"`` and keep only the *last*
      message's metadata.
    * User, assistant and tool runs concatenate their blocks in order.  Only
      the last block of the last message is touched: if its own metadata is
      empty it receives that message's metadata.

    A run of length one is returned as-is without checking its variant, so
    an unsupported message only fails here when it has a same-role
    neighbour.  The inputs are never mutated.

    Raises:
        InvalidPromptError: If a run longer than one holds a message type
            that cannot be merged.
    """
    merged: list[BaseMessage] = []
    for run in _runs(messages):
        if len(run) == 1:
            # Single messages are not validated; see the docstring.
            merged.append(run[0])
        else:
            merged.append(_merge_run(run))
    return merged


def _runs(messages: Sequence[BaseMessage]) -> list[list[BaseMessage]]:
    runs: list[list[BaseMessage]] = []
    for message in messages:
        if runs and runs[-1][-1].role == message.role:
            runs[-1].append(message)
        else:
            runs.append([message])
    return runs


def _merge_run(run: list[BaseMessage]) -> BaseMessage:
    first = run[0]
    if isinstance(first, SystemMessage):
        return _merge_system(_as(run, SystemMessage))
    if isinstance(first, UserMessage):
        users = _as(run, UserMessage)
        return UserMessage(content=_merge_blocks(users))
    if isinstance(first, AssistantMessage):
        assistants = _as(run, AssistantMessage)
        return AssistantMessage(content=_merge_blocks(assistants))
    if isinstance(first, ToolMessage):
        tools = _as(run, ToolMessage)
        return ToolMessage(content=_merge_blocks(tools))
    msg = f"unsupported message type: {type(first).__name__}"
    raise InvalidPromptError(msg, prompt=run)


def _as(run: list[BaseMessage], cls: type[M]) -> list[M]:
    out: list[M] = []
    for message in run:
        if not isinstance(message, cls):
            msg = f"unsupported message type: {type(message).__name__}"
            raise InvalidPromptError(msg, prompt=run)
        out.append(message)
    return out


def _merge_system(run: list[SystemMessage]) -> SystemMessage:
    last = run[-1]
    return SystemMessage(
        content="\n".join(m.content for m in run),
        provider_metadata=last.provider_metadata.copy_bag(),
    )


def _merge_blocks(run: Sequence[UserMessage | AssistantMessage | ToolMessage]) -> list[Any]:
    blocks: list[Any] = []
    for message in run:
        blocks.extend(message.content)

    last = run[-1]
    if last.content and blocks and not last.provider_metadata.is_empty():
        tail = blocks[-1]
        if tail.provider_metadata.is_empty():
            logger.debug(
                "Back-filling %s block metadata from its %s message",
                getattr(tail, "type", "?"),
                last.role,
            )
            blocks[-1] = tail.model_copy(
                update={"provider_metadata": last.provider_metadata.copy_bag()}
            )
    return blocks
