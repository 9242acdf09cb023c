"""Tests for OpenAI Responses API prompt encoding."""

from __future__ import annotations

import pytest

from unillm.api.content import (
    FileBlock,
    ImageBlock,
    ReasoningBlock,
    SourceBlock,
    TextBlock,
    ToolCallBlock,
    ToolResultBlock,
)
from unillm.api.errors import InvalidPromptError, UnsupportedFunctionalityError
from unillm.api.messages import AssistantMessage, SystemMessage, ToolMessage, UserMessage
from unillm.api.metadata import ProviderMetadata, with_provider_metadata
from unillm.api.response import CallWarning
from unillm.codec.openai import ComputerSafetyCheck, ModelConfig, OpenAIMetadata
from unillm.codec.openai.encode_prompt import encode_prompt
from unillm.codec.openai.tools import COMPUTER_USE_TOOL_ID


def _openai(**fields: object) -> ProviderMetadata:
    return with_provider_metadata("openai", OpenAIMetadata.model_validate(fields))


class TestModelConfig:
    @pytest.mark.parametrize(
        ("model_id", "reasoning", "mode"),
        [
            ("gpt-4o", False, "system"),
            ("o3-mini", True, "developer"),
            ("o1", True, "developer"),
            ("o1-mini", True, "remove"),
            ("o1-preview-2024-09-12", True, "remove"),
        ],
    )
    def test_for_model(self, model_id: str, reasoning: bool, mode: str) -> None:
        config = ModelConfig.for_model(model_id)
        assert config.is_reasoning_model is reasoning
        assert config.system_message_mode == mode


class TestSystemMessages:
    def test_system_role(self) -> None:
        prompt = encode_prompt([SystemMessage(content="Be brief."), UserMessage.of_text("Hi")])
        assert prompt.input == [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": [{"type": "input_text", "text": "Hi"}]},
        ]
        assert prompt.warnings == []

    def test_developer_role(self) -> None:
        prompt = encode_prompt([SystemMessage(content="x")], ModelConfig.for_model("o3"))
        assert prompt.input == [{"role": "developer", "content": "x"}]

    def test_removed_with_warning(self) -> None:
        prompt = encode_prompt(
            [SystemMessage(content="x"), UserMessage.of_text("Hi")],
            ModelConfig.for_model("o1-mini"),
        )
        assert [item["role"] for item in prompt.input] == ["user"]
        assert prompt.warnings == [CallWarning.other("system messages are removed for this model")]


class TestUserContent:
    def test_consecutive_user_messages_merge(self) -> None:
        prompt = encode_prompt([UserMessage.of_text("a"), UserMessage.of_text("b")])
        assert prompt.input == [
            {
                "role": "user",
                "content": [
                    {"type": "input_text", "text": "a"},
                    {"type": "input_text", "text": "b"},
                ],
            }
        ]

    def test_image_url_and_detail(self) -> None:
        block = ImageBlock(url="https://x.test/cat.png", provider_metadata=_openai(image_detail="low"))
        prompt = encode_prompt([UserMessage(content=[block])])
        assert prompt.input[0]["content"] == [
            {"type": "input_image", "image_url": "https://x.test/cat.png", "detail": "low"}
        ]

    def test_image_data_url(self) -> None:
        prompt = encode_prompt([UserMessage(content=[ImageBlock(data=b"abc", media_type="image/png")])])
        assert prompt.input[0]["content"][0]["image_url"] == "data:image/png;base64,YWJj"

    def test_invalid_image_detail(self) -> None:
        block = ImageBlock(url="https://x.test/cat.png", provider_metadata=_openai(image_detail="ultra"))
        with pytest.raises(InvalidPromptError, match="invalid image detail level"):
            encode_prompt([UserMessage(content=[block])])

    def test_pdf_file(self) -> None:
        block = FileBlock(data=b"abc", media_type="application/pdf")
        prompt = encode_prompt([UserMessage(content=[block])])
        assert prompt.input[0]["content"] == [
            {
                "type": "input_file",
                "filename": "file.pdf",
                "file_data": "data:application/pdf;base64,YWJj",
            }
        ]

    def test_pdf_filename_from_block(self) -> None:
        block = FileBlock(data=b"abc", media_type="application/pdf", filename="report.pdf")
        prompt = encode_prompt([UserMessage(content=[block])])
        assert prompt.input[0]["content"][0]["filename"] == "report.pdf"

    def test_non_pdf_file_raises(self) -> None:
        block = FileBlock(data=b"abc", media_type="text/plain")
        with pytest.raises(UnsupportedFunctionalityError):
            encode_prompt([UserMessage(content=[block])])

    def test_file_url_raises(self) -> None:
        block = FileBlock(url="https://x.test/doc.pdf", media_type="application/pdf")
        with pytest.raises(UnsupportedFunctionalityError):
            encode_prompt([UserMessage(content=[block])])

    @pytest.mark.parametrize(
        "block",
        [
            ImageBlock.model_construct(url=None, data=None, media_type=None),
            FileBlock.model_construct(url=None, data=None, media_type="application/pdf"),
        ],
    )
    def test_constructed_block_without_single_source_raises(self, block: object) -> None:
        message = UserMessage.model_construct(content=[block])
        with pytest.raises(InvalidPromptError, match="exactly one of url or data"):
            encode_prompt([message])

    def test_source_block_raises(self) -> None:
        block = SourceBlock(id="s", url="https://x.test")
        with pytest.raises(InvalidPromptError):
            encode_prompt([UserMessage(content=[block])])


class TestAssistantContent:
    def test_text_and_tool_call(self) -> None:
        message = AssistantMessage(
            content=[
                TextBlock(text="Let me check."),
                ToolCallBlock(tool_call_id="call_1", tool_name="get_weather", args='{"city":"Oslo"}'),
            ]
        )
        prompt = encode_prompt([message])
        assert prompt.input == [
            {"role": "assistant", "content": [{"type": "output_text", "text": "Let me check."}]},
            {
                "type": "function_call",
                "call_id": "call_1",
                "name": "get_weather",
                "arguments": '{"city":"Oslo"}',
            },
        ]

    def test_reasoning_with_item_id(self) -> None:
        block = ReasoningBlock(text="Thought", provider_metadata=_openai(item_id="rs_1"))
        prompt = encode_prompt([AssistantMessage(content=[block])])
        assert prompt.input == [
            {"type": "reasoning", "id": "rs_1", "summary": [{"type": "summary_text", "text": "Thought"}]}
        ]

    def test_reasoning_without_item_id_warns(self) -> None:
        prompt = encode_prompt([AssistantMessage(content=[ReasoningBlock(text="Thought")])])
        assert prompt.input == []
        assert len(prompt.warnings) == 1
        assert prompt.warnings[0].type == "other"

    def test_image_in_assistant_raises(self) -> None:
        message = AssistantMessage(content=[ImageBlock(url="https://x.test/a.png")])
        with pytest.raises(InvalidPromptError, match="assistant message"):
            encode_prompt([message])


class TestToolResults:
    def test_function_call_output(self) -> None:
        message = ToolMessage(
            content=[
                ToolResultBlock(tool_call_id="call_1", tool_name="get_weather", result={"temp": 21}),
                ToolResultBlock(tool_call_id="call_2", tool_name="echo", result="hi"),
            ]
        )
        prompt = encode_prompt([message])
        assert prompt.input == [
            {"type": "function_call_output", "call_id": "call_1", "output": '{"temp": 21}'},
            {"type": "function_call_output", "call_id": "call_2", "output": '"hi"'},
        ]

    def test_content_output(self) -> None:
        block = ToolResultBlock(
            tool_call_id="call_1",
            tool_name="look",
            content=[TextBlock(text="a cat"), ImageBlock(url="https://x.test/cat.png")],
        )
        prompt = encode_prompt([ToolMessage(content=[block])])
        assert prompt.input[0]["output"] == [
            {"type": "input_text", "text": "a cat"},
            {"type": "input_image", "image_url": "https://x.test/cat.png"},
        ]

    def test_missing_call_id_raises(self) -> None:
        with pytest.raises(InvalidPromptError):
            encode_prompt([ToolMessage(content=[ToolResultBlock(tool_call_id="", result=1)])])

    def test_computer_call_output(self) -> None:
        check = ComputerSafetyCheck(id="sc_1", code="malicious_instructions")
        block = ToolResultBlock(
            tool_call_id="call_9",
            tool_name=COMPUTER_USE_TOOL_ID,
            content=[ImageBlock(data=b"abc")],
            provider_metadata=_openai(computer_safety_checks=[check.model_dump()]),
        )
        prompt = encode_prompt([ToolMessage(content=[block])])
        assert prompt.input == [
            {
                "type": "computer_call_output",
                "call_id": "call_9",
                "output": {"type": "computer_screenshot", "image_url": "data:image/png;base64,YWJj"},
                "acknowledged_safety_checks": [{"id": "sc_1", "code": "malicious_instructions"}],
            }
        ]

    def test_computer_result_requires_one_image(self) -> None:
        block = ToolResultBlock(
            tool_call_id="call_9",
            tool_name=COMPUTER_USE_TOOL_ID,
            content=[TextBlock(text="no screenshot")],
        )
        with pytest.raises(InvalidPromptError, match="exactly one image"):
            encode_prompt([ToolMessage(content=[block])])
