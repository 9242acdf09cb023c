"""Tests for ``unillm generate``."""

from __future__ import annotations

from unittest.mock import patch

from click.testing import CliRunner

from unillm.api.content import TextBlock
from unillm.api.errors import APICallError
from unillm.api.response import FinishReason, Response
from unillm.api.stream import ErrorEvent, TextDeltaEvent
from unillm.cli import main
from unillm.providers import MockLanguageModel


class TestGenerate:
    def test_generate(self) -> None:
        model = MockLanguageModel(
            responses=[Response(content=[TextBlock(text="Bonjour")], finish_reason=FinishReason.STOP)]
        )
        with patch("unillm.cli_commands.generate.get_model", return_value=model) as get_model:
            result = CliRunner().invoke(
                main,
                ["generate", "openai", "gpt-4o", "Say hi in French", "--max-tokens", "20", "-s", "Be brief."],
            )

        assert result.exit_code == 0, result.output
        assert "Bonjour" in result.output
        get_model.assert_called_once_with("openai", "gpt-4o")
        call = model.calls[0]
        assert [m.role for m in call.messages] == ["system", "user"]
        assert call.options is not None
        assert call.options.max_output_tokens == 20

    def test_stream(self) -> None:
        model = MockLanguageModel(
            streams=[[TextDeltaEvent(text_delta="Bon"), TextDeltaEvent(text_delta="jour")]]
        )
        with patch("unillm.cli_commands.generate.get_model", return_value=model):
            result = CliRunner().invoke(main, ["generate", "anthropic", "claude-x", "Hi", "--stream"])

        assert result.exit_code == 0, result.output
        assert "Bonjour" in result.output

    def test_stream_error(self) -> None:
        model = MockLanguageModel(streams=[[ErrorEvent(message="overloaded")]])
        with patch("unillm.cli_commands.generate.get_model", return_value=model):
            result = CliRunner().invoke(main, ["generate", "anthropic", "claude-x", "Hi", "--stream"])

        assert result.exit_code == 1
        assert "overloaded" in result.output

    def test_api_error(self) -> None:
        model = MockLanguageModel(responses=[APICallError("HTTP 401: bad key", "mock://")])
        with patch("unillm.cli_commands.generate.get_model", return_value=model):
            result = CliRunner().invoke(main, ["generate", "openai", "gpt-4o", "Hi"])

        assert result.exit_code == 1
        assert "Generation error" in result.output
        assert "bad key" in result.output
