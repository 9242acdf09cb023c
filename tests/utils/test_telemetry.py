"""Tests for OpenTelemetry tracing helpers."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from opentelemetry import trace

from unillm.api.content import TextBlock, ToolCallBlock
from unillm.api.response import FinishReason, Response, Usage
from unillm.utils.telemetry import (
    ATTR_FINISH_REASON,
    ATTR_MODEL,
    ATTR_TOKENS_INPUT,
    ATTR_TOKENS_TOTAL,
    ATTR_TOOL_CALLS,
    _INSTRUMENTATION_NAME,
    configure_telemetry,
    get_tracer,
    record_response,
)


class TestGetTracer:
    def test_returns_tracer(self) -> None:
        tracer = get_tracer("test.module")
        assert isinstance(tracer, trace.Tracer)

    def test_default_name(self) -> None:
        tracer = get_tracer()
        assert isinstance(tracer, trace.Tracer)

    def test_noop_span(self) -> None:
        """Without SDK configured, spans should be no-ops."""
        tracer = get_tracer("test.noop")
        with tracer.start_as_current_span("test") as span:
            span.set_attribute(ATTR_MODEL, "gpt-4o")


class TestRecordResponse:
    def test_sets_attributes(self) -> None:
        span = MagicMock()
        response = Response(
            content=[
                TextBlock(text="x"),
                ToolCallBlock(tool_call_id="c1", tool_name="f"),
            ],
            finish_reason=FinishReason.TOOL_CALLS,
            usage=Usage(input_tokens=3, output_tokens=4, total_tokens=7),
        )
        record_response(span, response)

        attributes = {c.args[0]: c.args[1] for c in span.set_attribute.call_args_list}
        assert attributes[ATTR_FINISH_REASON] == "tool-calls"
        assert attributes[ATTR_TOOL_CALLS] == 1
        assert attributes[ATTR_TOKENS_INPUT] == 3
        assert attributes[ATTR_TOKENS_TOTAL] == 7


class TestConfigureTelemetry:
    def test_raises_without_sdk(self) -> None:
        """configure_telemetry requires opentelemetry-sdk."""
        with patch.dict("sys.modules", {"opentelemetry.sdk.resources": None}):
            with pytest.raises(ImportError, match="opentelemetry-sdk"):
                configure_telemetry()

    def test_otlp_raises_without_exporter(self) -> None:
        """OTLP export requires opentelemetry-exporter-otlp."""
        try:
            import opentelemetry.sdk.trace  # noqa: F401
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        with patch.dict(
            "sys.modules",
            {"opentelemetry.exporter.otlp.proto.grpc.trace_exporter": None},
        ):
            with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
                configure_telemetry(
                    export_to_console=False,
                    otlp_endpoint="http://localhost:4317",
                )


class TestAttributeConstants:
    def test_constants_are_namespaced(self) -> None:
        for name in (ATTR_MODEL, ATTR_FINISH_REASON, ATTR_TOKENS_TOTAL):
            assert name.startswith("unillm.")

    def test_instrumentation_name(self) -> None:
        assert _INSTRUMENTATION_NAME == "unillm"
