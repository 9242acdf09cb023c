"""OpenTelemetry tracing helpers for unillm.

Thin wrapper around the OpenTelemetry API: library code calls
:func:`get_tracer` and never cares whether the SDK is installed.  Without a
configured SDK the API hands out no-op tracers.

Usage::

    from unillm.utils.telemetry import get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("model.generate") as span:
        span.set_attribute(ATTR_MODEL, "gpt-4o")

To export spans, call :func:`configure_telemetry` once at startup
(requires the ``otel`` extra: ``pip install unillm[otel]``).
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace

from unillm.api.response import Response, Usage

# ---------------------------------------------------------------------------
# Semantic attribute keys used by the language models
# ---------------------------------------------------------------------------

ATTR_MODEL = "unillm.model"
ATTR_PROVIDER = "unillm.provider"
ATTR_STREAMING = "unillm.streaming"
ATTR_TOKENS_INPUT = "unillm.tokens.input"
ATTR_TOKENS_OUTPUT = "unillm.tokens.output"
ATTR_TOKENS_TOTAL = "unillm.tokens.total"
ATTR_FINISH_REASON = "unillm.finish_reason"
ATTR_WARNINGS = "unillm.warnings"
ATTR_TOOL_CALLS = "unillm.tool_calls"

_INSTRUMENTATION_NAME = "unillm"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name*.

    If the OpenTelemetry SDK has not been configured the returned tracer
    is a no-op.
    """
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def record_usage(span: trace.Span, usage: Usage) -> None:
    span.set_attribute(ATTR_TOKENS_INPUT, usage.input_tokens)
    span.set_attribute(ATTR_TOKENS_OUTPUT, usage.output_tokens)
    span.set_attribute(ATTR_TOKENS_TOTAL, usage.total_tokens)


def record_response(span: trace.Span, response: Response) -> None:
    """Attach the finish reason, token counts and tool-call count of *response*."""
    span.set_attribute(ATTR_FINISH_REASON, response.finish_reason.value)
    span.set_attribute(ATTR_TOOL_CALLS, len(response.tool_calls))
    record_usage(span, response.usage)


def configure_telemetry(
    *,
    service_name: str = "unillm",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Configure OpenTelemetry tracing (requires ``unillm[otel]``).

    Parameters
    ----------
    service_name:
        The ``service.name`` resource attribute.
    export_to_console:
        If ``True``, export spans as JSON to stdout.
    otlp_endpoint:
        If set, export spans via OTLP/gRPC to this endpoint.

    Raises
    ------
    ImportError
        If the ``opentelemetry-sdk`` package is not installed.
    """
    # The SDK is an optional dependency.
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install unillm[otel]"
        )
        raise ImportError(msg) from exc

    resource = Resource.create({"service.name": service_name})  # pyright: ignore[reportUnknownVariableType,reportUnknownMemberType]
    provider = TracerProvider(resource=resource)  # pyright: ignore[reportUnknownVariableType]

    if export_to_console:
        _add_console_exporter(provider, SimpleSpanProcessor)

    if otlp_endpoint:
        _add_otlp_exporter(provider, BatchSpanProcessor, otlp_endpoint)

    trace.set_tracer_provider(provider)  # pyright: ignore[reportUnknownArgumentType]


def _add_console_exporter(provider: Any, processor_cls: Any) -> None:
    from opentelemetry.sdk.trace.export import ConsoleSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]

    provider.add_span_processor(processor_cls(ConsoleSpanExporter()))


def _add_otlp_exporter(provider: Any, processor_cls: Any, endpoint: str) -> None:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = (
            "opentelemetry-exporter-otlp is required for OTLP export. "
            "Install it with: pip install unillm[otel]"
        )
        raise ImportError(msg) from exc

    provider.add_span_processor(processor_cls(OTLPSpanExporter(endpoint=endpoint)))
