"""OpenTelemetry tracing helpers for yeet.

A thin wrapper around the OpenTelemetry API so the engine can call
``get_tracer()`` without caring whether the SDK is installed. Without the
SDK configured the API hands out no-op spans.

Usage::

    from yeet.utils.telemetry import get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("yeet.generate") as span:
        span.set_attribute(ATTR_PROVIDER, "anthropic")

``yeet --trace`` calls :func:`configure_telemetry` (requires the ``otel``
extra: ``pip install yeet[otel]``).
"""

from __future__ import annotations

import sys
from typing import Any

from opentelemetry import trace

# ---------------------------------------------------------------------------
# Semantic attribute keys used by yeet instrumentation
# ---------------------------------------------------------------------------

ATTR_PROVIDER = "yeet.provider"
ATTR_MODEL = "yeet.model"
ATTR_PROTOCOL = "yeet.protocol"
ATTR_STREAMING = "yeet.streaming"
ATTR_TOKENS_INPUT = "yeet.tokens.input"
ATTR_TOKENS_OUTPUT = "yeet.tokens.output"
ATTR_DIFF_TRUNCATED = "yeet.diff.truncated"

_INSTRUMENTATION_NAME = "yeet"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name*.

    If the OpenTelemetry SDK has not been configured the returned tracer
    is a no-op.
    """
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "yeet",
    export_to_console: bool = True,
) -> None:
    """Configure OpenTelemetry tracing (requires ``yeet[otel]``).

    Parameters
    ----------
    service_name:
        The ``service.name`` resource attribute.
    export_to_console:
        If ``True``, export spans as JSON to stderr so they never mix with
        command output.

    Raises
    ------
    ImportError
        If the ``opentelemetry-sdk`` package is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace.export import SimpleSpanProcessor  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install yeet[otel]"
        )
        raise ImportError(msg) from exc

    resource = Resource.create({"service.name": service_name})  # pyright: ignore[reportUnknownVariableType,reportUnknownMemberType]
    provider = TracerProvider(resource=resource)  # pyright: ignore[reportUnknownVariableType]

    if export_to_console:
        _add_console_exporter(provider, SimpleSpanProcessor)

    trace.set_tracer_provider(provider)  # pyright: ignore[reportUnknownArgumentType]


def _add_console_exporter(provider: Any, processor_cls: Any) -> None:
    """Attach the console exporter (JSON to stderr)."""
    from opentelemetry.sdk.trace.export import ConsoleSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]

    provider.add_span_processor(processor_cls(ConsoleSpanExporter(out=sys.stderr)))
