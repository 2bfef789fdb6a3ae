"""Tests for OpenTelemetry tracing helpers."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from opentelemetry import trace

from yeet.utils.telemetry import (
    ATTR_DIFF_TRUNCATED,
    ATTR_MODEL,
    ATTR_PROTOCOL,
    ATTR_PROVIDER,
    ATTR_STREAMING,
    ATTR_TOKENS_INPUT,
    ATTR_TOKENS_OUTPUT,
    configure_telemetry,
    get_tracer,
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
        with tracer.start_as_current_span("yeet.generate") as span:
            span.set_attribute(ATTR_PROVIDER, "openai")
            span.set_attribute(ATTR_STREAMING, True)


class TestConfigureTelemetry:
    def test_raises_without_sdk(self) -> None:
        """configure_telemetry requires opentelemetry-sdk."""
        with patch.dict("sys.modules", {"opentelemetry.sdk.resources": None}):
            with pytest.raises(ImportError, match=r"pip install yeet\[otel\]"):
                configure_telemetry()

    def test_configures_with_console(self) -> None:
        """When SDK is available, should set up TracerProvider with console exporter."""
        try:
            from opentelemetry.sdk.trace import TracerProvider
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        original = trace.get_tracer_provider()
        try:
            configure_telemetry(service_name="test-svc", export_to_console=True)
            provider = trace.get_tracer_provider()
            assert provider is not original or isinstance(provider, TracerProvider)
        finally:
            trace.set_tracer_provider(original)

    def test_console_exporter_optional(self) -> None:
        try:
            import opentelemetry.sdk.trace  # noqa: F401
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        original = trace.get_tracer_provider()
        try:
            with patch("yeet.utils.telemetry._add_console_exporter") as add:
                configure_telemetry(export_to_console=False)
                add.assert_not_called()
                configure_telemetry(export_to_console=True)
                add.assert_called_once()
        finally:
            trace.set_tracer_provider(original)


class TestAttributeConstants:
    def test_constants_are_namespaced(self) -> None:
        attrs = [
            ATTR_PROVIDER,
            ATTR_MODEL,
            ATTR_PROTOCOL,
            ATTR_STREAMING,
            ATTR_TOKENS_INPUT,
            ATTR_TOKENS_OUTPUT,
            ATTR_DIFF_TRUNCATED,
        ]
        assert all(attr.startswith("yeet.") for attr in attrs)
        assert len(set(attrs)) == len(attrs)
