"""Unit tests for src/core/observability.py."""

import pytest
from fastapi import FastAPI
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor, SpanExportResult
from opentelemetry.sdk.trace.export.in_memory_span_exporter import (
    InMemorySpanExporter,
)
from pytest_mock import MockerFixture

from src.core import observability
from src.core.config import ObservabilityConfig, Settings
from src.core.context import RequestContext
from src.core.observability import (
    LoguruSpanExporter,
    add_correlation_id_to_span,
    get_span_exporter,
    instrument_app,
    setup_tracing,
    trace_operation,
)


def _settings(**config: object) -> Settings:
    return Settings(observability_config=ObservabilityConfig(**config))  # type: ignore[arg-type]


@pytest.mark.unit
class TestSpanExporters:
    """Test suite for exporter selection."""

    def test_console_exporter(self) -> None:
        """Test that the console type logs spans through Loguru."""
        assert isinstance(
            get_span_exporter(_settings(exporter_type="console")), LoguruSpanExporter
        )

    def test_otlp_exporter(self) -> None:
        """Test that the otlp type builds an OTLP exporter."""
        exporter = get_span_exporter(
            _settings(exporter_type="otlp", exporter_endpoint="http://collector:4317")
        )
        assert isinstance(exporter, OTLPSpanExporter)

    def test_no_exporter(self) -> None:
        """Test that the none type disables export."""
        assert get_span_exporter(_settings(exporter_type="none")) is None

    def test_loguru_exporter_logs_spans(self, log_messages: list[str]) -> None:
        """Test that finished spans are written as DEBUG records."""
        provider = TracerProvider()
        memory = InMemorySpanExporter()
        provider.add_span_processor(SimpleSpanProcessor(memory))
        with provider.get_tracer(__name__).start_as_current_span("user.create"):
            pass

        result = LoguruSpanExporter().export(memory.get_finished_spans())

        assert result is SpanExportResult.SUCCESS
        assert "DEBUG Trace span completed: user.create" in log_messages


@pytest.mark.unit
class TestTracingSetup:
    """Test suite for setup_tracing() and instrument_app()."""

    def test_disabled_tracing_sets_no_provider(self, mocker: MockerFixture) -> None:
        """Test that nothing is installed when tracing is disabled."""
        set_provider = mocker.patch.object(observability.trace, "set_tracer_provider")

        setup_tracing(_settings(enable_tracing=False))

        set_provider.assert_not_called()

    def test_enabled_tracing_sets_provider(self, mocker: MockerFixture) -> None:
        """Test that a provider with the service resource is installed."""
        set_provider = mocker.patch.object(observability.trace, "set_tracer_provider")

        setup_tracing(_settings(enable_tracing=True, exporter_type="none"))

        provider = set_provider.call_args.args[0]
        assert provider.resource.attributes["service.name"] == "User Management API"

    def test_instrument_app_skips_when_disabled(self, mocker: MockerFixture) -> None:
        """Test that the app is left alone when tracing is disabled."""
        instrumentor = mocker.patch.object(observability, "FastAPIInstrumentor")

        instrument_app(FastAPI(), _settings(enable_tracing=False))

        instrumentor.instrument_app.assert_not_called()

    def test_instrument_app_excludes_health_and_docs(
        self, mocker: MockerFixture
    ) -> None:
        """Test that health and docs endpoints are excluded from tracing."""
        instrumentor = mocker.patch.object(observability, "FastAPIInstrumentor")
        sqlalchemy = mocker.patch.object(observability, "SQLAlchemyInstrumentor")
        settings = _settings(enable_tracing=True)
        settings.storage_backend = "memory"

        instrument_app(FastAPI(), settings)

        excluded = instrumentor.instrument_app.call_args.kwargs["excluded_urls"]
        assert excluded.split(",") == ["/health", "/api-docs", "/redoc", "/openapi.json"]
        sqlalchemy.assert_not_called()


@pytest.mark.unit
class TestSpanHelpers:
    """Test suite for span helpers."""

    def test_add_correlation_id_to_span(self, mocker: MockerFixture) -> None:
        """Test that correlation and request IDs are set as attributes."""
        span = mocker.Mock()
        RequestContext.set_correlation_id("corr-1")

        add_correlation_id_to_span(span, {"headers": [(b"x-request-id", b"req-1")]})

        span.set_attribute.assert_any_call("correlation_id", "corr-1")
        span.set_attribute.assert_any_call("request_id", "req-1")

    def test_trace_operation_sets_attributes(self, mocker: MockerFixture) -> None:
        """Test that attributes are stringified onto the span."""
        span = mocker.MagicMock()
        tracer = mocker.MagicMock()
        tracer.start_as_current_span.return_value.__enter__.return_value = span
        mocker.patch.object(observability, "get_tracer", return_value=tracer)

        with trace_operation("user.get", entity="User", key=5) as active:
            assert active is span

        tracer.start_as_current_span.assert_called_once_with("user.get")
        span.set_attribute.assert_any_call("entity", "User")
        span.set_attribute.assert_any_call("key", "5")
