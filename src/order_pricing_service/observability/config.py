"""OpenTelemetry configuration and setup."""

import logging
import os
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    MetricExporter,
    MetricReader,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from pythonjsonlogger import jsonlogger

from order_pricing_service.observability.pipeline import TelemetryPipeline

logger = logging.getLogger(__name__)

DEFAULT_OTLP_ENDPOINT = "http://localhost:4318"
HONEYCOMB_OTLP_ENDPOINT = "https://api.honeycomb.io"
HONEYCOMB_API_KEY_HEADER = "x-honeycomb-team"

EXPORTER_OTLP = "otlp"
EXPORTER_CONSOLE = "console"
EXPORTER_NONE = "none"


def get_service_resource() -> Resource:
    """Create OpenTelemetry resource with service identification.

    Returns:
        Resource with service name and environment attributes
    """
    service_name = os.getenv("OTEL_SERVICE_NAME", "order-pricing-svc")
    environment = os.getenv("ENVIRONMENT", "development")

    return Resource.create(
        {
            "service.name": service_name,
            "deployment.environment": environment,
        }
    )


def get_exporter_type() -> str:
    """Get the configured exporter type.

    Returns:
        One of "otlp", "console" or "none"

    Raises:
        ValueError: If OTEL_TRACES_EXPORTER holds an unsupported value
    """
    exporter_type = os.getenv("OTEL_TRACES_EXPORTER", EXPORTER_OTLP).strip().lower()
    if exporter_type not in (EXPORTER_OTLP, EXPORTER_CONSOLE, EXPORTER_NONE):
        raise ValueError(f"Unsupported OTEL_TRACES_EXPORTER value: {exporter_type}")
    return exporter_type


def get_otlp_endpoint() -> str:
    """Get the OTLP/HTTP base endpoint.

    Honeycomb is used as the default backend when an API key is configured
    and no explicit endpoint is set.

    Returns:
        Base endpoint without a trailing slash
    """
    default = HONEYCOMB_OTLP_ENDPOINT if os.getenv("HONEYCOMB_API_KEY") else DEFAULT_OTLP_ENDPOINT
    return os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", default).rstrip("/")


def parse_otlp_headers(raw_headers: str) -> dict[str, str]:
    """Parse exporter headers in the "key=value,key2=value2" format.

    Args:
        raw_headers: Raw header string

    Returns:
        Dictionary of header names to values, malformed entries are skipped
    """
    headers: dict[str, str] = {}
    for pair in raw_headers.split(","):
        key, separator, value = pair.partition("=")
        if not separator or not key.strip():
            if pair.strip():
                logger.warning(f"Ignoring malformed OTLP header entry: {pair.strip()}")
            continue
        headers[key.strip()] = value.strip()
    return headers


def get_otlp_headers() -> dict[str, str]:
    """Get the headers sent with every OTLP export request.

    Returns:
        Headers from OTEL_EXPORTER_OTLP_HEADERS plus the Honeycomb API key
    """
    headers = parse_otlp_headers(os.getenv("OTEL_EXPORTER_OTLP_HEADERS", ""))

    honeycomb_api_key = os.getenv("HONEYCOMB_API_KEY")
    if honeycomb_api_key:
        headers[HONEYCOMB_API_KEY_HEADER] = honeycomb_api_key

    return headers


def create_span_exporter(exporter_type: str) -> SpanExporter | None:
    """Create the span exporter for the configured backend.

    Args:
        exporter_type: One of "otlp", "console" or "none"

    Returns:
        The span exporter, or None when exporting is disabled
    """
    if exporter_type == EXPORTER_OTLP:
        otlp_endpoint = get_otlp_endpoint()
        return OTLPSpanExporter(
            endpoint=f"{otlp_endpoint}/v1/traces",
            headers=get_otlp_headers(),
        )
    if exporter_type == EXPORTER_CONSOLE:
        return ConsoleSpanExporter()
    return None


def create_metric_exporter(exporter_type: str) -> MetricExporter | None:
    """Create the metric exporter for the configured backend.

    Args:
        exporter_type: One of "otlp", "console" or "none"

    Returns:
        The metric exporter, or None when exporting is disabled
    """
    if exporter_type == EXPORTER_OTLP:
        otlp_endpoint = get_otlp_endpoint()
        return OTLPMetricExporter(
            endpoint=f"{otlp_endpoint}/v1/metrics",
            headers=get_otlp_headers(),
        )
    if exporter_type == EXPORTER_CONSOLE:
        return ConsoleMetricExporter()
    return None


def setup_tracing(resource: Resource, exporter: SpanExporter | None = None) -> TracerProvider:
    """Configure OpenTelemetry tracing.

    Args:
        resource: Service resource for trace identification
        exporter: Optional span exporter, spans are dropped without one

    Returns:
        The configured tracer provider
    """
    provider = TracerProvider(resource=resource)

    if exporter is not None:
        provider.add_span_processor(BatchSpanProcessor(exporter))
        logger.info(f"OpenTelemetry tracing configured with {type(exporter).__name__}")

    return provider


def setup_metrics(resource: Resource, exporter: MetricExporter | None = None) -> MeterProvider:
    """Configure OpenTelemetry metrics.

    Args:
        resource: Service resource for metric identification
        exporter: Optional metric exporter, metrics are not exported without one

    Returns:
        The configured meter provider
    """
    readers: list[MetricReader] = []

    if exporter is not None:
        interval = int(os.getenv("OTEL_METRIC_EXPORT_INTERVAL", "60000"))
        readers.append(PeriodicExportingMetricReader(exporter, export_interval_millis=interval))
        logger.info(f"OpenTelemetry metrics configured with {type(exporter).__name__}")

    return MeterProvider(resource=resource, metric_readers=readers)


def instrument_app(app: Any, pipeline: TelemetryPipeline) -> None:
    """Instrument a FastAPI application with the pipeline's providers.

    Args:
        app: FastAPI application to instrument
        pipeline: Telemetry pipeline receiving the request spans and metrics
    """
    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=pipeline.tracer_provider,
        meter_provider=pipeline.meter_provider,
    )
    logger.info("FastAPI application instrumented")


def setup_observability(app: Any = None, enable_exporters: bool = True) -> TelemetryPipeline:
    """Initialize the OpenTelemetry tracing and metrics pipeline.

    The returned pipeline is owned by the caller, who must shut it down. It
    can be used as a context manager to guarantee that.

    Args:
        app: Optional FastAPI application to instrument
        enable_exporters: Whether to enable exporters (default: True, set False for tests)

    Returns:
        The telemetry pipeline
    """
    # Check if we're in test environment
    environment = os.getenv("ENVIRONMENT", "development")
    if environment == "test":
        enable_exporters = False

    resource = get_service_resource()

    exporter_type = get_exporter_type() if enable_exporters else EXPORTER_NONE

    pipeline = TelemetryPipeline(
        tracer_provider=setup_tracing(resource, create_span_exporter(exporter_type)),
        meter_provider=setup_metrics(resource, create_metric_exporter(exporter_type)),
    )

    # Instrument FastAPI if provided
    if app is not None:
        instrument_app(app, pipeline)

    logger.info(f"OpenTelemetry observability configured with exporter: {exporter_type}")
    return pipeline


class CorrelationJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that adds the active trace and span IDs to every record."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            log_record["trace_id"] = format(span_context.trace_id, "032x")
            log_record["span_id"] = format(span_context.span_id, "016x")


def configure_logging(log_level: str = "INFO") -> None:
    """Configure structured JSON logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    # Get log level from environment or use provided default
    level_str = os.getenv("LOG_LEVEL", log_level).upper()
    level = getattr(logging, level_str, logging.INFO)

    formatter = CorrelationJsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(message)s",
        timestamp=True,
    )

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Add console handler with JSON formatting
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logger.info(f"Structured JSON logging configured at {level_str} level")
