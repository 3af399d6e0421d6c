"""Shared pytest fixtures and configuration for all tests."""

import os
from collections.abc import Iterator

# Keep exporters off for anything created during collection
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402
from opentelemetry.sdk.metrics import MeterProvider  # noqa: E402
from opentelemetry.sdk.metrics.export import InMemoryMetricReader  # noqa: E402
from opentelemetry.sdk.trace import TracerProvider  # noqa: E402
from opentelemetry.sdk.trace.export import SimpleSpanProcessor  # noqa: E402
from opentelemetry.sdk.trace.export.in_memory_span_exporter import (  # noqa: E402
    InMemorySpanExporter,
)

from order_pricing_service.observability.metrics import OrderMetrics  # noqa: E402
from order_pricing_service.observability.pipeline import TelemetryPipeline  # noqa: E402
from order_pricing_service.services.order_service import OrderService  # noqa: E402


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    """Fixture providing an exporter that keeps finished spans in memory."""
    return InMemorySpanExporter()


@pytest.fixture
def metric_reader() -> InMemoryMetricReader:
    """Fixture providing a reader that collects metrics on demand."""
    return InMemoryMetricReader()


@pytest.fixture
def tracer_provider(span_exporter: InMemorySpanExporter) -> TracerProvider:
    """Fixture providing a tracer provider that exports synchronously to memory."""
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return provider


@pytest.fixture
def meter_provider(metric_reader: InMemoryMetricReader) -> MeterProvider:
    """Fixture providing a meter provider read by the in-memory reader."""
    return MeterProvider(metric_readers=[metric_reader])


@pytest.fixture
def pipeline(
    tracer_provider: TracerProvider, meter_provider: MeterProvider
) -> Iterator[TelemetryPipeline]:
    """Fixture providing a telemetry pipeline backed by in-memory exporters."""
    telemetry = TelemetryPipeline(tracer_provider=tracer_provider, meter_provider=meter_provider)
    yield telemetry
    telemetry.shutdown()


@pytest.fixture
def order_metrics(pipeline: TelemetryPipeline) -> OrderMetrics:
    """Fixture providing order metrics bound to the test pipeline."""
    return OrderMetrics(pipeline.get_meter("test"))


@pytest.fixture
def order_service(pipeline: TelemetryPipeline, order_metrics: OrderMetrics) -> OrderService:
    """Fixture providing an order service traced into memory."""
    return OrderService(tracer=pipeline.get_tracer("test"), metrics=order_metrics)


@pytest.fixture
def collect_metric_points(metric_reader: InMemoryMetricReader):
    """Fixture providing a function that returns the data points of a metric."""

    def collect(metric_name: str) -> list:
        metrics_data = metric_reader.get_metrics_data()
        if metrics_data is None:
            return []

        points = []
        for resource_metrics in metrics_data.resource_metrics:
            for scope_metrics in resource_metrics.scope_metrics:
                for metric in scope_metrics.metrics:
                    if metric.name == metric_name:
                        points.extend(metric.data.data_points)
        return points

    return collect
