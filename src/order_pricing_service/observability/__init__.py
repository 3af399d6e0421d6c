"""OpenTelemetry instrumentation and observability utilities."""

from order_pricing_service.observability.config import configure_logging, setup_observability
from order_pricing_service.observability.metrics import OrderMetrics
from order_pricing_service.observability.pipeline import TelemetryPipeline
from order_pricing_service.observability.spans import Outcome, record_outcome, start_span

__all__ = [
    "setup_observability",
    "configure_logging",
    "OrderMetrics",
    "TelemetryPipeline",
    "Outcome",
    "record_outcome",
    "start_span",
]
