"""Ownership of the tracing and metrics providers."""

import logging
from types import TracebackType

from opentelemetry import metrics, trace
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.trace import TracerProvider

logger = logging.getLogger(__name__)


class TelemetryPipeline:
    """Tracer and meter providers owned by the application.

    The pipeline is created once at startup and handed to the components
    that emit telemetry. Shutting it down flushes every pending span and
    metric to the exporters. Using it as a context manager shuts it down on
    every exit path:

        with setup_observability() as pipeline:
            service = OrderService(tracer=pipeline.get_tracer(__name__))
            service.get_total([1, 2, 3])
    """

    def __init__(self, tracer_provider: TracerProvider, meter_provider: MeterProvider) -> None:
        self.tracer_provider = tracer_provider
        self.meter_provider = meter_provider
        self._is_shutdown = False

    @property
    def is_shutdown(self) -> bool:
        return self._is_shutdown

    def get_tracer(self, name: str) -> trace.Tracer:
        """Get a tracer bound to this pipeline's tracer provider.

        Args:
            name: Name of the tracer (usually the module name)

        Returns:
            A Tracer for creating spans
        """
        return self.tracer_provider.get_tracer(name)

    def get_meter(self, name: str) -> metrics.Meter:
        """Get a meter bound to this pipeline's meter provider.

        Args:
            name: Name of the meter (usually the service name)

        Returns:
            A Meter for creating instruments
        """
        return self.meter_provider.get_meter(name)

    def install_global(self) -> None:
        """Register the providers as the process-wide OpenTelemetry providers."""
        trace.set_tracer_provider(self.tracer_provider)
        metrics.set_meter_provider(self.meter_provider)
        logger.info("Telemetry providers registered globally")

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        """Export all pending spans and metrics.

        Args:
            timeout_millis: Maximum time to wait for each provider

        Returns:
            True if both providers flushed within the timeout
        """
        if self._is_shutdown:
            return True

        spans_flushed = self.tracer_provider.force_flush(timeout_millis)
        metrics_flushed = self.meter_provider.force_flush(timeout_millis)
        return bool(spans_flushed and metrics_flushed)

    def shutdown(self) -> None:
        """Flush and shut down both providers.

        Calling shutdown more than once has no effect.
        """
        if self._is_shutdown:
            return

        logger.info("Shutting down telemetry pipeline...")
        self._is_shutdown = True
        try:
            self.tracer_provider.shutdown()
        finally:
            self.meter_provider.shutdown()
        logger.info("Telemetry pipeline shutdown complete")

    def __enter__(self) -> "TelemetryPipeline":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.shutdown()
