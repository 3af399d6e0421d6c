"""Custom metrics for the order pricing service."""

from opentelemetry import metrics

from order_pricing_service.observability.spans import OUTCOME_ATTRIBUTE, Outcome


class OrderMetrics:
    """Counters and histograms describing order lookups and totals.

    Instruments are created from an explicitly supplied meter so that the
    metrics follow the telemetry pipeline that owns them.
    """

    def __init__(self, meter: metrics.Meter) -> None:
        """Create the instruments.

        Args:
            meter: Meter to create the instruments from
        """
        self.lookup_counter = meter.create_counter(
            name="order_lookup_total",
            description="Total number of order lookups by outcome",
            unit="1",
        )

        self.total_counter = meter.create_counter(
            name="order_total_computation_total",
            description="Total number of total price computations by outcome",
            unit="1",
        )

        self.total_price_histogram = meter.create_histogram(
            name="order_total_price",
            description="Total price of successfully priced order lists",
            unit="1",
        )

    def record_lookup(self, outcome: Outcome) -> None:
        """Record a single order lookup.

        Args:
            outcome: Outcome of the lookup
        """
        self.lookup_counter.add(1, {OUTCOME_ATTRIBUTE: outcome.value})

    def record_total(self, outcome: Outcome, total: int | None = None) -> None:
        """Record a total price computation.

        Args:
            outcome: Outcome of the computation
            total: Computed total, only recorded for successful computations
        """
        self.total_counter.add(1, {OUTCOME_ATTRIBUTE: outcome.value})

        if outcome is Outcome.SUCCESS and total is not None:
            self.total_price_histogram.record(total)
