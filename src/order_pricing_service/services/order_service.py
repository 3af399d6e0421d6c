"""Order service for looking up orders and computing total prices."""

import logging
from collections.abc import Iterable

from opentelemetry import trace

from order_pricing_service.models.order_models import OrderDetails
from order_pricing_service.observability.metrics import OrderMetrics
from order_pricing_service.observability.spans import Outcome, record_outcome, start_span

logger = logging.getLogger(__name__)

TOTAL_SPAN_NAME = "process total price"
LOOKUP_SPAN_NAME = "retrieve order"

DATABASE_FAILURE_MESSAGE = "Failed to talk to the database"

# Candidate prices, indexed by order_number % 3
PRICES = (999, 1089, 1029)


class OrderLookupError(Exception):
    """Raised when the order store cannot be reached."""


class OrderService:
    """Service for pricing orders.

    Order lookups are simulated: every order number divisible by 4 fails as
    if the database were unreachable, every other order number resolves to
    one of three fixed prices.

    Each operation opens its own span from the injected tracer and records
    its outcome on that span.
    """

    def __init__(self, tracer: trace.Tracer, metrics: OrderMetrics | None = None) -> None:
        """Initialize the OrderService.

        Args:
            tracer: Tracer used to create operation spans
            metrics: Optional metrics to record lookup and total outcomes
        """
        self.tracer = tracer
        self.metrics = metrics

    def get_total(
        self,
        order_numbers: Iterable[int],
        parent: trace.Span | None = None,
    ) -> int:
        """Compute the total price of a list of orders.

        Orders are looked up in the given order. The first failing lookup
        aborts the computation and its error is raised unchanged.

        Args:
            order_numbers: Order identifiers to price
            parent: Optional parent span for the computation span

        Returns:
            Sum of the prices of all orders

        Raises:
            OrderLookupError: If any order lookup fails
        """
        with start_span(self.tracer, TOTAL_SPAN_NAME, parent=parent) as span:
            total = 0
            count = 0

            for order_number in order_numbers:
                try:
                    order_details = self.get_order_details(order_number, parent=span)
                except OrderLookupError:
                    record_outcome(span, Outcome.FAILURE)
                    self._record_total(Outcome.FAILURE)
                    logger.warning(
                        f"Total price computation aborted at order {order_number} "
                        f"after {count} orders"
                    )
                    raise

                total += order_details.price
                count += 1

            record_outcome(span, Outcome.SUCCESS)
            self._record_total(Outcome.SUCCESS, total)
            logger.info(f"Computed total price {total} for {count} orders")
            return total

    def get_order_details(
        self,
        order_number: int,
        parent: trace.Span | None = None,
    ) -> OrderDetails:
        """Look up the details of a single order.

        This simulates what would normally be a database query.

        Args:
            order_number: The order identifier
            parent: Optional parent span for the lookup span

        Returns:
            OrderDetails with the order's price

        Raises:
            OrderLookupError: If the order number is divisible by 4
        """
        with start_span(self.tracer, LOOKUP_SPAN_NAME, parent=parent) as span:
            if order_number % 4 == 0:
                record_outcome(span, Outcome.FAILURE)
                self._record_lookup(Outcome.FAILURE)
                logger.warning(f"Failed to retrieve order {order_number}")
                raise OrderLookupError(DATABASE_FAILURE_MESSAGE)

            price = PRICES[order_number % len(PRICES)]
            record_outcome(span, Outcome.SUCCESS)
            self._record_lookup(Outcome.SUCCESS)
            logger.debug(f"Retrieved order {order_number} with price {price}")
            return OrderDetails(order_number=order_number, price=price)

    def _record_lookup(self, outcome: Outcome) -> None:
        if self.metrics is not None:
            self.metrics.record_lookup(outcome)

    def _record_total(self, outcome: Outcome, total: int | None = None) -> None:
        if self.metrics is not None:
            self.metrics.record_total(outcome, total)
