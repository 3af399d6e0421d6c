"""FastAPI application for order pricing endpoints."""

import logging
from typing import Annotated, Any

from fastapi import FastAPI, Path, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from order_pricing_service.models.order_models import (
    U64_MAX,
    ErrorResponse,
    OrderDetails,
    TotalPriceRequest,
    TotalPriceResponse,
)
from order_pricing_service.services.order_service import OrderLookupError, OrderService

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


def create_app(order_service: OrderService, lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        order_service: Service for looking up and pricing orders
        lifespan: Optional lifespan context manager owning shared resources

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Order Pricing Service API",
        description="API for pricing orders with traced lookups",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Store services in app state for access in route handlers
    app.state.order_service = order_service

    @app.exception_handler(OrderLookupError)
    async def order_lookup_error_handler(request: Request, exc: OrderLookupError) -> JSONResponse:
        """Report a failed order lookup as an unavailable dependency."""
        logger.warning(f"Order lookup failed for {request.url.path}: {exc}")
        return JSONResponse(
            status_code=503,
            content=ErrorResponse(detail=str(exc)).model_dump(),
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint.

        Returns:
            Health status indicating service is running
        """
        return HealthResponse(status="healthy")

    @app.post(
        "/orders/total",
        response_model=TotalPriceResponse,
        responses={503: {"model": ErrorResponse}},
        tags=["Orders"],
    )
    def compute_total(payload: TotalPriceRequest) -> TotalPriceResponse:
        """Compute the total price of a list of orders.

        Args:
            payload: The order numbers to price

        Returns:
            The total price of all orders
        """
        total = app.state.order_service.get_total(payload.order_numbers)
        return TotalPriceResponse(total=total)

    @app.get(
        "/orders/{order_number}",
        response_model=OrderDetails,
        responses={503: {"model": ErrorResponse}},
        tags=["Orders"],
    )
    def get_order(order_number: Annotated[int, Path(ge=0, le=U64_MAX)]) -> OrderDetails:
        """Get the details of a single order.

        Args:
            order_number: The order identifier

        Returns:
            The order's details
        """
        order_details: OrderDetails = app.state.order_service.get_order_details(order_number)
        return order_details

    return app
