"""Main application entry point for the order pricing service.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
"""

import logging
import os
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from fastapi import FastAPI

from order_pricing_service.handlers.api_handler import create_app
from order_pricing_service.observability import (
    OrderMetrics,
    TelemetryPipeline,
    configure_logging,
    setup_observability,
)
from order_pricing_service.observability.config import instrument_app
from order_pricing_service.services.order_service import OrderService

logger = logging.getLogger(__name__)

INSTRUMENTATION_NAME = "order_pricing_service"


def create_lifespan(
    pipeline: TelemetryPipeline,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Create a lifespan that shuts the telemetry pipeline down with the app.

    Args:
        pipeline: The telemetry pipeline owned by the application

    Returns:
        Lifespan context manager factory for FastAPI
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        with pipeline:
            yield

    return lifespan


def create_order_service(pipeline: TelemetryPipeline) -> OrderService:
    """Create the order service bound to the telemetry pipeline.

    Args:
        pipeline: The telemetry pipeline receiving spans and metrics

    Returns:
        Configured OrderService instance
    """
    return OrderService(
        tracer=pipeline.get_tracer(INSTRUMENTATION_NAME),
        metrics=OrderMetrics(pipeline.get_meter(INSTRUMENTATION_NAME)),
    )


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Configures logging
    2. Sets up the telemetry pipeline
    3. Creates the order service
    4. Creates the FastAPI app, which shuts the pipeline down on exit
    5. Instruments the app

    Returns:
        Configured FastAPI application instance
    """
    # Configure structured logging
    log_level = os.getenv("LOG_LEVEL", "INFO")
    configure_logging(log_level)

    logger.info("Initializing order pricing service...")

    pipeline = setup_observability()
    pipeline.install_global()

    order_service = create_order_service(pipeline)
    logger.info("Services initialized")

    app = create_app(order_service=order_service, lifespan=create_lifespan(pipeline))
    instrument_app(app, pipeline)

    logger.info("Order pricing service initialized successfully")

    return app


# Create the FastAPI application instance (only when not in test mode)
# This prevents the app from being created during test collection
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    # Create a placeholder app for test imports
    app = FastAPI()


if __name__ == "__main__":
    """Run the application with uvicorn when executed directly."""
    import uvicorn

    port = int(os.getenv("PORT", "8001"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")
    logger.info(f"API documentation available at http://{host}:{port}/docs")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
