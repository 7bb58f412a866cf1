"""FastAPI application entry point and lifecycle management."""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from feed_subscriptions.logging_config import configure_logging, get_logger
from feed_subscriptions.middleware import ContextMiddleware, RequestLoggingMiddleware

logger = get_logger(__name__)

SERVICE_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager.

    Handles startup and shutdown events.
    """
    from feed_subscriptions.services.subscription_service import get_subscription_service

    logger.info("service_starting", version=SERVICE_VERSION)
    service = get_subscription_service()

    try:
        if service.context.dispatcher.is_enabled():
            logger.info("pubsub_enabled", message="Event dispatcher initialized and ready")
        else:
            logger.info("pubsub_disabled", message="Events are kept in memory only")

        logger.info(
            "service_started",
            status="ready",
            contract_address=service.context.contract_address,
        )
        yield
    finally:
        logger.info("service_shutting_down")
        service.context.dispatcher.shutdown()
        logger.info("service_stopped")


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    log_level = os.getenv("LOG_LEVEL", "INFO")
    json_format = os.getenv("LOG_FORMAT", "json").lower() == "json"
    configure_logging(log_level=log_level, json_format=json_format)

    app = FastAPI(
        title="Feed Subscriptions",
        description="Balance-funded subscriptions to price-feed notifications",
        version=SERVICE_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Allow all for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    include_request_details = os.getenv("LOG_REQUEST_DETAILS", "true").lower() == "true"
    app.add_middleware(RequestLoggingMiddleware, include_request_details=include_request_details)
    app.add_middleware(ContextMiddleware)

    from feed_subscriptions.api.contract import router as contract_router
    from feed_subscriptions.api.control import router as control_router
    from feed_subscriptions.api.subscriptions import router as subscriptions_router

    app.include_router(contract_router)
    app.include_router(subscriptions_router)
    app.include_router(control_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Health check endpoint."""
        logger.debug("root_endpoint_called")
        return {
            "service": "feed-subscriptions",
            "status": "running",
            "version": SERVICE_VERSION,
        }

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Detailed health check."""
        from feed_subscriptions.services.subscription_service import get_subscription_service

        ctx = get_subscription_service().context
        return {
            "status": "healthy",
            "pubsub": "connected" if ctx.dispatcher.is_enabled() else "disabled",
            "contract": "initialized" if ctx.config_store.is_initialized() else "not_initialized",
        }

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc: Exception) -> JSONResponse:
        """Handle uncaught exceptions."""
        logger.error(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "code": None,
                "message": "An unexpected error occurred",
            },
        )

    logger.info("app_created", endpoints=len(app.routes))
    return app


app = create_app()
