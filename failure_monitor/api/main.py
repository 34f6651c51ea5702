"""
Main FastAPI application.

Payment failure monitor API with:
- Request ID tracking
- Structured logging
- Error handling
"""
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from failure_monitor import __version__
from failure_monitor.config import get_settings
from failure_monitor.monitoring.logging import setup_logging

from .routes import monitoring_router, webhook_router
from .services import MonitorServices, build_services

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, Any]:
    """
    Application lifespan manager.

    Builds services from settings unless they were injected at creation time.
    """
    owned: Optional[MonitorServices] = None
    if getattr(app.state, "services", None) is None:
        settings = get_settings()
        setup_logging(settings)
        owned = build_services(settings)
        app.state.services = owned

        logger.info(
            "application_startup",
            app_name=settings.app_name,
            env=settings.app_env,
            port=settings.port,
        )
        owned.activity_log.record(f"Payment failure monitor started on port {settings.port}")

    yield

    logger.info("application_shutdown")
    if owned is not None:
        await owned.aclose()
        app.state.services = None


def create_app(services: Optional[MonitorServices] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        services: Prebuilt services; built from settings at startup if omitted

    Returns:
        FastAPI: Configured application
    """
    app = FastAPI(
        title="Payment Failure Monitor",
        description=(
            "Receives Stripe payment failure webhooks, emails an operator and "
            "records each failure in Airtable."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services

    @app.middleware("http")
    async def add_request_id_middleware(request: Request, call_next: Any) -> Response:
        """Add a request ID to every request for tracing."""
        request_id = str(uuid.uuid4())
        start_time = time.time()

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id

            logger.info(
                "request_completed",
                status_code=response.status_code,
                duration_seconds=time.time() - start_time,
            )
            return response

        except Exception as e:
            logger.error(
                "request_failed",
                error=str(e),
                duration_seconds=time.time() - start_time,
            )
            raise

        finally:
            structlog.contextvars.clear_contextvars()

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler for unhandled exceptions."""
        logger.error(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred. Please try again later.",
            },
        )

    app.include_router(monitoring_router)
    app.include_router(webhook_router)
    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the monitor with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "failure_monitor.api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
