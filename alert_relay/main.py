"""
PURPOSE: Main FastAPI application factory and lifecycle management for the alert relay.

Initializes the FastAPI application with:
- API routers (webhook, alerts, system) and the live WebSocket stream
- CORS middleware and rate limiting
- Exception handlers so no error escapes as an unformatted response
- Startup events (logging, tables, EventBus, handlers, notification dispatcher)
- Shutdown events (resource cleanup)
- Metadata from version.json
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from alert_relay.api import api_router
from alert_relay.api.routes_ws import router as ws_router, setup_ws_event_handlers
from alert_relay.config.settings import settings
from alert_relay.core.rate_limit import limiter
from alert_relay.db.engine import engine, init_models
from alert_relay.events.bus import EventBus, get_event_bus, set_event_bus
from alert_relay.events.handlers import register_all_handlers, wait_for_pending_notifications
from alert_relay.notifications import (
    NotificationConfig,
    NotificationDispatcher,
    set_notification_dispatcher,
)
from alert_relay.utils.logger import get_logger, setup_logging
from alert_relay.version import get_version


logger = get_logger(__name__)

_redis_listener: Optional[asyncio.Task] = None


# ════════════════════════════════════════════════════════════════
# Lifecycle Events
# ════════════════════════════════════════════════════════════════


async def on_startup() -> None:
    """
    PURPOSE: Execute startup tasks.

    CALLED BY: FastAPI lifespan startup

    Tasks:
        1. Setup logging with configured level
        2. Create missing tables
        3. Connect the EventBus to Redis (optional; local-only on failure)
        4. Build the notification dispatcher from settings
        5. Register event handlers and WebSocket broadcasting
        6. Start the Redis subscription listener
    """
    global _redis_listener

    try:
        setup_logging(settings.LOG_LEVEL)
        logger.info(
            "application_startup_starting",
            version=get_version().get("version"),
            log_level=settings.LOG_LEVEL,
            app_env=settings.APP_ENV,
        )

        await init_models()
        logger.info("database_tables_ready")

        event_bus = EventBus(settings.REDIS_URL)
        try:
            await event_bus.connect()
        except Exception as e:
            logger.warning("event_bus_redis_unavailable", error=str(e))
        set_event_bus(event_bus)

        dispatcher = NotificationDispatcher(NotificationConfig.from_settings(settings))
        set_notification_dispatcher(dispatcher)
        logger.info(
            "notification_dispatcher_ready",
            enabled=settings.NOTIFICATIONS_ENABLED,
            transports=dispatcher.transport_names,
        )

        register_all_handlers(event_bus, dispatcher)
        setup_ws_event_handlers(event_bus)
        logger.info("event_handlers_registered")

        if event_bus.is_connected:
            _redis_listener = asyncio.create_task(event_bus.subscribe_redis())
            logger.info("redis_subscription_started")

        logger.info("application_startup_complete")

    except Exception as e:
        logger.critical("application_startup_failed", error=str(e))
        raise


async def on_shutdown() -> None:
    """
    PURPOSE: Execute shutdown tasks to gracefully close resources.

    CALLED BY: FastAPI lifespan shutdown

    Tasks:
        1. Stop the Redis subscription listener
        2. Let in-flight notifications finish
        3. Disconnect from EventBus
        4. Dispose the database engine
    """
    global _redis_listener

    try:
        logger.info("application_shutdown_starting")

        if _redis_listener is not None:
            _redis_listener.cancel()
            try:
                await _redis_listener
            except asyncio.CancelledError:
                pass
            _redis_listener = None

        await wait_for_pending_notifications(timeout=settings.NOTIFICATION_TIMEOUT_SECONDS)

        await get_event_bus().disconnect()
        logger.info("event_bus_disconnected")

        await engine.dispose()
        logger.info("application_shutdown_complete")

    except Exception as e:
        logger.error("application_shutdown_error", error=str(e))
        raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    PURPOSE: Manage application lifespan with startup and shutdown events.

    Args:
        app: FastAPI application instance
    """
    await on_startup()

    yield

    await on_shutdown()


# ════════════════════════════════════════════════════════════════
# Exception Handlers
# ════════════════════════════════════════════════════════════════


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    PURPOSE: Handle Pydantic validation errors with consistent JSON response.

    Args:
        request: HTTP request that failed validation
        exc: RequestValidationError with validation details

    Returns:
        JSONResponse: Formatted error response with validation details
    """
    logger.warning(
        "request_validation_failed",
        path=request.url.path,
        method=request.method,
        error_count=len(exc.errors())
    )

    safe_errors = jsonable_encoder(
        exc.errors(),
        custom_encoder={
            ValueError: lambda e: str(e),
            Exception: lambda e: str(e),
        },
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "status": "error",
            "detail": "Request validation failed",
            "errors": safe_errors,
        },
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    PURPOSE: Handle unexpected exceptions with logging and safe error response.

    Args:
        request: HTTP request that raised exception
        exc: Exception that was raised

    Returns:
        JSONResponse: Safe error response without exposing internals
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exception_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "status": "error",
            "detail": "Internal server error",
        },
    )


# ════════════════════════════════════════════════════════════════
# FastAPI Application Factory
# ════════════════════════════════════════════════════════════════


def create_app() -> FastAPI:
    """
    PURPOSE: Create and configure FastAPI application with all routers, middleware, and handlers.

    CALLED BY: Application entrypoint (uvicorn), tests

    Returns:
        FastAPI: Configured FastAPI application ready to run
    """
    try:
        version_data = get_version()
        version = version_data.get("version", "unknown")
        description = f"TradingView Alert Relay - {version_data.get('codename', 'Relay')}"
    except Exception as e:
        logger.warning("version_data_unavailable", error=str(e))
        version = "unknown"
        description = "TradingView Alert Relay"

    app = FastAPI(
        title="TradingView Alert Relay",
        description=description,
        version=version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # ────────────────────────────────────────────────────────────
    # Middleware
    # ────────────────────────────────────────────────────────────

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=False,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    # ────────────────────────────────────────────────────────────
    # Routes
    # ────────────────────────────────────────────────────────────

    app.include_router(api_router)
    app.include_router(ws_router)

    @app.get("/", tags=["root"])
    async def root():
        """
        PURPOSE: Root endpoint for API availability check.

        Returns:
            dict: Service information and version
        """
        return {
            "status": "ok",
            "service": "TradingView Alert Relay",
            "version": version,
            "webhook_url_hint": "/api/webhook",
        }

    # ────────────────────────────────────────────────────────────
    # Exception Handlers
    # ────────────────────────────────────────────────────────────

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info(
        "fastapi_application_created",
        version=version,
        api_prefix="/api"
    )

    return app


# Create the application
app = create_app()


if __name__ == "__main__":
    """
    PURPOSE: Run FastAPI application with Uvicorn server.

    Usage:
        python -m alert_relay.main
        OR
        uvicorn alert_relay.main:app --host 0.0.0.0 --port 8000 --reload
    """
    import uvicorn

    uvicorn.run(
        "alert_relay.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development(),
        log_level=settings.LOG_LEVEL.lower(),
    )
