"""
Application factory for the two hit services.

This is the only place that wires settings, logging, storage selection
and routers together. Each process builds its own app, so each gets its
own storage instance.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from hit_counter.api import counter, health, logger
from hit_counter.config import ServiceName, Settings
from hit_counter.log import setup_logging
from hit_counter.schemas.hit import ErrorResponse
from hit_counter.storage.factory import HitStorageFactory

log = structlog.get_logger()


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies (bad JSON, unparseable timestamp) are a 400, like a missing timestamp"""
    errors = exc.errors()
    detail = errors[0].get("msg", "invalid input") if errors else "invalid input"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(message=f"Invalid request: {detail}").to_content()
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    """Anything a route didn't map itself still gets a JSON error body"""
    log.exception("unhandled_request_error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(message="Internal server error").to_content()
    )


def create_app(service: ServiceName, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI app for one service.

    Args:
        service: Which service this process runs
        settings: Settings to use (default: loaded from the environment)
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Select storage before serving the first request, close it on shutdown"""
        setup_logging(settings)
        log.info("service_starting", service=service.value, environment=settings.environment)

        storage = HitStorageFactory.create(settings)
        app.state.settings = settings
        app.state.storage = storage
        app.state.service_name = service.value

        log.info("service_started", service=service.value, database=storage.kind,
                 port=settings.port_for(service))

        yield

        await storage.close()
        log.info("service_stopped", service=service.value)

    app = FastAPI(
        title=f"Hit Counter: {service.value}",
        version="1.0.0",
        description="Records page hits and serves hit counts and statistics",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    ######## Include routers
    app.include_router(health.router)
    if service == ServiceName.HIT_LOGGER:
        app.include_router(logger.router)
    else:
        app.include_router(counter.router)

    return app
