"""FastAPI application for the local printer relay."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from .middlewares import CORSMiddleware, LoggingMiddleware, RequestIdMiddleware
from .routes_printer import router as printer_router
from .utils.responses import error_response

SERVICE_NAME = "printer-service"

logger = logging.getLogger("printer_relay")


def create_app() -> FastAPI:
    """Build the relay application with its middlewares and routes."""

    app = FastAPI(
        title="Station Printer Relay",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Added last runs first: request ids wrap CORS, which wraps request logs,
    # so preflights answered by CORS still carry an id.
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(CORSMiddleware)
    app.add_middleware(RequestIdMiddleware)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        # unknown paths and unsupported methods both read as "Not found"
        if exc.status_code in (404, 405):
            return error_response(404, "Not found")
        logger.warning(
            exc.detail, extra={"status": exc.status_code, "route": request.url.path}
        )
        return error_response(exc.status_code, str(exc.detail))

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint"""
        return {"status": "ok", "service": SERVICE_NAME}

    app.include_router(printer_router)
    return app


app = create_app()
