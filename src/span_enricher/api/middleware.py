"""
Request logging and last-resort error handling for the enrichment API.
"""

import time
from typing import Callable
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger(__name__)


def setup_logging_middleware(app: FastAPI) -> None:
    """Log each request and stamp its duration in ``X-Process-Time``."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable) -> Response:
        started = time.time()
        path = request.url.path

        logger.info(
            "request_started",
            method=request.method,
            path=path,
            client=request.client.host if request.client else None,
        )

        response = await call_next(request)
        elapsed = time.time() - started

        logger.info(
            "request_completed",
            method=request.method,
            path=path,
            status_code=response.status_code,
            process_time_ms=round(elapsed * 1000, 2),
        )

        response.headers["X-Process-Time"] = str(elapsed)
        return response


def setup_error_handling_middleware(app: FastAPI) -> None:
    """
    Turn exceptions that escape a route into a 500 JSON body.

    The body has the same ``success``/``error`` keys as a failed enrichment
    response; exception text is only exposed when the app runs in debug mode.
    """

    @app.middleware("http")
    async def handle_errors(request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(
                "request_unhandled_exception",
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                error=str(e),
                exc_info=True,
            )
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": "Internal server error",
                    "detail": str(e) if app.debug else "Enrichment service failed unexpectedly",
                },
            )
