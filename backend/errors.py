"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class MarketDataError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class UnsupportedPeriodError(MarketDataError):
    def __init__(self, period: str, supported):
        super().__init__(
            f"Unsupported period: {period}. Supported: {sorted(supported)}",
            status_code=400,
        )


class UpstreamError(MarketDataError):
    """The market-data API answered with a failure (or could not be reached).

    ``upstream_status`` is the status the upstream returned, ``None`` when no
    response was received. ``status_code`` is what we answer our own callers with.
    """

    def __init__(self, message: str, upstream_status: int | None = None, body=None):
        super().__init__(message, status_code=404 if upstream_status == 404 else 502)
        self.upstream_status = upstream_status
        self.body = body


class UpstreamTimeoutError(UpstreamError):
    def __init__(self, path: str, timeout: float):
        super().__init__(f"Upstream request to {path} timed out after {timeout}s")
        self.status_code = 504
        self.timeout = timeout


class DecodeError(UpstreamError):
    """Response body was not JSON, or not the shape the endpoint requires."""

    def __init__(self, message: str, upstream_status: int | None = None):
        super().__init__(message, upstream_status=upstream_status)
        self.status_code = 502


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(MarketDataError)
    async def handle_market_data_error(_request: Request, exc: MarketDataError):
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(ValueError)
    async def handle_value_error(_request: Request, exc: ValueError):
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
        )
