"""API middleware: CORS, request logging, and error handling.

Starlette middleware is a stack (last added runs first).  ``main.py`` adds
``ErrorHandlingMiddleware`` and then ``RequestLoggingMiddleware``, so a
request passes logging -> error handling -> route, and the logged status
is the final one, after an ``IngestError`` became a JSON 500.
"""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from ragingest.api.schemas import ErrorResponse
from ragingest.utils.errors import IngestError
from ragingest.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

_REQUEST_ID_HEADER = "X-Request-ID"


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware; all origins are allowed unless *allowed_origins* is given."""
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration.

    A request id (the caller's ``X-Request-ID`` or a fresh one) is bound into
    structlog's context vars, so pipeline log lines emitted while serving the
    request carry it, and it is echoed back on the response.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(_REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.bind_contextvars(request_id=request_id)
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            response.headers[_REQUEST_ID_HEADER] = request_id
            return response
        finally:
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=response.status_code if response else 500,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id")


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Convert uncaught ``IngestError`` subclasses into a JSON 500.

    The body names the exception class and carries its message; stack
    traces stay in the server log.  Other exceptions fall through to
    FastAPI's default handler.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except IngestError as exc:
            _logger.error(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
            )
            body = ErrorResponse(error=type(exc).__name__, detail=exc.message)
            return JSONResponse(status_code=500, content=body.model_dump())
