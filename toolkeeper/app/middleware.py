"""Error-handling middleware for the ToolKeeper API.

Installed as the outermost middleware so that every failure raised further
down the pipeline (other middleware, dependencies, route handlers) is turned
into a JSON problem body instead of a raw server fault. Route handlers do not
catch generic failures themselves.

Response body::

    {
        "status": 404,
        "title": "Not Found",
        "detail": "Tool 7 not found",
        "type": "NotFoundError",
        "trace_id": "3f0c..."
    }
"""

from __future__ import annotations

import logging
import uuid
from http import HTTPStatus

from starlette.middleware.base import (BaseHTTPMiddleware,
                                       RequestResponseEndpoint)
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from toolkeeper.infrastructure.observability import log_context, log_exception
from toolkeeper.services.errors import (ConflictError, InvalidOperationError,
                                        NotFoundError, ServiceError)

STATUS_BY_ERROR: dict[type[ServiceError], int] = {
    NotFoundError: 404,
    ConflictError: 409,
    InvalidOperationError: 400,
}

GENERIC_DETAIL = "An unexpected error occurred while processing the request."


def status_for(exc: BaseException) -> int:
    """Return the HTTP status a failure translates to."""
    for error_type in type(exc).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]
    if isinstance(exc, ServiceError):
        return 400
    return 500


def problem_body(status: int, detail: str, exc: BaseException, trace_id: str) -> dict[str, object]:
    return {
        "status": status,
        "title": HTTPStatus(status).phrase,
        "detail": detail,
        "type": type(exc).__name__,
        "trace_id": trace_id,
    }


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Translate unhandled request failures into structured responses.

    Each failure produces exactly one log entry: expected service errors at
    WARNING, everything else at ERROR with its traceback.
    """

    def __init__(self, app: ASGIApp, logger: logging.Logger) -> None:
        super().__init__(app)
        self.logger = logger

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return self._handle(request, exc)

    def _handle(self, request: Request, exc: Exception) -> JSONResponse:
        trace_id = uuid.uuid4().hex
        status = status_for(exc)
        with log_context(method=request.method, path=request.url.path, trace_id=trace_id):
            if status >= 500:
                log_exception(self.logger, "Unhandled error", exc)
                detail = GENERIC_DETAIL
            else:
                self.logger.warning("Request failed: %s", exc)
                detail = str(exc)
        return JSONResponse(
            status_code=status,
            content=problem_body(status, detail, exc, trace_id),
        )


__all__ = [
    "ErrorHandlingMiddleware",
    "GENERIC_DETAIL",
    "STATUS_BY_ERROR",
    "problem_body",
    "status_for",
]
