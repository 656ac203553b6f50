"""
Product API - Request ID Middleware
=====================================

What:  Assigns a correlation ID to each request and echoes it in the response.
How:   Uses the client's X-Request-ID header when present, otherwise a short
       UUID; stores it in a ContextVar (read by loggers and error handlers)
       and on request.state.
Who:   Outermost user middleware, so it also turns exceptions that escape
       the exception handlers into a 500 that still carries the ID.
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Any, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."

# Coroutine-local: concurrent requests on one event loop each see their own value
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def error_body(message: str, code: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """The shared error shape: {"error", "code", "details"?, "request_id"}."""
    body: Dict[str, Any] = {"error": message, "code": code}
    if details:
        body["details"] = details
    body["request_id"] = request_id_var.get("")
    return body


def unexpected_error_response() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=error_body(UNEXPECTED_ERROR_MESSAGE, "internal_server_error"),
    )


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Use X-Request-ID from the client if present
        2. Otherwise generate an 8-character UUID prefix
        3. Store it in request_id_var and request.state.request_id
        4. Render unhandled exceptions as a generic 500
        5. Add the ID to the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "[%s] Unexpected error on %s %s: %s",
                rid,
                request.method,
                request.url.path,
                str(e),
                exc_info=True,
            )
            response = unexpected_error_response()
        response.headers[REQUEST_ID_HEADER] = rid
        return response
