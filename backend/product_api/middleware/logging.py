"""
Product API - Request Logging Middleware
==========================================

What:  One access-log line per HTTP request.
How:   Measures the time spent in the rest of the stack and logs method, path,
       status, duration, request ID and client IP, plus the match count of
       list responses (X-Total-Count). Level follows the status:
       5xx → ERROR, 4xx → WARNING, otherwise INFO.
Who:   Applied to every request via Starlette middleware, inside
       RequestIDMiddleware so the request ID is already set.

Request bodies are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from product_api.middleware.request_id import request_id_var

logger = logging.getLogger("product_api.access")

TOTAL_COUNT_HEADER = "X-Total-Count"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs structured information about each HTTP request and response."""

    # Polled by probes every few seconds
    QUIET_PATHS = {"/", "/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        extra = {
            "request_id": rid,
            "method": method,
            "path": path,
            "status": status,
            "duration_ms": round(duration_ms, 2),
            "client_ip": client_ip,
        }
        summary = f"{method} {path} {status} {duration_ms:.1f}ms"
        # List and count responses: record how many products matched
        total = response.headers.get(TOTAL_COUNT_HEADER)
        if total is not None:
            extra["total"] = int(total)
            summary += f" total={total}"

        logger.log(log_level, "%s [%s] from %s", summary, rid, client_ip, extra=extra)

        return response
