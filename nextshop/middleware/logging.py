"""
NextShop Catalog — Request Logging Middleware
===============================================

What:  One access log line per HTTP request on logger `nextshop.access`.
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

Line format:
    GET /products 200 3.1ms [req-id]
    POST /products 201 8.4ms [req-id] product=665f1c2e9b1e8a3d4c5b6a79

The `product=` suffix appears when a route handler recorded the id of the
product it created on `request.state.product_id`. Requests that fail before
a response exists are logged as status 500 and the error is re-raised.

Level by status: 5xx → ERROR, 4xx → WARNING, everything else → INFO.
GET /ping is not logged; monitors call it every few seconds.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from nextshop.middleware.request_id import request_id_var

logger = logging.getLogger("nextshop.access")

SKIPPED_PATHS = frozenset({"/ping"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in SKIPPED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            self._log(request, status, (time.perf_counter() - started) * 1000)

    @staticmethod
    def _log(request: Request, status: int, duration_ms: float) -> None:
        product_id = getattr(request.state, "product_id", None)
        fields = {
            "request_id": request_id_var.get(""),
            "method": request.method,
            "path": request.url.path,
            "status": status,
            "duration_ms": round(duration_ms, 2),
            "client_ip": request.client.host if request.client else "unknown",
            "product_id": product_id,
        }
        message = "%s %s %d %.1fms [%s]"
        args = [fields["method"], fields["path"], status, duration_ms, fields["request_id"]]
        if product_id:
            message += " product=%s"
            args.append(product_id)
        logger.log(level_for_status(status), message, *args, extra=fields)
