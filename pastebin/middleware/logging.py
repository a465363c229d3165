"""
Pastebin Backend - Request Logging Middleware
==============================================

What:  One access-log line per HTTP request: method, path, status, duration,
       request ID, whether the caller was signed in, and the paste a create
       redirected to.
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

Level by status: 5xx → ERROR, 4xx → WARNING, everything else → INFO.
Paste contents and the identity itself are never logged, only whether the
proxy supplied one.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from pastebin.config import settings
from pastebin.middleware.request_id import request_id_var

logger = logging.getLogger("pastebin.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request, with paste context where there is some."""

    # Probed every few seconds by load balancers
    QUIET_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        header_name = getattr(request.app.state, "identity_header", settings.identity_header)
        signed_in = bool(request.headers.get(header_name, "").strip())

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        # POST /update/ answers with a redirect to the new paste
        created = ""
        if request.method == "POST" and status == 302:
            created = response.headers.get("location", "").lstrip("/")

        rid = request_id_var.get("")
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] %s%s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            "signed-in" if signed_in else "anonymous",
            f" created={created}" if created else "",
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "signed_in": signed_in,
                "paste_id": created or None,
            },
        )

        return response
