"""
Synexa-SIS HTTP middleware: request tracing, security headers, body size cap
"""

import time
from typing import Callable
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
from starlette.types import ASGIApp

from synexa.core.logging_config import (
    logger,
    set_request_id,
    generate_request_id,
    clear_context,
)


QUIET_PATHS = frozenset({"/", "/health", "/favicon.ico", "/docs", "/redoc", "/openapi.json"})


def should_skip_logging(path: str) -> bool:
    """Health checks and API docs are not worth a log line per hit"""
    return path in QUIET_PATHS or path.startswith("/docs/")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with an id (client supplied ``X-Request-ID`` or a
    fresh one), logs its outcome and timing, and echoes both back in
    ``X-Request-ID`` / ``X-Response-Time``.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)

        route = f"{request.method} {request.url.path}"
        quiet = should_skip_logging(request.url.path)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed = (time.perf_counter() - started) * 1000
            logger.error(
                f"{route} raised {type(exc).__name__} after {elapsed:.2f}ms",
                exc_info=True,
                extra={"event_type": "http_request_error", "http_path": request.url.path, "duration_ms": elapsed},
            )
            clear_context()
            raise

        elapsed = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{elapsed:.2f}ms"

        if not quiet:
            status_code = response.status_code
            level = "error" if status_code >= 500 else "warning" if status_code >= 400 else "info"
            getattr(logger, level)(
                f"{route} -> {status_code} ({elapsed:.2f}ms)",
                extra={
                    "event_type": "http_request",
                    "http_method": request.method,
                    "http_path": request.url.path,
                    "http_status": status_code,
                    "duration_ms": elapsed,
                    "client_ip": request.client.host if request.client else None,
                }
            )
            logger.log_performance(route, elapsed)

        clear_context()
        return response


SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects bodies whose declared Content-Length exceeds ``max_size``"""

    def __init__(self, app: ASGIApp, max_size: int):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_size:
            logger.warning(
                f"Rejected {declared} byte body on {request.url.path}",
                extra={"event_type": "request_too_large", "max_size": self.max_size},
            )
            return JSONResponse(
                status_code=413,
                content={
                    "success": False,
                    "error": {
                        "code": "FILE_TOO_LARGE",
                        "message": f"Pedido demasiado grande. Máximo de {self.max_size // (1024 * 1024)}MB",
                        "details": {"max_size": self.max_size},
                    },
                },
            )
        return await call_next(request)
