"""Access logging and HTTP metrics."""

import time
from typing import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from odysseus.core.config import settings
from odysseus.core.metrics import record_http_request

logger = structlog.get_logger(__name__)

# Scraped and polled often enough to drown the access log.
QUIET_PATHS = frozenset({"/metrics", "/v1/health"})


def _endpoint_label(request: Request) -> str:
    """Route template for metric labels, falling back to the raw path."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def _level_for(status_code: int) -> str:
    if status_code >= 500:
        return "error"
    if status_code >= 400:
        return "warning"
    return "info"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    One ``request_completed`` event per request, with status and duration.

    Client errors are logged at warning and server errors at error, so a
    rejected debit and a failed log append stand out from normal traffic.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        method = request.method
        path = request.url.path
        quiet = path in QUIET_PATHS

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                method=method,
                path=path,
                error=str(exc),
                error_type=type(exc).__name__,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise

        duration = time.perf_counter() - started
        if not quiet or response.status_code >= 400:
            getattr(logger, _level_for(response.status_code))(
                "request_completed",
                method=method,
                path=path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )
        if settings.metrics_enabled:
            record_http_request(method, _endpoint_label(request), response.status_code, duration)

        return response
