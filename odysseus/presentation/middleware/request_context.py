"""Per-request correlation id, shared with logs and error bodies."""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = structlog.get_logger(__name__)

# Client-supplied ids are echoed into logs, so only short tokens are trusted.
_ACCEPTED_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    return request_id_var.get()


def resolve_request_id(incoming: Optional[str]) -> str:
    """Reuse a well-formed client id, otherwise mint a new one."""
    if incoming and _ACCEPTED_REQUEST_ID.match(incoming):
        return incoming
    return uuid.uuid4().hex


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Binds a request id for the duration of a request.

    The id lands in ``request_id_var`` (error bodies), the structlog
    contextvars (every log line) and the ``X-Request-ID`` response header.
    Caller identity is bound later by the auth dependency.

    Exceptions that no registered handler claimed are turned into the 500
    ``INTERNAL_ERROR`` body here, while the id is still bound.
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(self, request: Request, call_next):
        request_id = resolve_request_id(request.headers.get(self.HEADER_NAME))

        token = request_id_var.set(request_id)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception(
                "unhandled_exception",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            response = JSONResponse(
                status_code=500,
                content={
                    "error": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred.",
                    "request_id": request_id,
                },
            )
        finally:
            structlog.contextvars.clear_contextvars()
            request_id_var.reset(token)

        response.headers[self.HEADER_NAME] = request_id
        return response
