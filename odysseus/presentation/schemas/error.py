"""Error body shared by every non-2xx response."""

from pydantic import BaseModel, Field


class ErrorResponseSchema(BaseModel):
    """
    ``error`` is one of the stable codes (``INVALID_INPUT``,
    ``UNAUTHENTICATED``, ``FORBIDDEN``, ``ACCOUNT_NOT_FOUND``,
    ``INSUFFICIENT_FUNDS``, ``IDEMPOTENCY_KEY_CONFLICT``,
    ``LEDGER_INCONSISTENT``...); clients should branch on it, not on
    ``message``.
    """

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": "INSUFFICIENT_FUNDS",
                    "message": "Insufficient funds",
                    "request_id": "4f1c2e9a0b7d4e8f9a1b2c3d4e5f6a7b",
                }
            ]
        }
    }

    error: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable explanation")
    request_id: str | None = Field(
        None,
        description="Echo of the X-Request-ID header, for correlating with logs",
    )
