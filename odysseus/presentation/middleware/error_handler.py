"""Error handling middleware and exception handlers."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

from odysseus.domain.exceptions import (
    DomainException,
    InvalidInputException,
    AuthenticationException,
    ForbiddenException,
    AccountNotFoundException,
    UserNotFoundException,
    TransactionNotFoundException,
    InsufficientFundsException,
    EmailAlreadyInUseException,
    IdempotencyKeyConflictException,
    LedgerConsistencyException,
)
from .request_context import get_request_id

logger = structlog.get_logger(__name__)


def _error_response(status_code: int, code: str, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": code,
            "message": message,
            "request_id": get_request_id(),
        },
        headers=headers,
    )


def error_handler_middleware(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI app.

    Maps domain exceptions to appropriate HTTP responses.
    """

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle malformed request bodies, paths and queries."""
        details = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        )
        return _error_response(400, "INVALID_INPUT", f"Invalid input: {details}")

    @app.exception_handler(InvalidInputException)
    async def invalid_input_handler(
        request: Request,
        exc: InvalidInputException,
    ) -> JSONResponse:
        """Handle invalid input errors."""
        return _error_response(400, exc.code, f"Invalid input: {exc.message}")

    @app.exception_handler(AuthenticationException)
    async def authentication_handler(
        request: Request,
        exc: AuthenticationException,
    ) -> JSONResponse:
        """Handle missing or invalid credentials."""
        return _error_response(
            401,
            exc.code,
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ForbiddenException)
    async def forbidden_handler(
        request: Request,
        exc: ForbiddenException,
    ) -> JSONResponse:
        """Handle ownership violations."""
        return _error_response(403, exc.code, exc.message)

    @app.exception_handler(AccountNotFoundException)
    async def account_not_found_handler(
        request: Request,
        exc: AccountNotFoundException,
    ) -> JSONResponse:
        """Handle account not found errors."""
        return _error_response(404, exc.code, exc.message)

    @app.exception_handler(UserNotFoundException)
    async def user_not_found_handler(
        request: Request,
        exc: UserNotFoundException,
    ) -> JSONResponse:
        """Handle user not found errors."""
        return _error_response(404, exc.code, exc.message)

    @app.exception_handler(TransactionNotFoundException)
    async def transaction_not_found_handler(
        request: Request,
        exc: TransactionNotFoundException,
    ) -> JSONResponse:
        """Handle transaction not found errors."""
        return _error_response(404, exc.code, exc.message)

    @app.exception_handler(InsufficientFundsException)
    async def insufficient_funds_handler(
        request: Request,
        exc: InsufficientFundsException,
    ) -> JSONResponse:
        """Handle rejected debits."""
        return _error_response(409, exc.code, exc.message)

    @app.exception_handler(EmailAlreadyInUseException)
    async def email_in_use_handler(
        request: Request,
        exc: EmailAlreadyInUseException,
    ) -> JSONResponse:
        """Handle duplicate registrations."""
        return _error_response(409, exc.code, exc.message)

    @app.exception_handler(IdempotencyKeyConflictException)
    async def idempotency_conflict_handler(
        request: Request,
        exc: IdempotencyKeyConflictException,
    ) -> JSONResponse:
        """Handle idempotency keys reused across accounts."""
        return _error_response(409, exc.code, exc.message)

    @app.exception_handler(LedgerConsistencyException)
    async def ledger_consistency_handler(
        request: Request,
        exc: LedgerConsistencyException,
    ) -> JSONResponse:
        """Handle balance mutations that could not be logged."""
        logger.critical(
            "ledger_reconciliation_required",
            request_id=get_request_id(),
            account_id=exc.account_id,
            balance_after_cents=exc.balance_after_cents,
            reason=exc.reason,
        )
        return _error_response(500, exc.code, exc.message)

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        """Handle generic domain exceptions."""
        logger.warning(
            "domain_exception",
            request_id=get_request_id(),
            code=exc.code,
            message=exc.message,
        )
        return _error_response(400, exc.code, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions raised outside the request context."""
        logger.exception(
            "unhandled_exception",
            request_id=get_request_id(),
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return _error_response(500, "INTERNAL_ERROR", "An unexpected error occurred.")
