"""Base domain exceptions."""


class DomainException(Exception):
    """
    Base class for ledger errors.

    ``code`` is the stable identifier returned as ``error`` in API
    responses; ``message`` is for humans.
    """

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class InvalidInputException(DomainException):
    """Raised when a request is malformed (bad amount, missing fields)."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="INVALID_INPUT",
        )


class ForbiddenException(DomainException):
    """Raised when the authenticated caller may not act on a resource."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(
            message=message,
            code="FORBIDDEN",
        )
