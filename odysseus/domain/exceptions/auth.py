"""Authentication and user-related domain exceptions."""

from .base import DomainException


class AuthenticationException(DomainException):
    """Raised when a request carries no valid identity."""

    def __init__(self, message: str = "Unauthenticated"):
        super().__init__(
            message=message,
            code="UNAUTHENTICATED",
        )


class InvalidCredentialsException(AuthenticationException):
    """Raised when an email/password pair does not match."""

    def __init__(self):
        super().__init__(message="Invalid credentials")
        self.code = "INVALID_CREDENTIALS"


class UserNotFoundException(DomainException):
    """Raised when a user cannot be found."""

    def __init__(self, user_id: str):
        super().__init__(
            message=f"User not found: {user_id}",
            code="USER_NOT_FOUND",
        )
        self.user_id = user_id


class EmailAlreadyInUseException(DomainException):
    """Raised when registering an email that already exists."""

    def __init__(self, email: str):
        super().__init__(
            message="Email already in use",
            code="EMAIL_IN_USE",
        )
        self.email = email
