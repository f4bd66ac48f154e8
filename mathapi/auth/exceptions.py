"""Custom exceptions for authentication and the API error taxonomy."""


class MathAPIError(Exception):
    """Base exception for all Math API errors."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class TokenSigningError(MathAPIError):
    """Raised when a token cannot be signed."""

    def __init__(self):
        super().__init__(message="Failed to generate token", code="TOKEN_SIGNING_FAILED")


class AuthenticationError(MathAPIError):
    """Raised when authentication fails."""
    pass


class InvalidTokenError(AuthenticationError):
    """Raised when the bearer token is missing or the header is malformed."""
    pass


class MalformedTokenError(InvalidTokenError):
    """Raised when a token or its claims cannot be parsed."""
    pass


class InvalidSignatureError(InvalidTokenError):
    """Raised when a token signature does not match."""
    pass


class ExpiredTokenError(AuthenticationError):
    """Raised when a token has expired."""
    pass


class InvalidCredentialsError(AuthenticationError):
    """Raised when a username/password pair is rejected at login."""

    def __init__(self):
        super().__init__(message="Invalid credentials", code="INVALID_CREDENTIALS")
