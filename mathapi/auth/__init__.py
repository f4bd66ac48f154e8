"""Auth module initialization."""

from .exceptions import (
    MathAPIError,
    TokenSigningError,
    AuthenticationError,
    InvalidTokenError,
    MalformedTokenError,
    InvalidSignatureError,
    ExpiredTokenError,
    InvalidCredentialsError,
)
from .models import Credentials, TokenResponse, UserClaims, AuthenticatedUser
from .tokens import TokenService

__all__ = [
    # Exceptions
    "MathAPIError",
    "TokenSigningError",
    "AuthenticationError",
    "InvalidTokenError",
    "MalformedTokenError",
    "InvalidSignatureError",
    "ExpiredTokenError",
    "InvalidCredentialsError",
    # Models
    "Credentials",
    "TokenResponse",
    "UserClaims",
    "AuthenticatedUser",
    # Tokens
    "TokenService",
]
