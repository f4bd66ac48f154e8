"""FastAPI dependencies for authentication."""

from typing import Annotated

import structlog
from fastapi import Depends, Header, Request

from ..dependencies import get_token_service
from .exceptions import AuthenticationError, InvalidTokenError
from .models import AuthenticatedUser
from .tokens import TokenService

logger = structlog.get_logger("auth")


async def get_token_from_header(authorization: Annotated[str | None, Header()] = None) -> str:
    """Extract the bearer token from the Authorization header.

    Args:
        authorization: Authorization header value (format: 'Bearer <token>').

    Returns:
        Token string.

    Raises:
        InvalidTokenError: If header is missing or malformed.
    """
    if not authorization:
        raise InvalidTokenError("Missing Authorization header")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise InvalidTokenError("Invalid Authorization header format. Expected: 'Bearer <token>'")

    return parts[1]


async def get_current_user(
    request: Request,
    token: Annotated[str, Depends(get_token_from_header)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
) -> AuthenticatedUser:
    """Verify the bearer token and attach the caller to the request.

    The verified user is stored on ``request.state.user`` for anything
    downstream that needs it.

    Raises:
        MalformedTokenError: If the token cannot be parsed.
        InvalidSignatureError: If the signature does not match.
        ExpiredTokenError: If the token has expired.
    """
    try:
        claims = token_service.verify(token)
    except AuthenticationError as e:
        logger.info("token_rejected", reason=e.code, path=request.url.path)
        raise

    user = AuthenticatedUser(claims=claims)
    request.state.user = user
    return user
