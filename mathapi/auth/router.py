"""Login router: exchange credentials for a bearer token."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends

from ..dependencies import get_credential_verifier, get_token_service
from .credentials import CredentialVerifier
from .exceptions import InvalidCredentialsError
from .models import Credentials, TokenResponse
from .tokens import TokenService

logger = structlog.get_logger("auth")

router = APIRouter(tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: Credentials,
    verifier: Annotated[CredentialVerifier, Depends(get_credential_verifier)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
) -> TokenResponse:
    """Issue a token for a valid username/password pair.

    Raises:
        InvalidCredentialsError: If the verifier rejects the pair.
        TokenSigningError: If the token cannot be signed.
    """
    if not await verifier.verify(credentials.username, credentials.password):
        logger.info("login_failed", username=credentials.username)
        raise InvalidCredentialsError()

    token = token_service.issue(credentials.username)
    logger.info("login_succeeded", username=credentials.username)
    return TokenResponse(token=token)
