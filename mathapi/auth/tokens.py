"""Bearer token issuance and verification."""

from datetime import datetime, timedelta, timezone
from typing import Callable

from jose import jwt
from jose.exceptions import JOSEError
from pydantic import SecretStr, ValidationError

from ..config import Settings
from .exceptions import (
    ExpiredTokenError,
    InvalidSignatureError,
    MalformedTokenError,
    TokenSigningError,
)
from .models import UserClaims

Clock = Callable[[], datetime]

USERNAME_CLAIM = "username"
EXP_CLAIM = "exp"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and verifies HMAC-signed JWTs carrying a username and expiry.

    The signing secret is read-only after construction, so a single instance
    is shared by every request without locking.
    """

    def __init__(
        self,
        secret: SecretStr | str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(hours=24),
        clock: Clock = utcnow,
    ) -> None:
        """Initialize the token service.

        Args:
            secret: Shared HMAC secret.
            algorithm: JWS algorithm used to sign and the only one accepted.
            lifetime: Validity window added to the issue time.
            clock: Source of the current time; injectable for tests.
        """
        self._secret = secret if isinstance(secret, SecretStr) else SecretStr(secret)
        self.algorithm = algorithm
        self.lifetime = lifetime
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock = utcnow) -> "TokenService":
        return cls(
            secret=settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            lifetime=timedelta(hours=settings.TOKEN_EXPIRE_HOURS),
            clock=clock,
        )

    def issue(self, username: str) -> str:
        """Create a signed token for ``username`` expiring after the lifetime.

        Raises:
            TokenSigningError: If the token cannot be signed.
        """
        expires_at = self._clock() + self.lifetime
        payload = {
            USERNAME_CLAIM: username,
            EXP_CLAIM: int(expires_at.timestamp()),
        }
        try:
            return jwt.encode(payload, self._secret.get_secret_value(), algorithm=self.algorithm)
        except JOSEError as e:
            raise TokenSigningError() from e

    def verify(self, token: str) -> UserClaims:
        """Validate a token and return its claims.

        Checks run in order: structure, signature, expiry.

        Raises:
            MalformedTokenError: If the token or its claims cannot be parsed.
            InvalidSignatureError: If the signature does not match.
            ExpiredTokenError: If the current time is past the expiry.
        """
        try:
            jwt.get_unverified_header(token)
            unverified = jwt.get_unverified_claims(token)
        except JOSEError as e:
            raise MalformedTokenError("Malformed token") from e

        try:
            claims = UserClaims.model_validate(unverified)
        except ValidationError as e:
            raise MalformedTokenError("Token is missing required claims") from e

        try:
            jwt.decode(
                token,
                self._secret.get_secret_value(),
                algorithms=[self.algorithm],
                # Expiry is checked below against the injected clock
                options={"verify_signature": True, "verify_exp": False},
            )
        except JOSEError as e:
            raise InvalidSignatureError("Invalid token signature") from e

        if self._clock().timestamp() > claims.exp:
            raise ExpiredTokenError("Token has expired")

        return claims
