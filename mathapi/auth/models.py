"""Pydantic models for authentication and user identity."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class Credentials(BaseModel):
    """Login request body. Never persisted."""

    username: str
    password: str = Field(..., repr=False)


class TokenResponse(BaseModel):
    token: str


class UserClaims(BaseModel):
    """Claims carried by a verified token.

    Attributes:
        username: Who the token was issued to.
        exp: Expiry as unix seconds.
    """

    username: str = Field(..., min_length=1, description="Token subject")
    exp: int = Field(..., description="Expiry (unix seconds)")

    model_config = ConfigDict(frozen=True)

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.exp, tz=timezone.utc)


class AuthenticatedUser(BaseModel):
    """Represents the caller of a protected route.

    Attributes:
        claims: Verified token claims.
    """

    claims: UserClaims

    @property
    def username(self) -> str:
        """Convenience property to access username."""
        return self.claims.username
