"""Login policy: pluggable credential verifiers.

The token service never decides who may log in. Routes ask a
``CredentialVerifier`` chosen at startup, so the static development pair can
be swapped for the users table without touching token handling.
"""

import hashlib
import hmac
import os
from datetime import datetime
from typing import Protocol

import anyio
import anyio.to_thread
from pydantic import SecretStr
from sqlalchemy import BigInteger, DateTime, Integer, String, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column

from ..config import Settings
from ..database import Base

PBKDF2_ALGORITHM = "pbkdf2_sha256"
PBKDF2_ITERATIONS = 600_000


class UserAccount(Base):
    """A login account for the database-backed verifier."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    username: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="pbkdf2_sha256$iterations$salt$digest",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<UserAccount(id={self.id}, username={self.username})>"


def hash_password(password: str, *, salt: bytes | None = None, iterations: int = PBKDF2_ITERATIONS) -> str:
    """Hash a password for storage.

    Args:
        password: Plain-text password.
        salt: Optional salt; a random 16-byte salt is generated if omitted.
        iterations: PBKDF2 work factor.

    Returns:
        Encoded hash in the form ``pbkdf2_sha256$<iterations>$<salt>$<digest>``.
    """
    salt = salt or os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{PBKDF2_ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    """Check a password against a hash produced by ``hash_password``."""
    try:
        algorithm, iterations, salt_hex, digest_hex = encoded.split("$")
        salt = bytes.fromhex(salt_hex)
        rounds = int(iterations)
    except ValueError:
        return False
    if algorithm != PBKDF2_ALGORITHM:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
    return hmac.compare_digest(digest.hex(), digest_hex)


class CredentialVerifier(Protocol):
    """Decides whether a username/password pair is authenticated."""

    async def verify(self, username: str, password: str) -> bool:
        ...


class StaticCredentialVerifier:
    """Accepts exactly one configured username/password pair."""

    def __init__(self, username: str, password: SecretStr | str) -> None:
        self._username = username
        self._password = password if isinstance(password, SecretStr) else SecretStr(password)

    async def verify(self, username: str, password: str) -> bool:
        username_ok = hmac.compare_digest(username.encode("utf-8"), self._username.encode("utf-8"))
        password_ok = hmac.compare_digest(
            password.encode("utf-8"),
            self._password.get_secret_value().encode("utf-8"),
        )
        return username_ok and password_ok


class DatabaseCredentialVerifier:
    """Checks credentials against the ``users`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def verify(self, username: str, password: str) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserAccount.password_hash).where(UserAccount.username == username)
            )
            password_hash = result.scalar_one_or_none()

        if password_hash is None:
            return False
        # PBKDF2 is CPU bound
        return await anyio.to_thread.run_sync(verify_password, password, password_hash)


async def create_user_account(
    db: AsyncSession,
    username: str,
    password: str,
    iterations: int = PBKDF2_ITERATIONS,
) -> UserAccount:
    """Create a login account with a hashed password.

    Args:
        db: Async database session.
        username: Unique login name.
        password: Plain-text password; only its hash is stored.
        iterations: PBKDF2 work factor.

    Returns:
        The created UserAccount instance.
    """
    account = UserAccount(
        username=username,
        password_hash=hash_password(password, iterations=iterations),
    )
    db.add(account)
    await db.commit()
    await db.refresh(account)
    return account


def build_credential_verifier(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> CredentialVerifier:
    """Select the verifier named by ``CREDENTIAL_BACKEND``."""
    if settings.CREDENTIAL_BACKEND == "database":
        if session_factory is None:
            raise ValueError("CREDENTIAL_BACKEND=database requires a database session factory")
        return DatabaseCredentialVerifier(session_factory)
    return StaticCredentialVerifier(settings.STATIC_USERNAME, settings.STATIC_PASSWORD)
