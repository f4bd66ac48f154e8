from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from .config import Settings


# Base class for models
class Base(DeclarativeBase):
    pass


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database.

    echo=True will log SQL queries for debugging. Pool sizing only applies to
    server databases; sqlite URLs use SQLAlchemy's default pool.
    """
    kwargs = {"echo": settings.DEBUG, "future": True}
    if not settings.DATABASE_URL.startswith("sqlite"):
        kwargs.update(pool_size=20, max_overflow=10)
    return create_async_engine(settings.DATABASE_URL, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all mapped tables (simplistic migration)."""
    # Import models so Base.metadata sees them
    from .audit.models import OperationLog  # noqa: F401
    from .auth.credentials import UserAccount  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
