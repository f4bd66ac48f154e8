"""Insert-only sinks for operation records."""

import threading
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .repository import create_operation_record
from .schemas import OperationRecordCreate


class AuditStore(Protocol):
    """Anything that can append an operation record."""

    async def insert(self, record: OperationRecordCreate) -> None:
        ...


class SqlAlchemyAuditStore:
    """Writes records to the ``operations`` table.

    Each insert opens its own session, so concurrent requests never share a
    connection; the engine pool serializes access.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def insert(self, record: OperationRecordCreate) -> None:
        async with self._session_factory() as session:
            await create_operation_record(session, record)


class InMemoryAuditStore:
    """Thread-safe in-process store for development and tests."""

    def __init__(self) -> None:
        self._records: list[OperationRecordCreate] = []
        self._lock = threading.Lock()

    async def insert(self, record: OperationRecordCreate) -> None:
        with self._lock:
            self._records.append(record)

    @property
    def records(self) -> tuple[OperationRecordCreate, ...]:
        """Snapshot of everything inserted so far."""
        with self._lock:
            return tuple(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
