"""Repository layer for audit log database operations."""

from sqlalchemy.ext.asyncio import AsyncSession

from .models import OperationLog
from .schemas import OperationRecordCreate


async def create_operation_record(
    db: AsyncSession,
    record: OperationRecordCreate,
) -> OperationLog:
    """Insert a new operation record.

    Args:
        db: Async database session.
        record: Operation data to insert.

    Returns:
        The created OperationLog instance.
    """
    row = OperationLog(
        operation=record.operation,
        operands=list(record.operands),
        result=record.result,
        timestamp=record.timestamp,
    )
    db.add(row)
    await db.commit()
    await db.refresh(row)
    return row
