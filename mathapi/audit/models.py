"""SQLAlchemy models for the operation audit log."""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    DateTime,
    Enum as SQLAlchemyEnum,
    Integer,
)
from sqlalchemy.orm import Mapped, mapped_column

from mathapi.database import Base

from .schemas import OperationName


class OperationLog(Base):
    """Append-only record of a successful arithmetic operation.

    Rows are only ever inserted; nothing in the service updates or deletes
    them.

    Attributes:
        id: Primary key.
        operation: Which operation ran.
        operands: JSON list of inputs.
        result: JSON result value.
        timestamp: When the operation completed.
    """

    __tablename__ = "operations"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    operation: Mapped[OperationName] = mapped_column(
        SQLAlchemyEnum(OperationName, name="operation_name_enum"),
        nullable=False,
        index=True,
        comment="Which operation ran",
    )
    operands: Mapped[list[Any]] = mapped_column(
        JSON,
        nullable=False,
        comment="Operation inputs in request order",
    )
    result: Mapped[Any] = mapped_column(
        JSON,
        nullable=True,
        comment="Computed result",
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        comment="When the operation completed",
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<OperationLog(id={self.id}, operation={self.operation.value}, "
            f"operands={self.operands})>"
        )
