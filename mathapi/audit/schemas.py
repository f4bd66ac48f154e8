"""Pydantic schemas for the operation audit log."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

Operand = int | float | str


class OperationName(str, Enum):
    """Arithmetic operations that are audited."""

    multiply = "multiply"
    divide = "divide"
    factorial = "factorial"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OperationRecordCreate(BaseModel):
    """Internal DTO for one successful operation.

    Operands follow one schema per operation: ``[A, B]`` for multiply and
    divide, ``[N]`` for factorial.

    Attributes:
        operation: Which operation ran.
        operands: Inputs in request order.
        result: Computed value; factorial results are decimal strings.
        timestamp: When the operation completed.
    """

    operation: OperationName
    operands: list[Operand]
    result: Operand | None = None
    timestamp: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(frozen=True)
