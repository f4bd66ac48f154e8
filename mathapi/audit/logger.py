"""Best-effort async audit logger for arithmetic operations."""

from datetime import datetime
from typing import Sequence

import anyio
import structlog

from mathapi.metrics.collector import MetricsCollector

from .schemas import Operand, OperationName, OperationRecordCreate
from .store import AuditStore

# Configure structured logger
logger = structlog.get_logger("audit")


class AuditLogger:
    """Writes operation records without ever failing the request.

    Every write runs under a deadline. A write that times out or raises is
    abandoned: it is logged, counted on the metrics collector and reported
    as ``False``. Nothing is retried.

    Attributes:
        store: Insert-only sink for records.
        timeout: Seconds allowed for one write.
        metrics: Optional collector for failure counts.
    """

    def __init__(
        self,
        store: AuditStore,
        timeout: float = 2.0,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self.store = store
        self.timeout = timeout
        self.metrics = metrics

    async def record(
        self,
        operation: OperationName,
        operands: Sequence[Operand],
        result: Operand | None = None,
        timestamp: datetime | None = None,
    ) -> bool:
        """Append one operation record.

        Args:
            operation: Which operation ran.
            operands: Inputs in request order.
            result: Computed value.
            timestamp: Completion time; defaults to now.

        Returns:
            True if the store accepted the record, False otherwise.
        """
        fields = {"operation": operation, "operands": list(operands), "result": result}
        if timestamp is not None:
            fields["timestamp"] = timestamp
        record = OperationRecordCreate(**fields)

        try:
            with anyio.fail_after(self.timeout):
                await self.store.insert(record)
        except TimeoutError:
            logger.warning(
                "audit_write_timeout",
                operation=operation.value,
                timeout_seconds=self.timeout,
            )
            self._count_failure(operation, "timeout")
            return False
        except Exception as e:
            logger.error(
                "audit_write_failed",
                operation=operation.value,
                error_type=type(e).__name__,
                error=str(e),
            )
            self._count_failure(operation, "error")
            return False

        logger.info(
            "operation_recorded",
            operation=operation.value,
            operands=record.operands,
        )
        return True

    def _count_failure(self, operation: OperationName, reason: str) -> None:
        if self.metrics is not None:
            self.metrics.record_audit_failure(operation.value, reason)
