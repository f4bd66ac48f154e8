"""Tests for the operation audit log."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import anyio
import pytest
from sqlalchemy import select

from mathapi.audit.logger import AuditLogger
from mathapi.audit.models import OperationLog
from mathapi.audit.repository import create_operation_record
from mathapi.audit.schemas import OperationName, OperationRecordCreate
from mathapi.audit.store import InMemoryAuditStore, SqlAlchemyAuditStore
from mathapi.metrics.collector import MetricsCollector


class FailingStore:
    async def insert(self, record):
        raise ConnectionError("store unreachable")


class SlowStore:
    def __init__(self):
        self.started = False

    async def insert(self, record):
        self.started = True
        await anyio.sleep(5)


class TestOperationName:
    def test_values(self):
        assert OperationName.multiply == "multiply"
        assert OperationName.divide == "divide"
        assert OperationName.factorial == "factorial"


class TestOperationRecordCreate:
    def test_defaults_timestamp_to_now_utc(self):
        before = datetime.now(timezone.utc)
        record = OperationRecordCreate(operation=OperationName.multiply, operands=[3.0, 4.0], result=12.0)

        assert record.timestamp.tzinfo is not None
        assert record.timestamp >= before
        assert record.operands == [3.0, 4.0]

    def test_factorial_operands_and_string_result(self):
        record = OperationRecordCreate(operation=OperationName.factorial, operands=[25], result="15511210043330985984000000")

        assert record.operands == [25]
        assert isinstance(record.operands[0], int)
        assert record.result == "15511210043330985984000000"

    def test_unknown_operation_rejected(self):
        with pytest.raises(ValueError):
            OperationRecordCreate(operation="add", operands=[1, 2])

    def test_immutable(self):
        record = OperationRecordCreate(operation=OperationName.divide, operands=[1.0, 2.0])
        with pytest.raises(ValueError):
            record.result = 0.5


class TestInMemoryAuditStore:
    @pytest.mark.asyncio
    async def test_appends_in_order(self):
        store = InMemoryAuditStore()
        first = OperationRecordCreate(operation=OperationName.multiply, operands=[1.0, 2.0])
        second = OperationRecordCreate(operation=OperationName.divide, operands=[4.0, 2.0])

        await store.insert(first)
        await store.insert(second)

        assert store.records == (first, second)
        assert len(store) == 2


class TestAuditLogger:
    """Tests for best-effort recording."""

    @pytest.mark.asyncio
    async def test_records_operation(self):
        store = InMemoryAuditStore()
        audit = AuditLogger(store)

        assert await audit.record(OperationName.multiply, [3.0, 4.0], 12.0) is True

        (record,) = store.records
        assert record.operation == OperationName.multiply
        assert record.operands == [3.0, 4.0]
        assert record.result == 12.0

    @pytest.mark.asyncio
    async def test_explicit_timestamp(self):
        store = InMemoryAuditStore()
        when = datetime(2024, 5, 1, tzinfo=timezone.utc)

        await AuditLogger(store).record(OperationName.factorial, [3], "6", timestamp=when)

        assert store.records[0].timestamp == when

    @pytest.mark.asyncio
    async def test_store_failure_is_swallowed(self):
        metrics = MetricsCollector()
        audit = AuditLogger(FailingStore(), metrics=metrics)

        assert await audit.record(OperationName.divide, [1.0, 2.0], 0.5) is False
        assert metrics.sample_value(
            "audit_write_failures_total", {"operation": "divide", "reason": "error"}
        ) == 1.0

    @pytest.mark.asyncio
    async def test_timeout_abandons_write(self):
        metrics = MetricsCollector()
        store = SlowStore()
        audit = AuditLogger(store, timeout=0.05, metrics=metrics)

        with anyio.fail_after(2):
            assert await audit.record(OperationName.multiply, [1.0, 1.0], 1.0) is False

        assert store.started
        assert metrics.sample_value(
            "audit_write_failures_total", {"operation": "multiply", "reason": "timeout"}
        ) == 1.0

    @pytest.mark.asyncio
    async def test_failure_without_metrics(self):
        audit = AuditLogger(FailingStore())
        assert await audit.record(OperationName.multiply, [1.0, 1.0], 1.0) is False


class TestCreateOperationRecord:
    @pytest.mark.asyncio
    async def test_adds_and_commits(self):
        mock_db = AsyncMock()
        mock_db.add = MagicMock()
        record = OperationRecordCreate(operation=OperationName.multiply, operands=[2.0, 5.0], result=10.0)

        row = await create_operation_record(mock_db, record)

        mock_db.add.assert_called_once_with(row)
        mock_db.commit.assert_awaited_once()
        assert row.operation == OperationName.multiply
        assert row.operands == [2.0, 5.0]
        assert row.timestamp == record.timestamp


class TestSqlAlchemyAuditStore:
    @pytest.mark.asyncio
    async def test_persists_records(self, session_factory):
        store = SqlAlchemyAuditStore(session_factory)
        audit = AuditLogger(store)

        assert await audit.record(OperationName.multiply, [3.0, 4.0], 12.0)
        assert await audit.record(OperationName.factorial, [25], "15511210043330985984000000")

        async with session_factory() as session:
            result = await session.execute(select(OperationLog).order_by(OperationLog.id))
            rows = list(result.scalars().all())

        assert [row.operation for row in rows] == [OperationName.multiply, OperationName.factorial]
        assert rows[0].operands == [3.0, 4.0]
        assert rows[0].result == 12.0
        assert rows[1].operands == [25]
        assert rows[1].result == "15511210043330985984000000"
        assert "multiply" in repr(rows[0])
