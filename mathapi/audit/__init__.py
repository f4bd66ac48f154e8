"""Audit module - append-only operation log."""

from .logger import AuditLogger
from .schemas import OperationName, OperationRecordCreate
from .store import AuditStore, SqlAlchemyAuditStore, InMemoryAuditStore
from .models import OperationLog

__all__ = [
    "AuditLogger",
    "OperationName",
    "OperationRecordCreate",
    "AuditStore",
    "SqlAlchemyAuditStore",
    "InMemoryAuditStore",
    "OperationLog",
]
