"""Audit feature: append-only records of grants, revokes and checks.

- entities/: audit event and sink protocol
- adapters/: logging, in-memory and PostgreSQL sinks
"""

from .entities import AuditEvent, AuditOperation, CheckResult, AuditSink
from .adapters import LoggingAuditSink, InMemoryAuditSink, AsyncPGAuditSink

__all__ = [
    "AuditEvent",
    "AuditOperation",
    "CheckResult",
    "AuditSink",
    "LoggingAuditSink",
    "InMemoryAuditSink",
    "AsyncPGAuditSink",
]
