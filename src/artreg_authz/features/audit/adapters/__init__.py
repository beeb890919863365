from .logging_audit_sink import LoggingAuditSink, InMemoryAuditSink
from .asyncpg_audit_sink import (
    AsyncPGAuditSink,
    build_audit_insert,
    audit_row_args,
    validate_sql_identifier,
)

__all__ = [
    "LoggingAuditSink",
    "InMemoryAuditSink",
    "AsyncPGAuditSink",
    "build_audit_insert",
    "audit_row_args",
    "validate_sql_identifier",
]
