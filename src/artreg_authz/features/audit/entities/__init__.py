from .audit_event import AuditEvent, AuditOperation, CheckResult
from .protocols import AuditSink

__all__ = ["AuditEvent", "AuditOperation", "CheckResult", "AuditSink"]
