"""Protocol interface for audit persistence."""

from abc import abstractmethod
from typing import Protocol, runtime_checkable

from .audit_event import AuditEvent


@runtime_checkable
class AuditSink(Protocol):
    """Append-only destination for audit events."""

    @abstractmethod
    async def record(self, event: AuditEvent) -> None:
        """Persist an audit event; raise on failure."""
        ...
