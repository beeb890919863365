"""Audit event entity.

One event is emitted for every grant, revoke and (optionally) check.
Events are append-only; nothing in this package reads them back.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from ....core.value_objects import RelationTuple, SubjectRef


class AuditOperation(str, Enum):
    """Audited operation kinds."""

    GRANT = "grant"
    REVOKE = "revoke"
    CHECK = "check"


class CheckResult(str, Enum):
    """Recorded outcome of an audited check."""

    ALLOWED = "allowed"
    DENIED = "denied"
    INDETERMINATE = "indeterminate"


@dataclass(frozen=True)
class AuditEvent:
    """Immutable audit record."""

    operation: AuditOperation
    tuple: RelationTuple
    actor: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    result: Optional[CheckResult] = None

    @classmethod
    def create(
        cls,
        operation: AuditOperation,
        relation_tuple: RelationTuple,
        actor: Optional[SubjectRef] = None,
        result: Optional[CheckResult] = None,
    ) -> "AuditEvent":
        return cls(
            operation=operation,
            tuple=relation_tuple,
            actor=str(actor) if actor is not None else None,
            result=result,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation.value,
            "tuple": self.tuple.to_dict(),
            "actor": self.actor,
            "timestamp": self.timestamp.isoformat(),
            "result": self.result.value if self.result else None,
        }
