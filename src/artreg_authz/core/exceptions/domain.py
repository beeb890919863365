"""Domain-specific exceptions for artreg-authz.

Write paths raise these to the caller. Read paths (check, batch check,
legacy check) convert store failures into a denied, indeterminate result.
"""

from typing import Any, Dict, List, Optional

from .base import AuthzError


# Configuration Errors
class ConfigurationError(AuthzError):
    """Raised for an unknown namespace or relation on a write."""
    pass


class InvalidRelationError(ConfigurationError):
    """Raised when a relation or subject is not declared for a namespace."""

    def __init__(self, namespace: str, relation: str, reason: Optional[str] = None):
        message = f"Relation '{relation}' is not valid for namespace '{namespace}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message,
            details={"namespace": namespace, "relation": relation},
        )
        self.namespace = namespace
        self.relation = relation


# Validation Errors
class ValidationError(AuthzError):
    """Raised for malformed tuple addressing (empty id, disallowed characters)."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        details: Dict[str, Any] = {}
        if field is not None:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details=details)
        self.field = field


class UnknownLegacyPermissionError(AuthzError):
    """Raised when a legacy permission name is not in the alias table."""

    def __init__(self, permission: str):
        super().__init__(
            f"Unknown legacy permission: {permission}",
            details={"permission": permission},
        )
        self.permission = permission


# Store Errors
class StoreUnavailableError(AuthzError):
    """Raised when the tuple store cannot be reached."""
    pass


class AuditWriteError(AuthzError):
    """Raised when a tuple mutation succeeded but its audit record did not."""

    def __init__(self, message: str, tuple_applied: bool = True):
        super().__init__(message, details={"tuple_applied": tuple_applied})
        self.tuple_applied = tuple_applied


class MutationOutcomeUnknownError(AuthzError):
    """Raised when a grant/revoke deadline expires.

    The underlying write may or may not have completed; callers should
    retry the idempotent operation rather than assume failure.
    """

    def __init__(self, operation: str, timeout: float):
        super().__init__(
            f"Outcome of {operation} unknown after {timeout}s deadline",
            details={"operation": operation, "timeout": timeout},
        )
        self.operation = operation


class BatchCheckError(AuthzError):
    """Raised by all-or-nothing batch checks when any entry is indeterminate."""

    def __init__(self, indices: List[int]):
        super().__init__(
            f"{len(indices)} check(s) in batch could not be determined",
            details={"indeterminate_indices": indices},
        )
        self.indices = indices
