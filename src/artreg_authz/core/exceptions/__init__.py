"""Exception hierarchy for artreg-authz."""

from .base import AuthzError, get_http_status_code, create_error_response
from .domain import (
    ConfigurationError,
    InvalidRelationError,
    ValidationError,
    UnknownLegacyPermissionError,
    StoreUnavailableError,
    AuditWriteError,
    MutationOutcomeUnknownError,
    BatchCheckError,
)
from .http_mapping import HTTP_STATUS_MAP

__all__ = [
    "AuthzError",
    "ConfigurationError",
    "InvalidRelationError",
    "ValidationError",
    "UnknownLegacyPermissionError",
    "StoreUnavailableError",
    "AuditWriteError",
    "MutationOutcomeUnknownError",
    "BatchCheckError",
    "HTTP_STATUS_MAP",
    "get_http_status_code",
    "create_error_response",
]
