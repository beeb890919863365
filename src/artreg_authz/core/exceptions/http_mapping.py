"""HTTP status code mapping for exceptions."""

from .base import AuthzError
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


# Subclasses are listed before their bases; lookup walks the MRO.
HTTP_STATUS_MAP = {
    # 400 Bad Request
    InvalidRelationError: 400,
    ValidationError: 400,
    UnknownLegacyPermissionError: 400,
    ConfigurationError: 400,

    # 500 Internal Server Error
    AuditWriteError: 500,
    AuthzError: 500,

    # 503 Service Unavailable
    StoreUnavailableError: 503,
    BatchCheckError: 503,

    # 504 Gateway Timeout
    MutationOutcomeUnknownError: 504,
}


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for exception.

    Args:
        exception: The exception instance

    Returns:
        HTTP status code (500 for anything unmapped)
    """
    for cls in type(exception).__mro__:
        if cls in HTTP_STATUS_MAP:
            return HTTP_STATUS_MAP[cls]
    return 500
