from .check_request import CheckRequest, CheckOutcome, BatchCheckResult, ObjectPermission
from .legacy import LegacyPermission, LegacyAlias, LEGACY_PERMISSION_MAP, resolve_legacy_permission
from .protocols import IdentityProvider

__all__ = [
    "CheckRequest",
    "CheckOutcome",
    "BatchCheckResult",
    "ObjectPermission",
    "LegacyPermission",
    "LegacyAlias",
    "LEGACY_PERMISSION_MAP",
    "resolve_legacy_permission",
    "IdentityProvider",
]
