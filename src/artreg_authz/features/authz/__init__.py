"""Authz feature: checks, expansion, mutations, legacy permissions, batches.

- entities/: check requests/outcomes, legacy alias table, identity protocol
- adapters/: identity providers
- services/: engines and the AuthzService facade
"""

from .entities import (
    CheckRequest,
    CheckOutcome,
    BatchCheckResult,
    ObjectPermission,
    LegacyPermission,
    LegacyAlias,
    LEGACY_PERMISSION_MAP,
    IdentityProvider,
)
from .adapters import StaticIdentityProvider
from .services import (
    CheckEngine,
    ExpansionEngine,
    TupleMutationService,
    PermissionChecker,
    LegacyPermissionAdapter,
    BatchCheckCoordinator,
    AuthzService,
)

__all__ = [
    "CheckRequest",
    "CheckOutcome",
    "BatchCheckResult",
    "ObjectPermission",
    "LegacyPermission",
    "LegacyAlias",
    "LEGACY_PERMISSION_MAP",
    "IdentityProvider",
    "StaticIdentityProvider",
    "CheckEngine",
    "ExpansionEngine",
    "TupleMutationService",
    "PermissionChecker",
    "LegacyPermissionAdapter",
    "BatchCheckCoordinator",
    "AuthzService",
]
