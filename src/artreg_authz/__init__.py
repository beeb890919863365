"""artreg-authz - Relationship-based authorization core for the art registry.

Zanzibar-style relation tuples with object wildcards, group indirection,
audited grants and revokes, legacy permission aliases and batch checks.
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__

from .config import (
    WILDCARD,
    Namespace,
    Relations,
    AuthzSettings,
    get_settings,
)

from .core.exceptions import (
    # Base Exception
    AuthzError,

    # Domain Exceptions
    ConfigurationError,
    InvalidRelationError,
    ValidationError,
    UnknownLegacyPermissionError,
    StoreUnavailableError,
    AuditWriteError,
    MutationOutcomeUnknownError,
    BatchCheckError,

    # Utility Functions
    get_http_status_code,
    create_error_response,
)

from .core.value_objects import ObjectRef, SubjectRef, RelationTuple

from .features.namespaces import NamespaceRegistry, get_namespace_registry
from .features.tuples import TupleStore, AuditedTupleStore, InMemoryTupleStore, AsyncPGTupleStore
from .features.audit import (
    AuditEvent,
    AuditOperation,
    AuditSink,
    LoggingAuditSink,
    InMemoryAuditSink,
    AsyncPGAuditSink,
)
from .features.cache import MembershipCache, MemoryMembershipCache, RedisMembershipCache
from .features.authz import (
    CheckRequest,
    CheckOutcome,
    BatchCheckResult,
    ObjectPermission,
    LegacyPermission,
    LEGACY_PERMISSION_MAP,
    IdentityProvider,
    StaticIdentityProvider,
    CheckEngine,
    ExpansionEngine,
    BatchCheckCoordinator,
    AuthzService,
)

from .factory import build_authz_service, create_authz_service

__all__ = [
    "__version__",
    # Configuration
    "WILDCARD",
    "Namespace",
    "Relations",
    "AuthzSettings",
    "get_settings",
    # Exceptions
    "AuthzError",
    "ConfigurationError",
    "InvalidRelationError",
    "ValidationError",
    "UnknownLegacyPermissionError",
    "StoreUnavailableError",
    "AuditWriteError",
    "MutationOutcomeUnknownError",
    "BatchCheckError",
    "get_http_status_code",
    "create_error_response",
    # Value objects
    "ObjectRef",
    "SubjectRef",
    "RelationTuple",
    # Features
    "NamespaceRegistry",
    "get_namespace_registry",
    "TupleStore",
    "AuditedTupleStore",
    "InMemoryTupleStore",
    "AsyncPGTupleStore",
    "AuditEvent",
    "AuditOperation",
    "AuditSink",
    "LoggingAuditSink",
    "InMemoryAuditSink",
    "AsyncPGAuditSink",
    "MembershipCache",
    "MemoryMembershipCache",
    "RedisMembershipCache",
    "CheckRequest",
    "CheckOutcome",
    "BatchCheckResult",
    "ObjectPermission",
    "LegacyPermission",
    "LEGACY_PERMISSION_MAP",
    "IdentityProvider",
    "StaticIdentityProvider",
    "CheckEngine",
    "ExpansionEngine",
    "BatchCheckCoordinator",
    "AuthzService",
    # Wiring
    "build_authz_service",
    "create_authz_service",
]
