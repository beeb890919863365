from .tuple_lookup import find_matching_tuples
from .check_engine import CheckEngine
from .expansion_engine import ExpansionEngine
from .mutation_service import TupleMutationService
from .permission_checker import PermissionChecker
from .legacy_adapter import LegacyPermissionAdapter
from .batch_check import BatchCheckCoordinator
from .authz_service import AuthzService

__all__ = [
    "find_matching_tuples",
    "CheckEngine",
    "ExpansionEngine",
    "TupleMutationService",
    "PermissionChecker",
    "LegacyPermissionAdapter",
    "BatchCheckCoordinator",
    "AuthzService",
]
