"""Authorization service facade.

Single entry point for application code: checks, batch checks, grants,
revokes, expansion, legacy permissions and group helpers, plus the
"current user" conveniences backed by an IdentityProvider.

Check-family methods never raise; write methods raise the error taxonomy
in ``core.exceptions``.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, Set, TypeVar, Union

from ....config.constants import CacheTTL, Limits, Namespace, Relations, SystemObjects, Timeouts
from ....core.exceptions import StoreUnavailableError
from ....core.value_objects import ObjectRef, RelationTuple, SubjectRef
from ...audit.adapters import LoggingAuditSink
from ...audit.entities import AuditEvent, AuditSink
from ...cache.entities import MembershipCache
from ...namespaces.services import NamespaceRegistry
from ...tuples.entities import TupleStore
from ..adapters import resolve_actor
from ..entities import BatchCheckResult, CheckOutcome, CheckRequest, IdentityProvider, LegacyPermission, ObjectPermission
from .batch_check import BatchCheckCoordinator, BatchEntry
from .check_engine import CheckEngine
from .expansion_engine import ExpansionEngine
from .legacy_adapter import LegacyPermissionAdapter
from .mutation_service import TupleMutationService
from .permission_checker import PermissionChecker

logger = logging.getLogger(__name__)

NamespaceLike = Union[str, Namespace]
T = TypeVar("T")


class AuthzService:
    """Facade composing the check, expansion, mutation and legacy services."""

    def __init__(
        self,
        store: TupleStore,
        registry: Optional[NamespaceRegistry] = None,
        audit_sink: Optional[AuditSink] = None,
        membership_cache: Optional[MembershipCache] = None,
        identity_provider: Optional[IdentityProvider] = None,
        check_timeout: float = Timeouts.CHECK,
        write_timeout: float = Timeouts.WRITE,
        batch_max_concurrency: int = Limits.BATCH_MAX_CONCURRENCY,
        max_indirection_depth: int = Limits.MAX_INDIRECTION_DEPTH,
        audit_checks: bool = True
    ):
        self.store = store
        self.registry = registry or NamespaceRegistry.default()
        self.audit_sink = audit_sink or LoggingAuditSink()
        self.membership_cache = membership_cache
        self.identity_provider = identity_provider

        self.engine = CheckEngine(store, self.registry, membership_cache, max_indirection_depth)
        self.expansion = ExpansionEngine(store, self.registry, max_indirection_depth)
        self.checker = PermissionChecker(
            self.engine,
            audit_sink=self.audit_sink,
            identity_provider=identity_provider,
            audit_checks=audit_checks,
            check_timeout=check_timeout,
        )
        self.mutations = TupleMutationService(
            store,
            self.registry,
            self.audit_sink,
            membership_cache=membership_cache,
            identity_provider=identity_provider,
            write_timeout=write_timeout,
        )
        self.batch = BatchCheckCoordinator(
            self.checker,
            max_concurrency=batch_max_concurrency,
            batch_cache_ttl=CacheTTL.MEMBERSHIP_DEFAULT,
        )
        self.legacy = LegacyPermissionAdapter(self.checker, self.mutations)
        self._max_depth = max_indirection_depth
        self._read_timeout = check_timeout
        self._shutdown_hooks: List[Callable[[], Awaitable[None]]] = []

    def add_shutdown_hook(self, hook: Callable[[], Awaitable[None]]) -> None:
        """Register a coroutine function run by ``close`` (pool, Redis client)."""
        self._shutdown_hooks.append(hook)

    async def close(self) -> None:
        """Release resources in reverse registration order."""
        while self._shutdown_hooks:
            hook = self._shutdown_hooks.pop()
            try:
                await hook()
            except Exception as e:
                logger.warning(f"Shutdown hook failed: {e}")

    # Checks

    async def check(
        self,
        namespace: NamespaceLike,
        object_id: str,
        relation: str,
        subject_namespace: NamespaceLike,
        subject_id: str,
        timeout: Optional[float] = None
    ) -> bool:
        """Whether the subject holds the relation on the object. Never raises."""
        outcome = await self.check_detailed(
            namespace, object_id, relation, subject_namespace, subject_id, timeout=timeout
        )
        return outcome.allowed

    async def check_detailed(
        self,
        namespace: NamespaceLike,
        object_id: str,
        relation: str,
        subject_namespace: NamespaceLike,
        subject_id: str,
        timeout: Optional[float] = None
    ) -> CheckOutcome:
        request = CheckRequest(namespace, object_id, relation, subject_namespace, subject_id)
        return await self.checker.check_detailed(request, timeout=timeout)

    async def batch_check(self, requests: Sequence[BatchEntry], timeout: Optional[float] = None) -> List[bool]:
        """One boolean per request, in request order."""
        result = await self.batch.batch_check(requests, timeout=timeout)
        return result.results

    async def batch_check_detailed(
        self,
        requests: Sequence[BatchEntry],
        all_or_nothing: bool = False,
        timeout: Optional[float] = None
    ) -> BatchCheckResult:
        return await self.batch.batch_check(requests, all_or_nothing=all_or_nothing, timeout=timeout)

    async def check_current_user(
        self,
        namespace: NamespaceLike,
        object_id: str,
        relation: str,
        timeout: Optional[float] = None
    ) -> bool:
        """Check for the caller reported by the identity provider; False when anonymous."""
        subject = await resolve_actor(self.identity_provider)
        if subject is None:
            logger.debug("No current subject; denying")
            return False
        request = CheckRequest(namespace, object_id, relation, subject.namespace, subject.id, subject.relation)
        return await self.checker.check(request, timeout=timeout)

    # Mutations

    async def grant(
        self,
        namespace: NamespaceLike,
        object_id: str,
        relation: str,
        subject_namespace: NamespaceLike,
        subject_id: str,
        subject_relation: Optional[str] = None,
        actor: Optional[SubjectRef] = None,
        timeout: Optional[float] = None
    ) -> AuditEvent:
        relation_tuple = RelationTuple.build(
            namespace, object_id, relation, subject_namespace, subject_id, subject_relation
        )
        return await self.mutations.grant(relation_tuple, actor=actor, timeout=timeout)

    async def revoke(
        self,
        namespace: NamespaceLike,
        object_id: str,
        relation: str,
        subject_namespace: NamespaceLike,
        subject_id: str,
        subject_relation: Optional[str] = None,
        actor: Optional[SubjectRef] = None,
        timeout: Optional[float] = None
    ) -> AuditEvent:
        relation_tuple = RelationTuple.build(
            namespace, object_id, relation, subject_namespace, subject_id, subject_relation
        )
        return await self.mutations.revoke(relation_tuple, actor=actor, timeout=timeout)

    # Expansion

    async def _within_deadline(self, operation: str, coro: Awaitable[T], timeout: Optional[float]) -> T:
        deadline = timeout if timeout is not None else self._read_timeout
        try:
            return await asyncio.wait_for(coro, timeout=deadline)
        except asyncio.TimeoutError:
            logger.error(f"{operation} timed out after {deadline}s")
            raise StoreUnavailableError(
                f"{operation} timed out after {deadline}s",
                details={"operation": operation, "timeout": deadline},
            )

    async def expand(
        self,
        namespace: NamespaceLike,
        object_id: str,
        relation: str,
        timeout: Optional[float] = None
    ) -> List[SubjectRef]:
        """Concrete subjects holding the relation, sorted by (namespace, id).

        ``timeout`` defaults to the check deadline.

        Raises:
            StoreUnavailableError: If the store cannot be read in time
        """
        if not self.registry.is_valid_relation(namespace, relation):
            return []
        subjects = await self._within_deadline(
            "expand", self.expansion.expand(ObjectRef(namespace, object_id), relation), timeout
        )
        return sorted(subjects, key=SubjectRef.sort_key)

    # Legacy permissions

    async def check_legacy(
        self,
        subject_id: str,
        permission: Union[str, LegacyPermission],
        timeout: Optional[float] = None
    ) -> bool:
        return await self.legacy.check_legacy(subject_id, permission, timeout=timeout)

    async def grant_legacy(
        self,
        subject_id: str,
        permission: Union[str, LegacyPermission],
        actor: Optional[SubjectRef] = None,
        timeout: Optional[float] = None
    ) -> AuditEvent:
        return await self.legacy.grant_legacy(subject_id, permission, actor=actor, timeout=timeout)

    async def revoke_legacy(
        self,
        subject_id: str,
        permission: Union[str, LegacyPermission],
        actor: Optional[SubjectRef] = None,
        timeout: Optional[float] = None
    ) -> AuditEvent:
        return await self.legacy.revoke_legacy(subject_id, permission, actor=actor, timeout=timeout)

    # Groups

    async def add_user_to_group(
        self,
        user_id: str,
        group_id: str,
        actor: Optional[SubjectRef] = None,
        timeout: Optional[float] = None
    ) -> AuditEvent:
        return await self.grant(
            Namespace.GROUP, group_id, Relations.MEMBER, Namespace.USER, user_id, actor=actor, timeout=timeout
        )

    async def remove_user_from_group(
        self,
        user_id: str,
        group_id: str,
        actor: Optional[SubjectRef] = None,
        timeout: Optional[float] = None
    ) -> AuditEvent:
        return await self.revoke(
            Namespace.GROUP, group_id, Relations.MEMBER, Namespace.USER, user_id, actor=actor, timeout=timeout
        )

    async def is_user_in_group(self, user_id: str, group_id: str, timeout: Optional[float] = None) -> bool:
        return await self.check(Namespace.GROUP, group_id, Relations.MEMBER, Namespace.USER, user_id, timeout=timeout)

    async def get_group_members(self, group_id: str, timeout: Optional[float] = None) -> List[str]:
        """User ids that are members of a group, sorted."""
        subjects = await self.expand(Namespace.GROUP, group_id, Relations.MEMBER, timeout=timeout)
        return [s.id for s in subjects if s.namespace == Namespace.USER]

    # Permission listing

    async def list_user_permissions(self, user_id: str, timeout: Optional[float] = None) -> List[ObjectPermission]:
        """Relations the user holds directly or through usersets.

        Walks reverse lookups: each tuple granted to the user yields a
        userset (``group:G#member``) whose own grants are followed in turn.
        Wildcard grants are listed as-is (``object_id == "*"``).

        Raises:
            StoreUnavailableError: If the store cannot be read in time
        """
        return await self._within_deadline("list_user_permissions", self._collect_permissions(user_id), timeout)

    async def _collect_permissions(self, user_id: str) -> List[ObjectPermission]:
        permissions: Set[ObjectPermission] = set()
        seen: Set[SubjectRef] = set()
        frontier = [SubjectRef.user(user_id)]
        depth = 0

        while frontier and depth <= self._max_depth:
            next_frontier = []
            for subject in frontier:
                if subject in seen:
                    continue
                seen.add(subject)
                for relation_tuple in await self.store.find_tuples_by_subject(subject):
                    permissions.add(ObjectPermission.from_tuple(relation_tuple))
                    obj = relation_tuple.object
                    if not obj.is_wildcard:
                        next_frontier.append(SubjectRef(obj.namespace, obj.id, relation_tuple.relation))
            frontier = next_frontier
            depth += 1

        return sorted(permissions, key=ObjectPermission.sort_key)

    async def list_current_user_permissions(self, timeout: Optional[float] = None) -> List[ObjectPermission]:
        subject = await resolve_actor(self.identity_provider)
        if subject is None or subject.namespace != Namespace.USER:
            return []
        return await self.list_user_permissions(subject.id, timeout=timeout)

    async def is_user_admin(self, user_id: str, timeout: Optional[float] = None) -> bool:
        return await self.check(
            Namespace.SYSTEM, SystemObjects.GLOBAL, Relations.ADMIN, Namespace.USER, user_id, timeout=timeout
        )

    async def is_current_user_admin(self, timeout: Optional[float] = None) -> bool:
        return await self.check_current_user(Namespace.SYSTEM, SystemObjects.GLOBAL, Relations.ADMIN, timeout=timeout)
