"""Grant and revoke with audit records."""

import asyncio
import logging
from typing import Optional

from ....config.constants import Namespace, Relations, Timeouts
from ....core.exceptions import AuditWriteError, MutationOutcomeUnknownError
from ....core.value_objects import RelationTuple, SubjectRef
from ...audit.entities import AuditEvent, AuditOperation, AuditSink
from ...cache.entities import MembershipCache
from ...namespaces.services import NamespaceRegistry
from ...tuples.entities import AuditedTupleStore, TupleStore
from ..adapters import resolve_actor
from ..entities import IdentityProvider

logger = logging.getLogger(__name__)


class TupleMutationService:
    """Validates, writes and audits tuple changes.

    When the store implements AuditedTupleStore the tuple and its audit
    row are written in one transaction. Otherwise the tuple is written
    first and the sink is called after; a sink failure then surfaces as
    AuditWriteError with the tuple already applied.

    Grants and revokes are idempotent, so a caller that receives
    MutationOutcomeUnknownError can simply retry.
    """

    def __init__(
        self,
        store: TupleStore,
        registry: NamespaceRegistry,
        audit_sink: AuditSink,
        membership_cache: Optional[MembershipCache] = None,
        identity_provider: Optional[IdentityProvider] = None,
        write_timeout: float = Timeouts.WRITE
    ):
        self._store = store
        self._registry = registry
        self._audit_sink = audit_sink
        self._cache = membership_cache
        self._identity_provider = identity_provider
        self._write_timeout = write_timeout

    async def grant(
        self,
        relation_tuple: RelationTuple,
        actor: Optional[SubjectRef] = None,
        timeout: Optional[float] = None
    ) -> AuditEvent:
        """Add a tuple.

        Raises:
            ConfigurationError: Unknown namespace or relation
            InvalidRelationError: Subject not allowed for the relation
            StoreUnavailableError: The store rejected the write
            AuditWriteError: The tuple was written but not audited
            MutationOutcomeUnknownError: The deadline expired
        """
        return await self._mutate(AuditOperation.GRANT, relation_tuple, actor, timeout)

    async def revoke(
        self,
        relation_tuple: RelationTuple,
        actor: Optional[SubjectRef] = None,
        timeout: Optional[float] = None
    ) -> AuditEvent:
        """Remove a tuple. Revoking a missing tuple succeeds and is still audited."""
        return await self._mutate(AuditOperation.REVOKE, relation_tuple, actor, timeout)

    async def _mutate(
        self,
        operation: AuditOperation,
        relation_tuple: RelationTuple,
        actor: Optional[SubjectRef],
        timeout: Optional[float]
    ) -> AuditEvent:
        self._registry.validate_tuple(relation_tuple)

        if actor is None:
            actor = await resolve_actor(self._identity_provider)
        event = AuditEvent.create(operation, relation_tuple, actor)
        deadline = self._write_timeout if timeout is None else timeout

        try:
            await asyncio.wait_for(self._apply(operation, relation_tuple, event), timeout=deadline)
        except asyncio.TimeoutError:
            logger.error(f"{operation.value} of {relation_tuple} exceeded {deadline}s; outcome unknown")
            raise MutationOutcomeUnknownError(operation.value, deadline)
        except asyncio.CancelledError:
            logger.warning(f"{operation.value} of {relation_tuple} cancelled; outcome unknown")
            raise
        finally:
            await self._invalidate_membership(relation_tuple)

        logger.info(f"{operation.value} {relation_tuple} by {event.actor or 'anonymous'}")
        return event

    async def _apply(self, operation: AuditOperation, relation_tuple: RelationTuple, event: AuditEvent) -> None:
        if isinstance(self._store, AuditedTupleStore):
            if operation == AuditOperation.GRANT:
                await self._store.put_tuple_audited(relation_tuple, event)
            else:
                await self._store.delete_tuple_audited(relation_tuple, event)
            return

        if operation == AuditOperation.GRANT:
            await self._store.put_tuple(relation_tuple)
        else:
            await self._store.delete_tuple(relation_tuple)

        try:
            await self._audit_sink.record(event)
        except Exception as e:
            logger.error(f"Audit write failed after {operation.value} of {relation_tuple}: {e}")
            raise AuditWriteError(f"Audit write failed after {operation.value} of {relation_tuple}: {e}")

    async def _invalidate_membership(self, relation_tuple: RelationTuple) -> None:
        """Drop cached memberships the change may have affected."""
        if self._cache is None:
            return
        obj = relation_tuple.object
        if obj.namespace != Namespace.GROUP or relation_tuple.relation != Relations.MEMBER:
            return
        membership = self._registry.get_relation(Namespace.GROUP, Relations.MEMBER)
        nested_groups = membership is not None and bool(membership.usersets)
        if obj.is_wildcard or nested_groups:
            await self._cache.clear()
        else:
            await self._cache.invalidate_group(obj.id)
