"""Relationship check engine.

Answers "does subject S hold relation R on object O?" by reading tuples
for O (and the namespace wildcard), matching direct subjects, and
following userset subjects such as ``group:G#member`` recursively.

Evaluation rules:
    - unknown namespace or relation resolves to False without a store read
    - the first satisfied branch wins; sibling branches are cancelled
    - a node already on the current path is a cycle and contributes False
    - paths longer than ``max_depth`` contribute False and are logged
    - store failures raise StoreUnavailableError unless another branch
      already proved access
"""

import asyncio
import logging
from typing import Awaitable, FrozenSet, List, Optional, Tuple

from ....config.constants import Limits, Namespace, Relations
from ....core.exceptions import StoreUnavailableError
from ....core.value_objects import ObjectRef, SubjectRef
from ...cache.entities import MembershipCache
from ...namespaces.services import NamespaceRegistry
from ...tuples.entities import TupleStore
from .tuple_lookup import find_matching_tuples

logger = logging.getLogger(__name__)

_Node = Tuple[str, str, str]
# (allowed, conclusive): conclusive is False when a cycle or depth cut may
# have hidden a path, so the answer must not be cached.
_Resolution = Tuple[bool, bool]


class CheckEngine:
    """Evaluates single checks against a tuple store."""

    def __init__(
        self,
        store: TupleStore,
        registry: NamespaceRegistry,
        membership_cache: Optional[MembershipCache] = None,
        max_depth: int = Limits.MAX_INDIRECTION_DEPTH
    ):
        self._store = store
        self._registry = registry
        self._cache = membership_cache
        self._max_depth = max_depth

    @property
    def registry(self) -> NamespaceRegistry:
        return self._registry

    @property
    def store(self) -> TupleStore:
        return self._store

    @property
    def membership_cache(self) -> Optional[MembershipCache]:
        return self._cache

    def with_cache(self, membership_cache: MembershipCache) -> "CheckEngine":
        """Same engine reading through a different membership cache."""
        return CheckEngine(self._store, self._registry, membership_cache, self._max_depth)

    async def check(self, obj: ObjectRef, relation: str, subject: SubjectRef) -> bool:
        """Whether ``subject`` holds ``relation`` on ``obj``.

        Raises:
            StoreUnavailableError: If the store failed and no branch allowed access
        """
        allowed, _ = await self._resolve(obj, relation, subject, frozenset(), 0)
        return allowed

    async def _resolve(
        self,
        obj: ObjectRef,
        relation: str,
        subject: SubjectRef,
        path: FrozenSet[_Node],
        depth: int
    ) -> _Resolution:
        if not self._registry.is_valid_relation(obj.namespace, relation):
            logger.debug(f"No relation {obj.namespace.value}#{relation}; denying")
            return False, True

        node = (obj.namespace.value, obj.id, relation)
        if node in path:
            logger.warning(f"Cycle at {obj}#{relation} while checking {subject}")
            return False, False
        if depth > self._max_depth:
            logger.warning(
                f"Indirection depth {self._max_depth} exceeded at {obj}#{relation} "
                f"while checking {subject}"
            )
            return False, False

        cacheable = self._is_cacheable(obj, relation, subject)
        if cacheable:
            cached = await self._cache.get(obj.id, subject)
            if cached is not None:
                return cached, True

        allowed, conclusive = await self._evaluate(obj, relation, subject, path | {node}, depth)

        if cacheable and (allowed or conclusive):
            await self._cache.set(obj.id, subject, allowed)
        return allowed, conclusive

    def _is_cacheable(self, obj: ObjectRef, relation: str, subject: SubjectRef) -> bool:
        return (
            self._cache is not None
            and obj.namespace == Namespace.GROUP
            and relation == Relations.MEMBER
            and not obj.is_wildcard
            and not subject.is_userset
        )

    async def _evaluate(
        self,
        obj: ObjectRef,
        relation: str,
        subject: SubjectRef,
        path: FrozenSet[_Node],
        depth: int
    ) -> _Resolution:
        try:
            tuples = await find_matching_tuples(self._store, obj, relation)
        except StoreUnavailableError:
            raise
        except Exception as e:
            logger.error(f"Tuple lookup failed for {obj}#{relation}: {e}")
            raise StoreUnavailableError(f"Tuple lookup failed for {obj}#{relation}: {e}")

        if any(t.subject == subject for t in tuples):
            return True, True

        # dict.fromkeys keeps first-seen order while deduplicating
        usersets = list(dict.fromkeys(t.subject for t in tuples if t.subject.is_userset))
        if not usersets:
            return False, True

        branches = [
            self._resolve(userset.as_object(), userset.relation, subject, path, depth + 1)
            for userset in usersets
        ]
        return await self._first_allowed(branches)

    async def _first_allowed(self, branches: List[Awaitable[_Resolution]]) -> _Resolution:
        """Run branches concurrently and stop at the first one that allows."""
        if len(branches) == 1:
            return await branches[0]

        tasks = [asyncio.ensure_future(branch) for branch in branches]
        conclusive = True
        failure: Optional[StoreUnavailableError] = None
        try:
            for next_done in asyncio.as_completed(tasks):
                try:
                    allowed, exact = await next_done
                except StoreUnavailableError as e:
                    failure = failure or e
                    conclusive = False
                    continue
                if allowed:
                    return True, True
                conclusive = conclusive and exact
        finally:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        if failure is not None:
            raise failure
        return False, conclusive
