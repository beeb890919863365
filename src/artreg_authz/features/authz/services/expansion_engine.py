"""Expansion engine: every concrete subject holding a relation on an object."""

import asyncio
import logging
from typing import FrozenSet, Set, Tuple

from ....config.constants import Limits
from ....core.value_objects import ObjectRef, SubjectRef
from ...namespaces.services import NamespaceRegistry
from ...tuples.entities import TupleStore
from .tuple_lookup import find_matching_tuples

logger = logging.getLogger(__name__)

_Node = Tuple[str, str, str]


class ExpansionEngine:
    """Expands usersets into the concrete subjects behind them.

    Store failures propagate; a partial expansion is never returned.
    """

    def __init__(
        self,
        store: TupleStore,
        registry: NamespaceRegistry,
        max_depth: int = Limits.MAX_INDIRECTION_DEPTH
    ):
        self._store = store
        self._registry = registry
        self._max_depth = max_depth

    async def expand(self, obj: ObjectRef, relation: str) -> Set[SubjectRef]:
        """Concrete subjects that hold ``relation`` on ``obj``."""
        return await self._expand(obj, relation, frozenset(), 0)

    async def _expand(
        self,
        obj: ObjectRef,
        relation: str,
        path: FrozenSet[_Node],
        depth: int
    ) -> Set[SubjectRef]:
        if not self._registry.is_valid_relation(obj.namespace, relation):
            return set()

        node = (obj.namespace.value, obj.id, relation)
        if node in path:
            logger.warning(f"Cycle at {obj}#{relation} during expansion")
            return set()
        if depth > self._max_depth:
            logger.warning(f"Indirection depth {self._max_depth} exceeded expanding {obj}#{relation}")
            return set()
        path = path | {node}

        tuples = await find_matching_tuples(self._store, obj, relation)

        subjects: Set[SubjectRef] = set()
        usersets = []
        for relation_tuple in tuples:
            if relation_tuple.subject.is_userset:
                usersets.append(relation_tuple.subject)
            else:
                subjects.add(relation_tuple.subject)

        if usersets:
            nested = await asyncio.gather(*(
                self._expand(userset.as_object(), userset.relation, path, depth + 1)
                for userset in dict.fromkeys(usersets)
            ))
            for members in nested:
                subjects |= members

        return subjects
