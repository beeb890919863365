"""In-memory tuple store.

Indexed by object and by subject. Every operation completes without
awaiting, so each put/delete is atomic with respect to the event loop.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Set, Tuple, Union

from ....config.constants import Namespace
from ....core.value_objects import RelationTuple, SubjectRef
from ..entities import TupleStore

logger = logging.getLogger(__name__)

_ObjectKey = Tuple[str, str, str]
_SubjectKey = Tuple[str, str, str]


class InMemoryTupleStore(TupleStore):
    """Dictionary-backed TupleStore."""

    def __init__(self, tuples: Iterable[RelationTuple] = ()):
        self._tuples: Set[RelationTuple] = set()
        self._by_object: Dict[_ObjectKey, Set[RelationTuple]] = defaultdict(set)
        self._by_subject: Dict[_SubjectKey, Set[RelationTuple]] = defaultdict(set)
        for relation_tuple in tuples:
            self._add(relation_tuple)

    @staticmethod
    def _object_key(namespace: Union[str, Namespace], object_id: str, relation: str) -> _ObjectKey:
        return (Namespace(namespace).value, object_id, relation)

    @staticmethod
    def _subject_key(subject: SubjectRef) -> _SubjectKey:
        return (subject.namespace.value, subject.id, subject.relation or "")

    def _add(self, relation_tuple: RelationTuple) -> None:
        self._tuples.add(relation_tuple)
        obj = relation_tuple.object
        self._by_object[self._object_key(obj.namespace, obj.id, relation_tuple.relation)].add(relation_tuple)
        self._by_subject[self._subject_key(relation_tuple.subject)].add(relation_tuple)

    async def put_tuple(self, relation_tuple: RelationTuple) -> None:
        if relation_tuple in self._tuples:
            logger.debug(f"Tuple already present: {relation_tuple}")
            return
        self._add(relation_tuple)

    async def delete_tuple(self, relation_tuple: RelationTuple) -> None:
        if relation_tuple not in self._tuples:
            return
        self._tuples.discard(relation_tuple)
        obj = relation_tuple.object
        self._discard(self._by_object, self._object_key(obj.namespace, obj.id, relation_tuple.relation), relation_tuple)
        self._discard(self._by_subject, self._subject_key(relation_tuple.subject), relation_tuple)

    @staticmethod
    def _discard(
        index: Dict[Tuple[str, str, str], Set[RelationTuple]],
        key: Tuple[str, str, str],
        relation_tuple: RelationTuple
    ) -> None:
        bucket = index.get(key)
        if bucket is None:
            return
        bucket.discard(relation_tuple)
        if not bucket:
            del index[key]

    async def find_tuples(
        self,
        object_namespace: Union[str, Namespace],
        object_id: str,
        relation: str
    ) -> List[RelationTuple]:
        try:
            key = self._object_key(object_namespace, object_id, relation)
        except ValueError:
            return []
        return list(self._by_object.get(key, ()))

    async def find_subjects_for_relation(
        self,
        object_namespace: Union[str, Namespace],
        object_id: str,
        relation: str
    ) -> List[SubjectRef]:
        tuples = await self.find_tuples(object_namespace, object_id, relation)
        return [t.subject for t in tuples]

    async def find_tuples_by_subject(self, subject: SubjectRef) -> List[RelationTuple]:
        return list(self._by_subject.get(self._subject_key(subject), ()))

    def __len__(self) -> int:
        return len(self._tuples)

    def __contains__(self, relation_tuple: RelationTuple) -> bool:
        return relation_tuple in self._tuples

    def snapshot(self) -> Set[RelationTuple]:
        """Copy of the current tuple set."""
        return set(self._tuples)
