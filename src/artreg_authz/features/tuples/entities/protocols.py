"""Protocol interfaces for the durable relation store.

The engines only depend on these contracts. Implementations raise
StoreUnavailableError when the backing store cannot be reached; a single
put or delete is assumed atomic, nothing more.
"""

from abc import abstractmethod
from typing import List, Protocol, Union, runtime_checkable

from ....config.constants import Namespace
from ....core.value_objects import RelationTuple, SubjectRef
from ...audit.entities import AuditEvent


@runtime_checkable
class TupleStore(Protocol):
    """Storage operations for relation tuples."""

    @abstractmethod
    async def put_tuple(self, relation_tuple: RelationTuple) -> None:
        """Idempotent insert."""
        ...

    @abstractmethod
    async def delete_tuple(self, relation_tuple: RelationTuple) -> None:
        """Idempotent delete; deleting a missing tuple is not an error."""
        ...

    @abstractmethod
    async def find_tuples(
        self,
        object_namespace: Union[str, Namespace],
        object_id: str,
        relation: str
    ) -> List[RelationTuple]:
        """Tuples whose object id equals ``object_id`` exactly (``*`` finds wildcard tuples)."""
        ...

    @abstractmethod
    async def find_subjects_for_relation(
        self,
        object_namespace: Union[str, Namespace],
        object_id: str,
        relation: str
    ) -> List[SubjectRef]:
        """Subjects of the tuples ``find_tuples`` would return."""
        ...

    @abstractmethod
    async def find_tuples_by_subject(self, subject: SubjectRef) -> List[RelationTuple]:
        """Tuples granted to exactly ``subject`` (relation included)."""
        ...


@runtime_checkable
class AuditedTupleStore(Protocol):
    """Store that can write a tuple change and its audit row atomically."""

    @abstractmethod
    async def put_tuple_audited(self, relation_tuple: RelationTuple, event: AuditEvent) -> None:
        ...

    @abstractmethod
    async def delete_tuple_audited(self, relation_tuple: RelationTuple, event: AuditEvent) -> None:
        ...
