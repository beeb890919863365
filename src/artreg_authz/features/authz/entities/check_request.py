"""Check request and result entities."""

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple, Union

from ....config.constants import Namespace
from ....core.exceptions import ValidationError
from ....core.value_objects import RelationTuple


# Accepted spellings for each field; camelCase matches the legacy client payloads
_FIELD_ALIASES = {
    "namespace": ("namespace", "object_namespace", "objectNamespace"),
    "object_id": ("object_id", "objectId"),
    "relation": ("relation",),
    "subject_namespace": ("subject_namespace", "subjectNamespace"),
    "subject_id": ("subject_id", "subjectId"),
    "subject_relation": ("subject_relation", "subjectRelation"),
}


@dataclass(frozen=True)
class CheckRequest:
    """One check, addressed with flat fields as received from callers."""

    namespace: Union[str, Namespace]
    object_id: str
    relation: str
    subject_namespace: Union[str, Namespace]
    subject_id: str
    subject_relation: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CheckRequest":
        """Build a request from a mapping.

        Raises:
            ValidationError: If a required field is missing
        """
        if not isinstance(data, Mapping):
            raise ValidationError("Check request must be a mapping", value=type(data).__name__)

        values = {}
        for field_name, aliases in _FIELD_ALIASES.items():
            for alias in aliases:
                if alias in data:
                    values[field_name] = data[alias]
                    break

        missing = [f for f in _FIELD_ALIASES if f != "subject_relation" and f not in values]
        if missing:
            raise ValidationError(f"Check request missing fields: {', '.join(missing)}", field=missing[0])
        return cls(**values)

    def to_tuple(self) -> RelationTuple:
        """The tuple this request asks about; raises AuthzError when malformed."""
        return RelationTuple.build(
            self.namespace,
            self.object_id,
            self.relation,
            self.subject_namespace,
            self.subject_id,
            self.subject_relation,
        )


@dataclass(frozen=True)
class CheckOutcome:
    """Result of one check.

    ``indeterminate`` separates "could not decide" (store down, deadline)
    from a real denial; ``allowed`` is False in both cases.
    """

    allowed: bool
    indeterminate: bool = False
    error: Optional[str] = None

    @classmethod
    def allow(cls) -> "CheckOutcome":
        return cls(allowed=True)

    @classmethod
    def deny(cls, error: Optional[str] = None) -> "CheckOutcome":
        return cls(allowed=False, error=error)

    @classmethod
    def undetermined(cls, error: str) -> "CheckOutcome":
        return cls(allowed=False, indeterminate=True, error=error)

    def __bool__(self) -> bool:
        return self.allowed


@dataclass(frozen=True)
class BatchCheckResult:
    """Outcomes of a batch, positionally aligned with the requests."""

    outcomes: Tuple[CheckOutcome, ...]

    @property
    def results(self) -> List[bool]:
        return [outcome.allowed for outcome in self.outcomes]

    @property
    def indeterminate_indices(self) -> List[int]:
        return [i for i, outcome in enumerate(self.outcomes) if outcome.indeterminate]

    @property
    def partial_failure(self) -> bool:
        return any(outcome.indeterminate for outcome in self.outcomes)

    def __len__(self) -> int:
        return len(self.outcomes)

    def __iter__(self):
        return iter(self.outcomes)


@dataclass(frozen=True)
class ObjectPermission:
    """A relation a subject holds on an object."""

    namespace: Namespace
    object_id: str
    relation: str

    @classmethod
    def from_tuple(cls, relation_tuple: RelationTuple) -> "ObjectPermission":
        return cls(relation_tuple.object.namespace, relation_tuple.object.id, relation_tuple.relation)

    def sort_key(self) -> Tuple[str, str, str]:
        return (self.namespace.value, self.object_id, self.relation)
