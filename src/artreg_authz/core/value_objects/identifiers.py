"""Value objects for tuple addressing.

Objects, subjects and relation tuples are immutable and validated on
construction, so no loosely-typed payload travels past the boundary.
String forms follow the usual Zanzibar notation:

    artwork:42#editor@group:admins#member
    ^object    ^rel   ^subject      ^subject relation
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ...config.constants import WILDCARD, Limits, Namespace
from ..exceptions import ConfigurationError, ValidationError


_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.:@|+=\-]+$")
_RELATION_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")

TupleKey = Tuple[str, str, str, str, str, str]


def parse_namespace(value: Union[str, Namespace]) -> Namespace:
    """Coerce a string into a declared namespace.

    Raises:
        ConfigurationError: If the namespace is not declared
    """
    if isinstance(value, Namespace):
        return value
    try:
        return Namespace(value)
    except ValueError:
        raise ConfigurationError(
            f"Unknown namespace: {value!r}",
            details={"namespace": str(value)},
        )


def validate_identifier(value: str, field: str, allow_wildcard: bool = False) -> str:
    """Validate an object or subject id."""
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{field} must be a non-empty string", field=field, value=value)
    if value == WILDCARD:
        if allow_wildcard:
            return value
        raise ValidationError(f"{field} may not be the wildcard", field=field, value=value)
    if len(value) > Limits.MAX_ID_LENGTH:
        raise ValidationError(
            f"{field} exceeds {Limits.MAX_ID_LENGTH} characters", field=field
        )
    if not _ID_PATTERN.match(value):
        raise ValidationError(f"{field} contains disallowed characters", field=field, value=value)
    return value


def validate_relation_name(value: str, field: str = "relation") -> str:
    """Validate the syntax of a relation name (not its declaration)."""
    if not isinstance(value, str) or not _RELATION_PATTERN.match(value):
        raise ValidationError(f"{field} must match [a-z][a-z0-9_]*", field=field, value=value)
    return value


@dataclass(frozen=True)
class ObjectRef:
    """An object in a namespace; ``id`` may be the wildcard ``*``."""

    namespace: Namespace
    id: str

    def __post_init__(self):
        object.__setattr__(self, "namespace", parse_namespace(self.namespace))
        validate_identifier(self.id, "object_id", allow_wildcard=True)

    @property
    def is_wildcard(self) -> bool:
        return self.id == WILDCARD

    def wildcard(self) -> "ObjectRef":
        """The wildcard object of the same namespace."""
        return ObjectRef(self.namespace, WILDCARD)

    @classmethod
    def parse(cls, value: str) -> "ObjectRef":
        """Parse ``namespace:id``."""
        namespace, sep, object_id = value.partition(":")
        if not sep:
            raise ValidationError("Object must be 'namespace:id'", field="object", value=value)
        return cls(namespace, object_id)

    def __str__(self) -> str:
        return f"{self.namespace.value}:{self.id}"


@dataclass(frozen=True)
class SubjectRef:
    """A concrete principal, or a userset when ``relation`` is set."""

    namespace: Namespace
    id: str
    relation: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "namespace", parse_namespace(self.namespace))
        validate_identifier(self.id, "subject_id")
        if self.relation is not None:
            validate_relation_name(self.relation, "subject_relation")

    @classmethod
    def user(cls, user_id: str) -> "SubjectRef":
        return cls(Namespace.USER, user_id)

    @classmethod
    def userset(cls, namespace: Union[str, Namespace], object_id: str, relation: str) -> "SubjectRef":
        return cls(namespace, object_id, relation)

    @property
    def is_userset(self) -> bool:
        return self.relation is not None

    def as_object(self) -> ObjectRef:
        """The object side of a userset (``group:admins`` for ``group:admins#member``)."""
        return ObjectRef(self.namespace, self.id)

    def concrete(self) -> "SubjectRef":
        """The same subject without a relation."""
        if self.relation is None:
            return self
        return SubjectRef(self.namespace, self.id)

    def sort_key(self) -> Tuple[str, str, str]:
        return (self.namespace.value, self.id, self.relation or "")

    @classmethod
    def parse(cls, value: str) -> "SubjectRef":
        """Parse ``namespace:id`` or ``namespace:id#relation``."""
        body, _, relation = value.partition("#")
        namespace, sep, subject_id = body.partition(":")
        if not sep:
            raise ValidationError("Subject must be 'namespace:id[#relation]'", field="subject", value=value)
        return cls(namespace, subject_id, relation or None)

    def __str__(self) -> str:
        base = f"{self.namespace.value}:{self.id}"
        return f"{base}#{self.relation}" if self.relation else base


@dataclass(frozen=True)
class RelationTuple:
    """A stored relation fact: ``subject`` has ``relation`` on ``object``."""

    object: ObjectRef
    relation: str
    subject: SubjectRef

    def __post_init__(self):
        validate_relation_name(self.relation)

    @classmethod
    def build(
        cls,
        namespace: Union[str, Namespace],
        object_id: str,
        relation: str,
        subject_namespace: Union[str, Namespace],
        subject_id: str,
        subject_relation: Optional[str] = None,
    ) -> "RelationTuple":
        """Build a tuple from flat addressing fields."""
        return cls(
            ObjectRef(namespace, object_id),
            relation,
            SubjectRef(subject_namespace, subject_id, subject_relation),
        )

    @property
    def key(self) -> TupleKey:
        """Unique identity of the tuple."""
        return (
            self.object.namespace.value,
            self.object.id,
            self.relation,
            self.subject.namespace.value,
            self.subject.id,
            self.subject.relation or "",
        )

    def to_dict(self) -> dict:
        return {
            "namespace": self.object.namespace.value,
            "object_id": self.object.id,
            "relation": self.relation,
            "subject_namespace": self.subject.namespace.value,
            "subject_id": self.subject.id,
            "subject_relation": self.subject.relation,
        }

    def __str__(self) -> str:
        return f"{self.object}#{self.relation}@{self.subject}"
