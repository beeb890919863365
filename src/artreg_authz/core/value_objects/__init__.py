"""Value objects for artreg-authz."""

from .identifiers import (
    ObjectRef,
    SubjectRef,
    RelationTuple,
    TupleKey,
    parse_namespace,
    validate_identifier,
    validate_relation_name,
)

__all__ = [
    "ObjectRef",
    "SubjectRef",
    "RelationTuple",
    "TupleKey",
    "parse_namespace",
    "validate_identifier",
    "validate_relation_name",
]
