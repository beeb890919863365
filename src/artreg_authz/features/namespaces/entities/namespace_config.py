"""Namespace definitions for the art registry.

Each relation lists the namespaces that may hold it directly and the
usersets (``namespace#relation``) it may point through.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping

from ....config.constants import Namespace
from ....core.exceptions import ConfigurationError
from ....core.value_objects import parse_namespace, validate_relation_name


DEFAULT_NAMESPACE_CONFIG: Dict[str, Dict[str, Any]] = {
    'user': {
        'relations': {},
    },
    'group': {
        'relations': {
            'member': {'direct_subjects': ['user'], 'usersets': []},
            'exist': {'direct_subjects': ['user'], 'usersets': []},
        },
    },
    'artwork': {
        'relations': {
            'owner': {'direct_subjects': ['user'], 'usersets': ['group#member']},
            'editor': {'direct_subjects': ['user'], 'usersets': ['group#member']},
            'viewer': {'direct_subjects': ['user'], 'usersets': ['group#member']},
        },
    },
    'nfc_tag': {
        'relations': {
            'manager': {'direct_subjects': ['user'], 'usersets': ['group#member']},
        },
    },
    'appraisal': {
        'relations': {
            'appraiser': {'direct_subjects': ['user'], 'usersets': ['group#member']},
            'editor': {'direct_subjects': ['user'], 'usersets': ['group#member']},
            'viewer': {'direct_subjects': ['user'], 'usersets': ['group#member']},
        },
    },
    'system': {
        'relations': {
            'admin': {'direct_subjects': ['user'], 'usersets': ['group#member']},
            'user_manager': {'direct_subjects': ['user'], 'usersets': ['group#member']},
            'statistics_viewer': {'direct_subjects': ['user'], 'usersets': ['group#member']},
        },
    },
}


@dataclass(frozen=True)
class RelationDefinition:
    """A relation declared on a namespace."""

    name: str
    direct_subjects: FrozenSet[Namespace] = frozenset({Namespace.USER})
    usersets: FrozenSet[str] = frozenset()

    def allows_direct(self, namespace: Namespace) -> bool:
        return namespace in self.direct_subjects

    def allows_userset(self, namespace: Namespace, relation: str) -> bool:
        return f"{namespace.value}#{relation}" in self.usersets

    @property
    def is_indirection_point(self) -> bool:
        return bool(self.usersets)


@dataclass(frozen=True)
class NamespaceDefinition:
    """A namespace and its relations."""

    name: Namespace
    relations: Mapping[str, RelationDefinition] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Any]) -> "NamespaceDefinition":
        """Build a definition from the ``{'relations': {...}}`` config shape."""
        namespace = parse_namespace(name)
        relations: Dict[str, RelationDefinition] = {}

        for relation_name, relation_data in (data.get('relations') or {}).items():
            validate_relation_name(relation_name)
            relation_data = relation_data or {}
            direct = frozenset(
                parse_namespace(ns) for ns in relation_data.get('direct_subjects', ['user'])
            )
            usersets = frozenset(relation_data.get('usersets', []))
            for userset in usersets:
                userset_ns, sep, userset_rel = userset.partition('#')
                if not sep or not userset_rel:
                    raise ConfigurationError(
                        f"Userset must be 'namespace#relation', got {userset!r} "
                        f"on {name}#{relation_name}"
                    )
                parse_namespace(userset_ns)
                validate_relation_name(userset_rel)
            relations[relation_name] = RelationDefinition(
                name=relation_name,
                direct_subjects=direct,
                usersets=usersets,
            )

        return cls(name=namespace, relations=relations)
