"""Namespace registry.

Static relation configuration, loaded once at process start and read-only
afterwards. Writes are validated against it; reads only ask whether a
relation exists so that unknown relations resolve to "no match".
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Union

from ....config.constants import Namespace
from ....core.exceptions import ConfigurationError, InvalidRelationError
from ....core.value_objects import RelationTuple, SubjectRef
from ..entities import DEFAULT_NAMESPACE_CONFIG, NamespaceDefinition, RelationDefinition

logger = logging.getLogger(__name__)


class NamespaceRegistry:
    """Immutable registry of namespaces and their relations."""

    def __init__(self, definitions: Mapping[Namespace, NamespaceDefinition]):
        self._definitions = MappingProxyType(dict(definitions))
        self._check_usersets()

    @classmethod
    def from_config(cls, config: Mapping[str, Mapping[str, Any]]) -> "NamespaceRegistry":
        """Build a registry from the dict config shape."""
        definitions = {}
        for name, data in config.items():
            definition = NamespaceDefinition.from_dict(name, data)
            definitions[definition.name] = definition
        return cls(definitions)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "NamespaceRegistry":
        """Load the namespace config from a JSON file."""
        try:
            config = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Failed to load namespace config from {path}: {e}")
        logger.info(f"Loaded namespace config from {path}")
        return cls.from_config(config)

    @classmethod
    def default(cls) -> "NamespaceRegistry":
        return cls.from_config(DEFAULT_NAMESPACE_CONFIG)

    def _check_usersets(self) -> None:
        """Every userset must name a declared relation."""
        for definition in self._definitions.values():
            for relation in definition.relations.values():
                for userset in relation.usersets:
                    ns_name, _, rel_name = userset.partition("#")
                    if not self.is_valid_relation(ns_name, rel_name):
                        raise ConfigurationError(
                            f"{definition.name.value}#{relation.name} references "
                            f"undeclared userset {userset}"
                        )

    @property
    def namespaces(self) -> FrozenSet[Namespace]:
        return frozenset(self._definitions)

    def _definition(self, namespace: Union[str, Namespace]) -> Optional[NamespaceDefinition]:
        try:
            return self._definitions.get(Namespace(namespace))
        except ValueError:
            return None

    def relations_for(self, namespace: Union[str, Namespace]) -> FrozenSet[str]:
        """Declared relations for a namespace (empty for unknown namespaces)."""
        definition = self._definition(namespace)
        if definition is None:
            return frozenset()
        return frozenset(definition.relations)

    def is_valid_relation(self, namespace: Union[str, Namespace], relation: str) -> bool:
        definition = self._definition(namespace)
        return definition is not None and relation in definition.relations

    def get_relation(self, namespace: Union[str, Namespace], relation: str) -> Optional[RelationDefinition]:
        definition = self._definition(namespace)
        if definition is None:
            return None
        return definition.relations.get(relation)

    def allows_subject(self, namespace: Union[str, Namespace], relation: str, subject: SubjectRef) -> bool:
        """Whether ``subject`` may hold ``relation`` on objects of ``namespace``."""
        definition = self.get_relation(namespace, relation)
        if definition is None:
            return False
        if subject.is_userset:
            return (
                self.is_valid_relation(subject.namespace, subject.relation)
                and definition.allows_userset(subject.namespace, subject.relation)
            )
        return definition.allows_direct(subject.namespace)

    def validate_tuple(self, relation_tuple: RelationTuple) -> None:
        """Validate a tuple before it is written.

        Raises:
            ConfigurationError: If a namespace is not registered
            InvalidRelationError: If the relation or subject is not allowed
        """
        obj = relation_tuple.object
        subject = relation_tuple.subject

        for namespace in (obj.namespace, subject.namespace):
            if namespace not in self._definitions:
                raise ConfigurationError(
                    f"Namespace '{namespace.value}' is not registered",
                    details={"namespace": namespace.value},
                )

        if not self.is_valid_relation(obj.namespace, relation_tuple.relation):
            raise InvalidRelationError(obj.namespace.value, relation_tuple.relation)

        if subject.is_userset and not self.is_valid_relation(subject.namespace, subject.relation):
            raise InvalidRelationError(subject.namespace.value, subject.relation)

        if not self.allows_subject(obj.namespace, relation_tuple.relation, subject):
            kind = f"userset {subject.namespace.value}#{subject.relation}" if subject.is_userset \
                else f"subject namespace '{subject.namespace.value}'"
            raise InvalidRelationError(
                obj.namespace.value,
                relation_tuple.relation,
                reason=f"{kind} is not allowed",
            )

    def describe(self) -> Dict[str, Any]:
        """Serializable view of the registry."""
        return {
            ns.value: {
                "relations": {
                    name: {
                        "direct_subjects": sorted(n.value for n in rel.direct_subjects),
                        "usersets": sorted(rel.usersets),
                    }
                    for name, rel in definition.relations.items()
                }
            }
            for ns, definition in self._definitions.items()
        }


@lru_cache()
def get_namespace_registry(config_path: Optional[str] = None) -> NamespaceRegistry:
    """Process-wide registry, built on first use."""
    if config_path:
        return NamespaceRegistry.from_json_file(config_path)
    return NamespaceRegistry.default()
