"""Namespaces feature: static relation configuration.

- entities/: namespace and relation definitions, default config
- services/: the read-only registry
"""

from .entities import DEFAULT_NAMESPACE_CONFIG, RelationDefinition, NamespaceDefinition
from .services import NamespaceRegistry, get_namespace_registry

__all__ = [
    "DEFAULT_NAMESPACE_CONFIG",
    "RelationDefinition",
    "NamespaceDefinition",
    "NamespaceRegistry",
    "get_namespace_registry",
]
