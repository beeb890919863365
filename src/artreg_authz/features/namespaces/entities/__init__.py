from .namespace_config import (
    DEFAULT_NAMESPACE_CONFIG,
    RelationDefinition,
    NamespaceDefinition,
)

__all__ = [
    "DEFAULT_NAMESPACE_CONFIG",
    "RelationDefinition",
    "NamespaceDefinition",
]
