from .namespace_registry import NamespaceRegistry, get_namespace_registry

__all__ = ["NamespaceRegistry", "get_namespace_registry"]
