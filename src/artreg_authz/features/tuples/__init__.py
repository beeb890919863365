"""Tuples feature: the boundary to the durable relation store.

- entities/: store protocols
- repositories/: in-memory and AsyncPG implementations
"""

from .entities import TupleStore, AuditedTupleStore
from .repositories import InMemoryTupleStore, AsyncPGTupleStore

__all__ = [
    "TupleStore",
    "AuditedTupleStore",
    "InMemoryTupleStore",
    "AsyncPGTupleStore",
]
