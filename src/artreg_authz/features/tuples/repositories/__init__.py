from .memory_tuple_store import InMemoryTupleStore
from .asyncpg_tuple_store import AsyncPGTupleStore

__all__ = ["InMemoryTupleStore", "AsyncPGTupleStore"]
