from .protocols import TupleStore, AuditedTupleStore

__all__ = ["TupleStore", "AuditedTupleStore"]
