"""AsyncPG-based audit sink.

Appends audit events to the ``authz_audit_log`` table. The tuple store
reuses the same statement to write tuple and audit row in one transaction.
"""

import json
import logging
import re
from typing import Any, Tuple

import asyncpg

from ....core.exceptions import ConfigurationError, StoreUnavailableError
from ..entities import AuditEvent, AuditSink

logger = logging.getLogger(__name__)

_SQL_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")


def validate_sql_identifier(name: str) -> str:
    """Validate a schema or table name to prevent SQL injection."""
    if not _SQL_IDENTIFIER.match(name):
        raise ConfigurationError(f"Invalid SQL identifier: {name}")
    return name


def build_audit_insert(schema: str, table: str) -> str:
    return f"""
        INSERT INTO {validate_sql_identifier(schema)}.{validate_sql_identifier(table)}
            (operation, object_namespace, object_id, relation,
             subject_namespace, subject_id, subject_relation,
             actor, result, performed_at, tuple_data)
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11::jsonb)
    """


def audit_row_args(event: AuditEvent) -> Tuple[Any, ...]:
    t = event.tuple
    return (
        event.operation.value,
        t.object.namespace.value,
        t.object.id,
        t.relation,
        t.subject.namespace.value,
        t.subject.id,
        t.subject.relation or "",
        event.actor,
        event.result.value if event.result else None,
        event.timestamp,
        json.dumps(t.to_dict()),
    )


class AsyncPGAuditSink(AuditSink):
    """AsyncPG implementation of the AuditSink protocol."""

    def __init__(self, pool: asyncpg.Pool, schema: str = "public", table: str = "authz_audit_log"):
        self._pool = pool
        self._insert_sql = build_audit_insert(schema, table)

    async def record(self, event: AuditEvent) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(self._insert_sql, *audit_row_args(event))
        except Exception as e:
            logger.error(f"Failed to write audit event {event.operation.value} {event.tuple}: {e}")
            raise StoreUnavailableError(f"Failed to write audit event: {e}") from e
