"""AsyncPG-based tuple store implementation.

Concrete implementation of the TupleStore and AuditedTupleStore protocols
on PostgreSQL. ``subject_relation`` is stored as ``''`` for concrete
subjects so the unique constraint covers all six key fields.
"""

import logging
from typing import List, Optional, Union

import asyncpg

from ....config.constants import Namespace
from ....core.exceptions import AuthzError, StoreUnavailableError
from ....core.value_objects import RelationTuple, SubjectRef
from ...audit.adapters.asyncpg_audit_sink import (
    audit_row_args,
    build_audit_insert,
    validate_sql_identifier,
)
from ...audit.entities import AuditEvent
from ..entities import AuditedTupleStore, TupleStore


logger = logging.getLogger(__name__)


class AsyncPGTupleStore(TupleStore, AuditedTupleStore):
    """AsyncPG implementation of the tuple store."""

    def __init__(
        self,
        pool: asyncpg.Pool,
        schema: str = "public",
        table: str = "authz_tuples",
        audit_table: str = "authz_audit_log"
    ):
        self._pool = pool
        self._schema = validate_sql_identifier(schema)
        self._table = validate_sql_identifier(table)
        self._audit_table = validate_sql_identifier(audit_table)
        self._qualified = f"{self._schema}.{self._table}"
        self._audit_insert_sql = build_audit_insert(self._schema, self._audit_table)

    # Schema bootstrap

    async def create_tables(self) -> None:
        """Create the tuple and audit tables if they do not exist."""
        ddl = f"""
            CREATE TABLE IF NOT EXISTS {self._qualified} (
                object_namespace  VARCHAR(32)  NOT NULL,
                object_id         VARCHAR(256) NOT NULL,
                relation          VARCHAR(64)  NOT NULL,
                subject_namespace VARCHAR(32)  NOT NULL,
                subject_id        VARCHAR(256) NOT NULL,
                subject_relation  VARCHAR(64)  NOT NULL DEFAULT '',
                created_at        TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
                PRIMARY KEY (object_namespace, object_id, relation,
                             subject_namespace, subject_id, subject_relation)
            );
            CREATE INDEX IF NOT EXISTS {self._table}_subject_idx
                ON {self._qualified} (subject_namespace, subject_id, subject_relation);
            CREATE TABLE IF NOT EXISTS {self._schema}.{self._audit_table} (
                id                BIGSERIAL    PRIMARY KEY,
                operation         VARCHAR(16)  NOT NULL,
                object_namespace  VARCHAR(32)  NOT NULL,
                object_id         VARCHAR(256) NOT NULL,
                relation          VARCHAR(64)  NOT NULL,
                subject_namespace VARCHAR(32)  NOT NULL,
                subject_id        VARCHAR(256) NOT NULL,
                subject_relation  VARCHAR(64)  NOT NULL DEFAULT '',
                actor             VARCHAR(320),
                result            VARCHAR(16),
                performed_at      TIMESTAMPTZ  NOT NULL,
                tuple_data        JSONB        NOT NULL
            );
        """
        async with self._pool.acquire() as conn:
            await conn.execute(ddl)
        logger.info(f"Ensured authorization tables in schema {self._schema}")

    # Row mapping

    def _build_tuple_from_row(self, row: asyncpg.Record) -> Optional[RelationTuple]:
        try:
            return RelationTuple.build(
                row['object_namespace'],
                row['object_id'],
                row['relation'],
                row['subject_namespace'],
                row['subject_id'],
                row['subject_relation'] or None,
            )
        except AuthzError as e:
            # Rows written outside this library may not validate; they grant nothing
            logger.warning(f"Skipping malformed tuple row in {self._qualified}: {e.message}")
            return None

    @staticmethod
    def _key_args(relation_tuple: RelationTuple):
        return relation_tuple.key

    # Writes

    async def put_tuple(self, relation_tuple: RelationTuple) -> None:
        query = f"""
            INSERT INTO {self._qualified}
                (object_namespace, object_id, relation,
                 subject_namespace, subject_id, subject_relation)
            VALUES ($1, $2, $3, $4, $5, $6)
            ON CONFLICT DO NOTHING
        """
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(query, *self._key_args(relation_tuple))
        except Exception as e:
            logger.error(f"Failed to put tuple {relation_tuple}: {e}")
            raise StoreUnavailableError(f"Failed to write tuple: {e}") from e

    async def delete_tuple(self, relation_tuple: RelationTuple) -> None:
        query = f"""
            DELETE FROM {self._qualified}
            WHERE object_namespace = $1 AND object_id = $2 AND relation = $3
              AND subject_namespace = $4 AND subject_id = $5 AND subject_relation = $6
        """
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(query, *self._key_args(relation_tuple))
        except Exception as e:
            logger.error(f"Failed to delete tuple {relation_tuple}: {e}")
            raise StoreUnavailableError(f"Failed to delete tuple: {e}") from e

    async def put_tuple_audited(self, relation_tuple: RelationTuple, event: AuditEvent) -> None:
        query = f"""
            INSERT INTO {self._qualified}
                (object_namespace, object_id, relation,
                 subject_namespace, subject_id, subject_relation)
            VALUES ($1, $2, $3, $4, $5, $6)
            ON CONFLICT DO NOTHING
        """
        await self._execute_with_audit(query, relation_tuple, event)

    async def delete_tuple_audited(self, relation_tuple: RelationTuple, event: AuditEvent) -> None:
        query = f"""
            DELETE FROM {self._qualified}
            WHERE object_namespace = $1 AND object_id = $2 AND relation = $3
              AND subject_namespace = $4 AND subject_id = $5 AND subject_relation = $6
        """
        await self._execute_with_audit(query, relation_tuple, event)

    async def _execute_with_audit(self, query: str, relation_tuple: RelationTuple, event: AuditEvent) -> None:
        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction():
                    await conn.execute(query, *self._key_args(relation_tuple))
                    await conn.execute(self._audit_insert_sql, *audit_row_args(event))
        except Exception as e:
            logger.error(f"Failed to {event.operation.value} tuple {relation_tuple}: {e}")
            raise StoreUnavailableError(f"Failed to {event.operation.value} tuple: {e}") from e

    # Reads

    async def find_tuples(
        self,
        object_namespace: Union[str, Namespace],
        object_id: str,
        relation: str
    ) -> List[RelationTuple]:
        query = f"""
            SELECT object_namespace, object_id, relation,
                   subject_namespace, subject_id, subject_relation
            FROM {self._qualified}
            WHERE object_namespace = $1 AND object_id = $2 AND relation = $3
        """
        namespace = object_namespace.value if isinstance(object_namespace, Namespace) else object_namespace
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(query, namespace, object_id, relation)
        except Exception as e:
            logger.error(f"Failed to find tuples for {namespace}:{object_id}#{relation}: {e}")
            raise StoreUnavailableError(f"Failed to read tuples: {e}") from e

        tuples = [t for t in (self._build_tuple_from_row(row) for row in rows) if t is not None]
        logger.debug(f"Found {len(tuples)} tuples for {namespace}:{object_id}#{relation}")
        return tuples

    async def find_subjects_for_relation(
        self,
        object_namespace: Union[str, Namespace],
        object_id: str,
        relation: str
    ) -> List[SubjectRef]:
        tuples = await self.find_tuples(object_namespace, object_id, relation)
        return [t.subject for t in tuples]

    async def find_tuples_by_subject(self, subject: SubjectRef) -> List[RelationTuple]:
        query = f"""
            SELECT object_namespace, object_id, relation,
                   subject_namespace, subject_id, subject_relation
            FROM {self._qualified}
            WHERE subject_namespace = $1 AND subject_id = $2 AND subject_relation = $3
        """
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(query, subject.namespace.value, subject.id, subject.relation or "")
        except Exception as e:
            logger.error(f"Failed to find tuples for subject {subject}: {e}")
            raise StoreUnavailableError(f"Failed to read tuples: {e}") from e

        return [t for t in (self._build_tuple_from_row(row) for row in rows) if t is not None]
