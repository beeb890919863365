"""
AsyncPG tuple store tests against a mocked pool.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from artreg_authz.core.exceptions import ConfigurationError, StoreUnavailableError
from artreg_authz.core.value_objects import SubjectRef
from artreg_authz.features.audit import AuditEvent, AuditOperation
from artreg_authz.features.tuples import AsyncPGTupleStore, AuditedTupleStore, TupleStore


def _row(object_namespace, object_id, relation, subject_namespace, subject_id, subject_relation=""):
    return {
        "object_namespace": object_namespace,
        "object_id": object_id,
        "relation": relation,
        "subject_namespace": subject_namespace,
        "subject_id": subject_id,
        "subject_relation": subject_relation,
    }


class TestAsyncPGTupleStore:
    """SQL issued by the store and its error handling."""

    def setup_method(self):
        """Set up a mocked pool whose acquire() yields one connection."""
        self.conn = MagicMock()
        self.conn.execute = AsyncMock()
        self.conn.fetch = AsyncMock(return_value=[])
        self.pool = MagicMock()
        self.pool.acquire.return_value.__aenter__.return_value = self.conn
        self.store = AsyncPGTupleStore(self.pool)

    def test_implements_both_protocols(self):
        assert isinstance(self.store, TupleStore)
        assert isinstance(self.store, AuditedTupleStore)

    def test_rejects_unsafe_identifiers(self):
        with pytest.raises(ConfigurationError):
            AsyncPGTupleStore(self.pool, table="tuples; DROP TABLE x")

    @pytest.mark.asyncio
    async def test_put_uses_on_conflict(self, tup):
        await self.store.put_tuple(tup("artwork:A#editor@group:G#member"))

        query, *args = self.conn.execute.call_args.args
        assert "ON CONFLICT DO NOTHING" in query
        assert "public.authz_tuples" in query
        assert args == ["artwork", "A", "editor", "group", "G", "member"]

    @pytest.mark.asyncio
    async def test_delete_matches_full_key(self, tup):
        await self.store.delete_tuple(tup("artwork:A#owner@user:alice"))

        query, *args = self.conn.execute.call_args.args
        assert query.strip().startswith("DELETE FROM public.authz_tuples")
        assert args == ["artwork", "A", "owner", "user", "alice", ""]

    @pytest.mark.asyncio
    async def test_find_tuples_maps_rows(self):
        self.conn.fetch.return_value = [
            _row("artwork", "A", "editor", "user", "alice"),
            _row("artwork", "A", "editor", "group", "G", "member"),
        ]

        found = await self.store.find_tuples("artwork", "A", "editor")

        assert [str(t) for t in found] == [
            "artwork:A#editor@user:alice",
            "artwork:A#editor@group:G#member",
        ]
        assert self.conn.fetch.call_args.args[1:] == ("artwork", "A", "editor")

    @pytest.mark.asyncio
    async def test_malformed_rows_are_skipped(self):
        self.conn.fetch.return_value = [
            _row("painting", "A", "editor", "user", "alice"),
            _row("artwork", "A", "editor", "user", "bob"),
        ]

        found = await self.store.find_tuples("artwork", "A", "editor")
        assert [t.subject.id for t in found] == ["bob"]

    @pytest.mark.asyncio
    async def test_find_tuples_by_subject_passes_relation(self):
        await self.store.find_tuples_by_subject(SubjectRef("group", "G", "member"))
        assert self.conn.fetch.call_args.args[1:] == ("group", "G", "member")

    @pytest.mark.asyncio
    async def test_read_failure_raises_store_unavailable(self):
        self.conn.fetch.side_effect = OSError("connection reset")
        with pytest.raises(StoreUnavailableError):
            await self.store.find_tuples("artwork", "A", "editor")

    @pytest.mark.asyncio
    async def test_write_failure_raises_store_unavailable(self, tup):
        self.conn.execute.side_effect = OSError("connection reset")
        with pytest.raises(StoreUnavailableError):
            await self.store.put_tuple(tup("artwork:A#owner@user:alice"))

    @pytest.mark.asyncio
    async def test_audited_put_writes_tuple_and_audit_in_transaction(self, tup):
        relation_tuple = tup("artwork:A#owner@user:alice")
        event = AuditEvent.create(AuditOperation.GRANT, relation_tuple, SubjectRef.user("admin"))

        await self.store.put_tuple_audited(relation_tuple, event)

        self.conn.transaction.assert_called_once()
        assert self.conn.execute.await_count == 2
        audit_query, *audit_args = self.conn.execute.call_args_list[1].args
        assert "public.authz_audit_log" in audit_query
        assert audit_args[0] == "grant"
        assert audit_args[7] == "user:admin"

    @pytest.mark.asyncio
    async def test_create_tables(self):
        await self.store.create_tables()
        ddl = self.conn.execute.call_args.args[0]
        assert "CREATE TABLE IF NOT EXISTS public.authz_tuples" in ddl
        assert "CREATE TABLE IF NOT EXISTS public.authz_audit_log" in ddl
