"""
Expansion engine tests.
"""

import asyncio

import pytest

from artreg_authz.core.exceptions import StoreUnavailableError
from artreg_authz.core.value_objects import ObjectRef, SubjectRef
from artreg_authz.features.authz.services import ExpansionEngine
from artreg_authz.features.namespaces import NamespaceRegistry
from artreg_authz.features.tuples import InMemoryTupleStore


class TestExpansionEngine:
    """Union of direct subjects and expanded usersets."""

    @pytest.mark.asyncio
    async def test_expands_direct_and_group_members(self, store, registry, tup):
        await store.put_tuple(tup("artwork:A#editor@user:alice"))
        await store.put_tuple(tup("artwork:A#editor@group:G#member"))
        await store.put_tuple(tup("group:G#member@user:bob"))
        await store.put_tuple(tup("group:G#member@user:alice"))

        subjects = await ExpansionEngine(store, registry).expand(ObjectRef("artwork", "A"), "editor")

        assert subjects == {SubjectRef.user("alice"), SubjectRef.user("bob")}

    @pytest.mark.asyncio
    async def test_includes_wildcard_grants(self, store, registry, tup):
        await store.put_tuple(tup("artwork:*#viewer@user:carol"))
        await store.put_tuple(tup("artwork:A#viewer@user:dave"))

        subjects = await ExpansionEngine(store, registry).expand(ObjectRef("artwork", "A"), "viewer")

        assert subjects == {SubjectRef.user("carol"), SubjectRef.user("dave")}

    @pytest.mark.asyncio
    async def test_unknown_relation_is_empty(self, store, registry):
        assert await ExpansionEngine(store, registry).expand(ObjectRef("artwork", "A"), "curator") == set()

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, failing_store, registry):
        with pytest.raises(StoreUnavailableError):
            await ExpansionEngine(failing_store, registry).expand(ObjectRef("artwork", "A"), "editor")

    @pytest.mark.asyncio
    async def test_cycle_terminates(self, tup):
        registry = NamespaceRegistry.from_config({
            "user": {"relations": {}},
            "group": {"relations": {"member": {"direct_subjects": ["user"], "usersets": ["group#member"]}}},
        })
        store = InMemoryTupleStore([
            tup("group:g1#member@group:g2#member"),
            tup("group:g2#member@group:g1#member"),
            tup("group:g2#member@user:alice"),
        ])

        subjects = await asyncio.wait_for(
            ExpansionEngine(store, registry).expand(ObjectRef("group", "g1"), "member"), timeout=2
        )
        assert subjects == {SubjectRef.user("alice")}
