"""Pytest configuration and fixtures for artreg-authz tests."""

import pytest
from unittest.mock import AsyncMock

from artreg_authz.core.exceptions import StoreUnavailableError
from artreg_authz.core.value_objects import ObjectRef, RelationTuple, SubjectRef
from artreg_authz.features.audit import InMemoryAuditSink
from artreg_authz.features.authz.services import AuthzService
from artreg_authz.features.cache import MemoryMembershipCache
from artreg_authz.features.namespaces import NamespaceRegistry
from artreg_authz.features.tuples import InMemoryTupleStore, TupleStore


@pytest.fixture
def registry():
    """Registry with the default art registry namespaces."""
    return NamespaceRegistry.default()


@pytest.fixture
def store():
    """Empty in-memory tuple store."""
    return InMemoryTupleStore()


@pytest.fixture
def audit_sink():
    """Audit sink that keeps events for inspection."""
    return InMemoryAuditSink()


@pytest.fixture
def membership_cache():
    """Membership cache with a TTL long enough to outlive a test."""
    return MemoryMembershipCache(ttl_seconds=30.0)


@pytest.fixture
def service(store, registry, audit_sink):
    """AuthzService over the in-memory store, without a shared cache."""
    return AuthzService(store, registry=registry, audit_sink=audit_sink, audit_checks=False)


@pytest.fixture
def cached_service(store, registry, audit_sink, membership_cache):
    """AuthzService sharing a membership cache across calls."""
    return AuthzService(
        store,
        registry=registry,
        audit_sink=audit_sink,
        membership_cache=membership_cache,
        audit_checks=False,
    )


@pytest.fixture
def failing_store():
    """Store whose reads and writes always fail."""
    mock_store = AsyncMock(spec=TupleStore)
    error = StoreUnavailableError("connection refused")
    mock_store.find_tuples.side_effect = error
    mock_store.find_subjects_for_relation.side_effect = error
    mock_store.find_tuples_by_subject.side_effect = error
    mock_store.put_tuple.side_effect = error
    mock_store.delete_tuple.side_effect = error
    return mock_store


def parse_tuple(value: str) -> RelationTuple:
    """Parse ``ns:id#rel@ns:id[#rel]`` into a RelationTuple."""
    object_part, _, subject_part = value.partition("@")
    obj, _, relation = object_part.partition("#")
    return RelationTuple(ObjectRef.parse(obj), relation, SubjectRef.parse(subject_part))


@pytest.fixture
def tup():
    """Tuple parser, e.g. ``tup("artwork:A#editor@group:G#member")``."""
    return parse_tuple
