"""
Batch check coordinator tests.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock

from artreg_authz.core.exceptions import BatchCheckError, StoreUnavailableError
from artreg_authz.features.authz import CheckRequest
from artreg_authz.features.authz.services import (
    BatchCheckCoordinator,
    CheckEngine,
    PermissionChecker,
)
from artreg_authz.features.tuples import InMemoryTupleStore, TupleStore


def request(object_id, relation="viewer", subject_id="alice"):
    return CheckRequest("artwork", object_id, relation, "user", subject_id)


class TestBatchCheckCoordinator:
    """Order, partial failure and concurrency bounds."""

    @pytest.mark.asyncio
    async def test_empty_batch(self, store, registry):
        coordinator = BatchCheckCoordinator(PermissionChecker(CheckEngine(store, registry)))
        result = await coordinator.batch_check([])
        assert result.results == []
        assert not result.partial_failure

    @pytest.mark.asyncio
    async def test_order_preserved_with_uneven_latency(self, registry, tup):
        backing = InMemoryTupleStore([tup("artwork:A1#viewer@user:alice"), tup("artwork:A3#viewer@user:alice")])
        delays = {"A1": 0.05, "A2": 0.0, "A3": 0.02, "A4": 0.0}

        async def find_tuples(namespace, object_id, relation):
            await asyncio.sleep(delays.get(object_id, 0))
            return await backing.find_tuples(namespace, object_id, relation)

        slow_store = AsyncMock(spec=TupleStore)
        slow_store.find_tuples.side_effect = find_tuples
        coordinator = BatchCheckCoordinator(PermissionChecker(CheckEngine(slow_store, registry)))

        result = await coordinator.batch_check([request("A1"), request("A2"), request("A3"), request("A4")])

        assert result.results == [True, False, True, False]

    @pytest.mark.asyncio
    async def test_accepts_mappings(self, store, registry, tup):
        await store.put_tuple(tup("artwork:A#viewer@user:alice"))
        coordinator = BatchCheckCoordinator(PermissionChecker(CheckEngine(store, registry)))

        result = await coordinator.batch_check([
            {"namespace": "artwork", "object_id": "A", "relation": "viewer",
             "subject_namespace": "user", "subject_id": "alice"},
            {"namespace": "artwork", "objectId": "A", "relation": "viewer",
             "subjectNamespace": "user", "subjectId": "bob"},
        ])

        assert result.results == [True, False]

    @pytest.mark.asyncio
    async def test_partial_failure_is_flagged(self, registry, tup):
        backing = InMemoryTupleStore([tup("artwork:ok#viewer@user:alice")])

        async def find_tuples(namespace, object_id, relation):
            if object_id == "broken":
                raise StoreUnavailableError("shard down")
            return await backing.find_tuples(namespace, object_id, relation)

        flaky_store = AsyncMock(spec=TupleStore)
        flaky_store.find_tuples.side_effect = find_tuples
        coordinator = BatchCheckCoordinator(PermissionChecker(CheckEngine(flaky_store, registry)))

        result = await coordinator.batch_check([request("ok"), request("broken"), request("missing")])

        assert result.results == [True, False, False]
        assert result.partial_failure
        assert result.indeterminate_indices == [1]
        assert result.outcomes[1].error

    @pytest.mark.asyncio
    async def test_all_or_nothing_raises(self, failing_store, registry):
        coordinator = BatchCheckCoordinator(PermissionChecker(CheckEngine(failing_store, registry)))

        with pytest.raises(BatchCheckError) as exc_info:
            await coordinator.batch_check([request("A"), request("B")], all_or_nothing=True)

        assert exc_info.value.indices == [0, 1]
        assert exc_info.value.details["indeterminate_indices"] == [0, 1]

    @pytest.mark.asyncio
    async def test_malformed_entry_is_indeterminate(self, store, registry):
        coordinator = BatchCheckCoordinator(PermissionChecker(CheckEngine(store, registry)))

        result = await coordinator.batch_check([{"namespace": "artwork"}, request("A")])

        assert result.results == [False, False]
        assert result.indeterminate_indices == [0]

    @pytest.mark.asyncio
    async def test_unknown_namespace_is_plain_denial(self, store, registry):
        coordinator = BatchCheckCoordinator(PermissionChecker(CheckEngine(store, registry)))

        result = await coordinator.batch_check([CheckRequest("painting", "A", "viewer", "user", "alice")])

        assert result.results == [False]
        assert not result.partial_failure

    @pytest.mark.asyncio
    async def test_timeout_marks_entry_indeterminate(self, registry):
        async def find_tuples(namespace, object_id, relation):
            await asyncio.sleep(10)
            return []

        hanging_store = AsyncMock(spec=TupleStore)
        hanging_store.find_tuples.side_effect = find_tuples
        coordinator = BatchCheckCoordinator(PermissionChecker(CheckEngine(hanging_store, registry)))

        result = await coordinator.batch_check([request("A")], timeout=0.05)

        assert result.results == [False]
        assert result.indeterminate_indices == [0]

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self, registry):
        in_flight = 0
        peak = 0

        async def find_tuples(namespace, object_id, relation):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return []

        counting_store = AsyncMock(spec=TupleStore)
        counting_store.find_tuples.side_effect = find_tuples
        coordinator = BatchCheckCoordinator(
            PermissionChecker(CheckEngine(counting_store, registry)), max_concurrency=2
        )

        await coordinator.batch_check([request(f"A{i}") for i in range(10)])

        # each check reads the object and the wildcard concurrently
        assert peak <= 4

    @pytest.mark.asyncio
    async def test_shared_cache_resolves_group_once(self, registry, tup):
        backing = InMemoryTupleStore([
            tup("artwork:A1#viewer@group:G#member"),
            tup("artwork:A2#viewer@group:G#member"),
            tup("group:G#member@user:alice"),
        ])
        group_reads = []

        async def find_tuples(namespace, object_id, relation):
            if object_id == "G":
                group_reads.append(object_id)
            return await backing.find_tuples(namespace, object_id, relation)

        counting_store = AsyncMock(spec=TupleStore)
        counting_store.find_tuples.side_effect = find_tuples
        coordinator = BatchCheckCoordinator(
            PermissionChecker(CheckEngine(counting_store, registry)), max_concurrency=1
        )

        result = await coordinator.batch_check([request("A1"), request("A2")])

        assert result.results == [True, True]
        assert group_reads == ["G"]

    def test_rejects_zero_concurrency(self, store, registry):
        with pytest.raises(ValueError):
            BatchCheckCoordinator(PermissionChecker(CheckEngine(store, registry)), max_concurrency=0)
