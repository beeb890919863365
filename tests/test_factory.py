"""
Service wiring from settings.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from artreg_authz.config import AuthzSettings
from artreg_authz.core.exceptions import StoreUnavailableError
from artreg_authz.factory import build_authz_service, create_authz_service
from artreg_authz.features.audit import LoggingAuditSink
from artreg_authz.features.cache import MemoryMembershipCache, RedisMembershipCache
from artreg_authz.features.tuples import AsyncPGTupleStore, InMemoryTupleStore


def settings(**overrides):
    values = {"environment": "test", "database_url": None, "redis_url": None}
    values.update(overrides)
    return AuthzSettings(**values)


class TestBuildAuthzService:

    def test_defaults_from_settings(self):
        service = build_authz_service(InMemoryTupleStore(), settings=settings(check_timeout_seconds=0.5))

        assert isinstance(service.audit_sink, LoggingAuditSink)
        assert service.membership_cache is None
        assert service.registry.is_valid_relation("system", "admin")


class TestCreateAuthzService:

    @pytest.mark.asyncio
    async def test_in_memory_without_database(self):
        service = await create_authz_service(settings())

        assert isinstance(service.store, InMemoryTupleStore)
        assert isinstance(service.membership_cache, MemoryMembershipCache)

        await service.grant("artwork", "A", "owner", "user", "alice")
        assert await service.check("artwork", "A", "owner", "user", "alice")
        await service.close()

    @pytest.mark.asyncio
    async def test_no_cache_backend(self):
        service = await create_authz_service(settings(cache_backend="none"))
        assert service.membership_cache is None

    @pytest.mark.asyncio
    async def test_redis_cache_backend(self):
        service = await create_authz_service(settings(cache_backend="redis", redis_url="redis://localhost:6379/0"))

        assert isinstance(service.membership_cache, RedisMembershipCache)
        await service.close()

    @pytest.mark.asyncio
    async def test_redis_backend_without_url_falls_back_to_memory(self):
        service = await create_authz_service(settings(cache_backend="redis"))
        assert isinstance(service.membership_cache, MemoryMembershipCache)

    @pytest.mark.asyncio
    async def test_pool_failure_is_store_unavailable(self):
        with patch("artreg_authz.factory.asyncpg.create_pool", new=AsyncMock(side_effect=OSError("refused"))):
            with pytest.raises(StoreUnavailableError):
                await create_authz_service(settings(database_url="postgresql://localhost/authz"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("create_tables", [True, False])
    async def test_table_bootstrap_follows_setting(self, create_tables):
        pool = MagicMock()
        pool.close = AsyncMock()
        create_pool = AsyncMock(return_value=pool)
        bootstrap = AsyncMock()

        with patch("artreg_authz.factory.asyncpg.create_pool", new=create_pool), \
                patch.object(AsyncPGTupleStore, "create_tables", new=bootstrap):
            service = await create_authz_service(
                settings(database_url="postgresql://localhost/authz", create_tables=create_tables)
            )

        assert isinstance(service.store, AsyncPGTupleStore)
        assert bootstrap.await_count == (1 if create_tables else 0)
        await service.close()
        pool.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_bootstrap_closes_pool(self):
        pool = MagicMock()
        pool.close = AsyncMock()
        bootstrap = AsyncMock(side_effect=StoreUnavailableError("permission denied for schema"))

        with patch("artreg_authz.factory.asyncpg.create_pool", new=AsyncMock(return_value=pool)), \
                patch.object(AsyncPGTupleStore, "create_tables", new=bootstrap):
            with pytest.raises(StoreUnavailableError):
                await create_authz_service(
                    settings(database_url="postgresql://localhost/authz", create_tables=True)
                )

        pool.close.assert_awaited_once()
