"""Service wiring.

``build_authz_service`` assembles a service from collaborators you already
have; ``create_authz_service`` builds those collaborators from settings
(asyncpg pool, Redis client, caches, audit sink, namespace registry).
"""

import logging
from typing import Optional

import asyncpg
import redis.asyncio as redis

from .config import AuthzSettings, get_settings
from .core.exceptions import StoreUnavailableError
from .features.audit import AsyncPGAuditSink, AuditSink, LoggingAuditSink
from .features.authz.entities import IdentityProvider
from .features.authz.services import AuthzService
from .features.cache import MembershipCache, MemoryMembershipCache, RedisMembershipCache
from .features.namespaces import NamespaceRegistry, get_namespace_registry
from .features.tuples import AsyncPGTupleStore, InMemoryTupleStore, TupleStore

logger = logging.getLogger(__name__)


def build_authz_service(
    store: TupleStore,
    registry: Optional[NamespaceRegistry] = None,
    audit_sink: Optional[AuditSink] = None,
    membership_cache: Optional[MembershipCache] = None,
    identity_provider: Optional[IdentityProvider] = None,
    settings: Optional[AuthzSettings] = None
) -> AuthzService:
    """Wire an AuthzService from existing collaborators.

    Deadlines, limits and check auditing come from ``settings`` (defaults
    when omitted); the registry comes from ``settings.namespace_config_path``
    unless one is passed.
    """
    settings = settings or AuthzSettings()
    if registry is None:
        registry = get_namespace_registry(settings.namespace_config_path)

    return AuthzService(
        store,
        registry=registry,
        audit_sink=audit_sink or LoggingAuditSink(),
        membership_cache=membership_cache,
        identity_provider=identity_provider,
        check_timeout=settings.check_timeout_seconds,
        write_timeout=settings.write_timeout_seconds,
        batch_max_concurrency=settings.batch_max_concurrency,
        max_indirection_depth=settings.max_indirection_depth,
        audit_checks=settings.audit_checks,
    )


async def create_authz_service(
    settings: Optional[AuthzSettings] = None,
    identity_provider: Optional[IdentityProvider] = None
) -> AuthzService:
    """Build a fully wired service from settings.

    Without ``database_url`` tuples live in memory, which suits local
    development only. With ``create_tables`` set, the tuple and audit
    tables are created on startup. Call ``service.close()`` on shutdown.
    """
    settings = settings or get_settings()
    pool = None
    redis_client = None

    if settings.database_url:
        logger.info(f"Creating database pool with size {settings.db_pool_max_size}")
        try:
            pool = await asyncpg.create_pool(
                settings.database_url,
                min_size=settings.db_pool_min_size,
                max_size=settings.db_pool_max_size,
                server_settings={"application_name": "artreg-authz"},
            )
        except Exception as e:
            logger.error(f"Failed to create database pool: {e}")
            raise StoreUnavailableError(f"Failed to create database pool: {e}")
        store: TupleStore = AsyncPGTupleStore(
            pool,
            schema=settings.database_schema,
            table=settings.tuple_table,
            audit_table=settings.audit_table,
        )
        if settings.create_tables:
            try:
                await store.create_tables()
            except Exception:
                await pool.close()
                raise
    else:
        if settings.is_production:
            logger.warning("No database_url configured in production; tuples are kept in memory")
        store = InMemoryTupleStore()

    if settings.audit_backend == "database" and pool is not None:
        audit_sink: AuditSink = AsyncPGAuditSink(pool, schema=settings.database_schema, table=settings.audit_table)
    else:
        audit_sink = LoggingAuditSink()

    membership_cache: Optional[MembershipCache] = None
    if settings.cache_backend == "redis" and settings.redis_url:
        redis_client = redis.from_url(settings.redis_url, decode_responses=True)
        membership_cache = RedisMembershipCache(
            redis_client,
            key_prefix=settings.cache_key_prefix,
            ttl_seconds=settings.membership_cache_ttl_seconds,
        )
    elif settings.cache_backend in ("memory", "redis"):
        if settings.cache_backend == "redis":
            logger.warning("cache_backend is redis but no redis_url is set; using memory cache")
        membership_cache = MemoryMembershipCache(
            ttl_seconds=settings.membership_cache_ttl_seconds,
            max_entries=settings.membership_cache_max_entries,
        )

    service = build_authz_service(
        store,
        audit_sink=audit_sink,
        membership_cache=membership_cache,
        identity_provider=identity_provider,
        settings=settings,
    )

    if pool is not None:
        service.add_shutdown_hook(pool.close)
    if redis_client is not None:
        service.add_shutdown_hook(redis_client.aclose)

    logger.info(
        f"Authz service ready (store={type(store).__name__}, "
        f"cache={type(membership_cache).__name__ if membership_cache else 'none'}, "
        f"audit={type(audit_sink).__name__})"
    )
    return service
