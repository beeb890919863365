"""
Redis implementation of the group membership cache.

Shares membership answers across processes. Entries expire after the
configured TTL; every Redis error is logged and treated as a miss so
that the cache can never fail a check.
"""
import logging
from typing import Optional
from urllib.parse import quote

import redis.asyncio as redis

from ....config.constants import CacheKeys, CacheTTL
from ....core.value_objects import SubjectRef
from ..entities import MembershipCache

logger = logging.getLogger(__name__)


def _encode(part: str) -> str:
    return quote(part, safe="")


class RedisMembershipCache(MembershipCache):
    """Redis-backed membership cache.

    Keys: ``{prefix}:membership:{group_id}:{subject_namespace}:{subject_id}``
    with each part percent-encoded, so ids containing ``:`` or glob
    characters cannot collide with another group or subject.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        key_prefix: str = "artreg_authz",
        ttl_seconds: float = CacheTTL.MEMBERSHIP_DEFAULT
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._redis = redis_client
        self._key_prefix = key_prefix
        self._ttl_ms = max(1, int(ttl_seconds * 1000))

    def _key(self, group_id: str, subject: SubjectRef) -> str:
        return CacheKeys.MEMBERSHIP.format(
            prefix=self._key_prefix,
            group_id=_encode(group_id),
            subject_namespace=_encode(subject.namespace.value),
            subject_id=_encode(subject.id),
        )

    async def get(self, group_id: str, subject: SubjectRef) -> Optional[bool]:
        try:
            result = await self._redis.get(self._key(group_id, subject))
            if result is None:
                return None
            if isinstance(result, bytes):
                result = result.decode()
            return result == "1"
        except Exception as e:
            logger.warning(f"Failed to get membership from cache: {e}")
            return None

    async def set(self, group_id: str, subject: SubjectRef, is_member: bool) -> None:
        try:
            await self._redis.set(
                self._key(group_id, subject),
                "1" if is_member else "0",
                px=self._ttl_ms,
            )
        except Exception as e:
            logger.warning(f"Failed to cache membership: {e}")

    async def invalidate_group(self, group_id: str) -> None:
        pattern = CacheKeys.MEMBERSHIP_GROUP.format(prefix=self._key_prefix, group_id=_encode(group_id))
        await self._delete_matching(pattern)

    async def clear(self) -> None:
        await self._delete_matching(f"{self._key_prefix}:membership:*")

    async def _delete_matching(self, pattern: str) -> None:
        try:
            keys = [key async for key in self._redis.scan_iter(match=pattern)]
            if keys:
                await self._redis.delete(*keys)
                logger.debug(f"Invalidated {len(keys)} membership keys matching {pattern}")
        except Exception as e:
            # Stale entries still expire after the TTL
            logger.warning(f"Failed to invalidate membership keys {pattern}: {e}")
