"""Memory membership cache adapter."""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ....config.constants import CacheTTL, Limits
from ....core.value_objects import SubjectRef
from ..entities import MembershipCache

logger = logging.getLogger(__name__)

_Key = Tuple[str, str, str]


@dataclass
class MembershipEntry:
    """Cached membership answer with its expiry."""
    is_member: bool
    expires_at: float

    @property
    def is_expired(self) -> bool:
        return time.monotonic() >= self.expires_at


class MemoryMembershipCache(MembershipCache):
    """Process-local membership cache with per-entry TTL and bounded size."""

    def __init__(
        self,
        ttl_seconds: float = CacheTTL.MEMBERSHIP_DEFAULT,
        max_entries: int = Limits.MEMBERSHIP_CACHE_MAX_ENTRIES
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._entries: "OrderedDict[_Key, MembershipEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self._stats = {"hits": 0, "misses": 0, "sets": 0, "invalidations": 0, "evictions": 0}

    @staticmethod
    def _key(group_id: str, subject: SubjectRef) -> _Key:
        return (group_id, subject.namespace.value, subject.id)

    async def get(self, group_id: str, subject: SubjectRef) -> Optional[bool]:
        key = self._key(group_id, subject)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats["misses"] += 1
                return None
            if entry.is_expired:
                del self._entries[key]
                self._stats["misses"] += 1
                return None
            self._stats["hits"] += 1
            return entry.is_member

    async def set(self, group_id: str, subject: SubjectRef, is_member: bool) -> None:
        key = self._key(group_id, subject)
        with self._lock:
            self._entries[key] = MembershipEntry(is_member, time.monotonic() + self._ttl)
            self._entries.move_to_end(key)
            self._stats["sets"] += 1
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)
                self._stats["evictions"] += 1

    async def invalidate_group(self, group_id: str) -> None:
        with self._lock:
            stale = [key for key in self._entries if key[0] == group_id]
            for key in stale:
                del self._entries[key]
            self._stats["invalidations"] += 1
        if stale:
            logger.debug(f"Invalidated {len(stale)} membership entries for group {group_id}")

    async def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._stats["invalidations"] += 1

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            total = self._stats["hits"] + self._stats["misses"]
            return {
                **self._stats,
                "entries": len(self._entries),
                "hit_rate": (self._stats["hits"] / total) if total else 0.0,
            }

    def __len__(self) -> int:
        return len(self._entries)
