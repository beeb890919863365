"""Protocol interface for the group membership cache."""

from abc import abstractmethod
from typing import Optional, Protocol, runtime_checkable

from ....core.value_objects import SubjectRef


@runtime_checkable
class MembershipCache(Protocol):
    """Short-lived cache of "is subject X a member of group G".

    Implementations must be safe for concurrent use and must never raise
    from lookups; a backend failure is a miss.
    """

    @abstractmethod
    async def get(self, group_id: str, subject: SubjectRef) -> Optional[bool]:
        """Cached membership, or None on miss."""
        ...

    @abstractmethod
    async def set(self, group_id: str, subject: SubjectRef, is_member: bool) -> None:
        ...

    @abstractmethod
    async def invalidate_group(self, group_id: str) -> None:
        """Drop every entry for a group."""
        ...

    @abstractmethod
    async def clear(self) -> None:
        ...
