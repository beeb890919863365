"""Cache feature: short-lived group membership answers.

- entities/: cache protocol
- adapters/: memory and Redis implementations
"""

from .entities import MembershipCache
from .adapters import MemoryMembershipCache, RedisMembershipCache

__all__ = ["MembershipCache", "MemoryMembershipCache", "RedisMembershipCache"]
