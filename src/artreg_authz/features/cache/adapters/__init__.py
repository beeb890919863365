from .memory_adapter import MemoryMembershipCache
from .redis_adapter import RedisMembershipCache

__all__ = ["MemoryMembershipCache", "RedisMembershipCache"]
