from .protocols import MembershipCache

__all__ = ["MembershipCache"]
