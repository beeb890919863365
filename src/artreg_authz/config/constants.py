"""Constants and enums for artreg-authz.

Namespaces, relation names and cache key patterns shared by the
authorization engines, the stores and the HTTP layer.
"""

from enum import Enum
from typing import Final


WILDCARD: Final[str] = "*"


class Namespace(str, Enum):
    """Closed set of entity categories a tuple may reference."""

    USER = "user"
    GROUP = "group"
    ARTWORK = "artwork"
    NFC_TAG = "nfc_tag"
    APPRAISAL = "appraisal"
    SYSTEM = "system"


class Relations:
    """Relation names used by the default namespace configuration."""

    MEMBER: Final[str] = "member"
    EXIST: Final[str] = "exist"
    OWNER: Final[str] = "owner"
    EDITOR: Final[str] = "editor"
    VIEWER: Final[str] = "viewer"
    MANAGER: Final[str] = "manager"
    APPRAISER: Final[str] = "appraiser"
    ADMIN: Final[str] = "admin"
    USER_MANAGER: Final[str] = "user_manager"
    STATISTICS_VIEWER: Final[str] = "statistics_viewer"


class SystemObjects:
    """Well-known object ids in the system namespace."""

    GLOBAL: Final[str] = "global"


class CacheKeys:
    """Cache key patterns for Redis."""

    MEMBERSHIP: Final[str] = "{prefix}:membership:{group_id}:{subject_namespace}:{subject_id}"
    MEMBERSHIP_GROUP: Final[str] = "{prefix}:membership:{group_id}:*"


class CacheTTL:
    """Cache TTL values in seconds."""

    MEMBERSHIP_DEFAULT: Final[float] = 5.0
    MEMBERSHIP_MAX: Final[float] = 60.0


class Timeouts:
    """Default deadlines in seconds."""

    CHECK: Final[float] = 2.0
    WRITE: Final[float] = 5.0


class Limits:
    """Engine limits."""

    MAX_INDIRECTION_DEPTH: Final[int] = 8
    BATCH_MAX_CONCURRENCY: Final[int] = 16
    MEMBERSHIP_CACHE_MAX_ENTRIES: Final[int] = 10_000
    MAX_ID_LENGTH: Final[int] = 256


class DatabaseTables:
    """Default table names for the PostgreSQL store."""

    SCHEMA: Final[str] = "public"
    TUPLES: Final[str] = "authz_tuples"
    AUDIT_LOG: Final[str] = "authz_audit_log"
