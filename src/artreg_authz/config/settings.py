"""
Settings for the authorization core.

Environment-driven configuration (``AUTHZ_`` prefix, optional ``.env``
file) for the tuple store, the membership cache, deadlines and auditing.
"""
from typing import Optional
from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import CacheTTL, DatabaseTables, Limits, Timeouts


class AuthzSettings(BaseSettings):
    """Authorization core settings."""

    model_config = SettingsConfigDict(
        env_prefix="AUTHZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    environment: str = Field(default="development")

    # Tuple store
    database_url: Optional[str] = Field(default=None)
    database_schema: str = Field(default=DatabaseTables.SCHEMA)
    tuple_table: str = Field(default=DatabaseTables.TUPLES)
    audit_table: str = Field(default=DatabaseTables.AUDIT_LOG)
    db_pool_min_size: int = Field(default=1, ge=1)
    db_pool_max_size: int = Field(default=10, ge=1)
    create_tables: bool = Field(default=False)

    # Membership cache
    redis_url: Optional[str] = Field(default=None)
    cache_backend: str = Field(default="memory")
    cache_key_prefix: str = Field(default="artreg_authz")
    membership_cache_ttl_seconds: float = Field(default=CacheTTL.MEMBERSHIP_DEFAULT, gt=0, le=CacheTTL.MEMBERSHIP_MAX)
    membership_cache_max_entries: int = Field(default=Limits.MEMBERSHIP_CACHE_MAX_ENTRIES, ge=1)

    # Engine
    check_timeout_seconds: float = Field(default=Timeouts.CHECK, gt=0)
    write_timeout_seconds: float = Field(default=Timeouts.WRITE, gt=0)
    batch_max_concurrency: int = Field(default=Limits.BATCH_MAX_CONCURRENCY, ge=1)
    max_indirection_depth: int = Field(default=Limits.MAX_INDIRECTION_DEPTH, ge=1)
    namespace_config_path: Optional[str] = Field(default=None)

    # Audit
    audit_checks: bool = Field(default=True)
    audit_backend: str = Field(default="logging")

    @field_validator("cache_backend")
    @classmethod
    def validate_cache_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in ("memory", "redis", "none"):
            raise ValueError("cache_backend must be one of: memory, redis, none")
        return v

    @field_validator("audit_backend")
    @classmethod
    def validate_audit_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in ("logging", "database"):
            raise ValueError("audit_backend must be one of: logging, database")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")


@lru_cache()
def get_settings() -> AuthzSettings:
    """Get cached settings instance."""
    return AuthzSettings()
