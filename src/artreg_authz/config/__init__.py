"""Configuration for artreg-authz."""

from .constants import (
    WILDCARD,
    Namespace,
    Relations,
    SystemObjects,
    CacheKeys,
    CacheTTL,
    Timeouts,
    Limits,
    DatabaseTables,
)
from .settings import AuthzSettings, get_settings
from .logging_config import LoggingConfig, setup_logging, get_logger, AUDIT_LOGGER_NAME

__all__ = [
    "WILDCARD",
    "Namespace",
    "Relations",
    "SystemObjects",
    "CacheKeys",
    "CacheTTL",
    "Timeouts",
    "Limits",
    "DatabaseTables",
    "AuthzSettings",
    "get_settings",
    "LoggingConfig",
    "setup_logging",
    "get_logger",
    "AUDIT_LOGGER_NAME",
]
