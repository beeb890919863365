"""HTTP+JSON surface for the authorization core."""

from .router import router
from .dependencies import get_authz_service, get_actor
from .exception_handlers import ExceptionHandlerRegistry, register_exception_handlers
from .app import create_app, run

__all__ = [
    "router",
    "get_authz_service",
    "get_actor",
    "ExceptionHandlerRegistry",
    "register_exception_handlers",
    "create_app",
    "run",
]
