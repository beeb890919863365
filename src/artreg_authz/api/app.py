"""Application assembly for running the authz router standalone."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from ..__version__ import __version__
from ..config import AuthzSettings, get_settings
from ..factory import create_authz_service
from ..features.authz.services import AuthzService
from .dependencies import get_authz_service
from .exception_handlers import register_exception_handlers
from .router import router

logger = logging.getLogger(__name__)


def create_app(service: Optional[AuthzService] = None, settings: Optional[AuthzSettings] = None) -> FastAPI:
    """Build a FastAPI app serving the authz router.

    With ``service`` the app uses it as-is and leaves its lifecycle to the
    caller. Without it, a service is created from settings on startup and
    closed on shutdown.
    """
    settings = settings or get_settings()
    state = {"service": service}

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = state["service"] is None
        if owned:
            state["service"] = await create_authz_service(settings)
        try:
            yield
        finally:
            if owned:
                await state["service"].close()
                state["service"] = None

    app = FastAPI(
        title="Art Registry Authorization",
        version=__version__,
        lifespan=lifespan,
    )

    def provide_service() -> AuthzService:
        return state["service"]

    app.dependency_overrides[get_authz_service] = provide_service
    register_exception_handlers(app, is_production=settings.is_production)
    app.include_router(router)

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok", "version": __version__}

    return app


def run(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Serve the app with uvicorn."""
    uvicorn.run(create_app(), host=host, port=port)
