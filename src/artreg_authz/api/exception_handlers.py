"""Exception handlers mapping the error taxonomy onto HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..core.exceptions import AuthzError, create_error_response, get_http_status_code

logger = logging.getLogger(__name__)


class ExceptionHandlerRegistry:
    """Registers authz error handlers on an application."""

    def __init__(self, is_production: bool = True):
        self.is_production = is_production

    def register_handlers(self, app: FastAPI) -> None:
        @app.exception_handler(AuthzError)
        async def authz_exception_handler(request: Request, exc: AuthzError):
            status_code = get_http_status_code(exc)
            if status_code >= 500:
                logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
            return JSONResponse(status_code=status_code, content=create_error_response(exc))

        @app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            logger.error(f"Unhandled exception: {exc}", exc_info=True)
            message = "An unexpected error occurred" if self.is_production else str(exc)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": {"code": "InternalError", "message": message, "details": {}, "type": "Exception"}},
            )


def register_exception_handlers(app: FastAPI, is_production: bool = True) -> None:
    ExceptionHandlerRegistry(is_production).register_handlers(app)
