"""Global exception handlers mapping service errors to JSON responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from bizcards.config import get_settings
from bizcards.services.errors import AccountLocked, ServiceError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        """Expected failures: category, message and safe detail."""
        logger.warning(
            f"{request.method} {request.url.path} -> {exc.status_code} "
            f"{exc.error_code}: {exc.message}"
        )
        headers = {}
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            headers["WWW-Authenticate"] = "Bearer"
        if isinstance(exc, AccountLocked):
            headers["Retry-After"] = str(exc.seconds_remaining)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error_code": exc.error_code, **exc.detail},
            headers=headers or None,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Field-level validation errors as 400."""
        errors = [
            {
                "path": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        logger.info(f"Validation error on {request.url.path}: {errors}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": "Request validation failed",
                "error_code": "validation_error",
                "errors": errors,
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        """Anything else is an internal error; details stay out of production responses."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        content = {"detail": "Internal server error", "error_code": "server_error"}
        if not get_settings().is_production:
            content["debug"] = f"{type(exc).__name__}: {exc}"
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)
