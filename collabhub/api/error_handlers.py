"""Error Handlers — global exception handlers for the collaboration API.

Invariants:
    - CollabError → structured JSON with code, message, severity (+ error-specific details)
    - The envelope context names the collaboration request (path parameter) and the
      calling actor (identity header) whenever the request carries them
    - RequestValidationError → 400 VALIDATION_ERROR with field-level details
    - Exception (catch-all) → 500, never leaks internal details
    - Expected 4xx outcomes log at WARNING; 5xx at ERROR
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from collabhub.config import get_settings
from collabhub.core.errors import CollabError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_collab_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_collab_error_handler(app: FastAPI) -> None:

    @app.exception_handler(CollabError)
    async def collab_error_handler(request: Request, exc: CollabError):
        """Handle all domain/infrastructure errors."""
        _fill_context(request, exc)
        log = logger.warning if exc.http_status < 500 else logger.error
        log(
            f"CollabError: {exc.message}",
            extra={
                "error_code": exc.code, "path": request.url.path,
                "request_id": exc.context.request_id,
                "actor_id": exc.context.actor_id,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.WARNING.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }


def _fill_context(request: Request, exc: CollabError) -> None:
    ctx = exc.context
    if ctx.request_id is None:
        ctx.request_id = request.path_params.get("request_id")
    if ctx.actor_id is None:
        actor_id = request.headers.get(get_settings().actor_id_header, "").strip()
        ctx.actor_id = actor_id or None
