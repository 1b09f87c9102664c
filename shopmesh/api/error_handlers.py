"""Error Handlers - global exception handlers mapping the taxonomy onto HTTP.

Invariants:
    - AppError -> its HTTP status + {"error": {code, message, details?}, "trace_id"}
    - RequestValidationError -> 400 VALIDATION_ERROR with field-level details
    - Exception (catch-all) -> 500 INTERNAL_ERROR, generic message, never leaks internals
    - Every error response carries trace_id in the body and the X-Trace-ID header
    - VALIDATION is logged at debug level; only INTERNAL is logged as an error

Design Decisions:
    - Three-layer handler: domain (AppError), validation (Pydantic), catch-all (Exception)
    - The catch-all runs outside RequestContextMiddleware, so trace_id is read
      from request.state rather than the ContextVar
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shopmesh.api.deps import trace_id_of
from shopmesh.core.errors import (
    GENERIC_INTERNAL_MESSAGE, AppError, ErrorKind, InternalError, ValidationError,
)
from shopmesh.core.trace import TRACE_ID_HEADER
from shopmesh.schemas.envelope import field_errors

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_app_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def error_response(exc: AppError, trace_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_response(trace_id),
        headers={TRACE_ID_HEADER: trace_id},
    )


def _register_app_error_handler(app: FastAPI) -> None:

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        """Handle every classified error."""
        extra = {"error_code": exc.kind.value, "path": request.url.path}
        if exc.kind == ErrorKind.VALIDATION:
            logger.debug(f"request rejected: {exc.message}", extra=extra)
        elif exc.kind == ErrorKind.INTERNAL:
            logger.error(f"request failed: {exc}", extra=extra, exc_info=exc)
        else:
            logger.info(f"request error: {exc.message}", extra=extra)
        return error_response(exc, trace_id_of(request))


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.debug(f"Validation error on {request.url.path}: {exc.errors()}")
        error = ValidationError(
            "invalid request body", details=field_errors(exc.errors()),
        )
        return error_response(error, trace_id_of(request))


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all - never leaks internal details."""
        trace_id = trace_id_of(request)
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            extra={"trace_id": trace_id, "path": request.url.path},
            exc_info=True,
        )
        return error_response(InternalError(GENERIC_INTERNAL_MESSAGE), trace_id)
