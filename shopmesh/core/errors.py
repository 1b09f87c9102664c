"""Error Taxonomy - one closed set of error kinds shared by every transport.

Invariants:
    - Every failure crossing a transport boundary is an AppError with exactly one ErrorKind
    - kind -> HTTP status and kind -> gRPC status are total maps (unknown -> INTERNAL / 500)
    - from_rpc_error() inverts the gRPC map; unmapped status codes collapse to INTERNAL
    - The wrapped cause is diagnostic only: never rendered by to_response()
    - is_kind() follows the __cause__ chain, so classification survives wrapping

Design Decisions:
    - Kind enum on a single exception type over one class per failure mode:
      callers ask "is this NOT_FOUND?" without importing concrete classes
    - Thin subclasses (ValidationError, NotFoundError, ...) kept as constructors,
      so raise sites read naturally
    - ErrorKind values are the wire codes used in JSON envelopes
"""

from enum import Enum
from typing import Any

import grpc


class ErrorKind(str, Enum):
    """Closed set of error categories. Values double as JSON error codes."""
    VALIDATION = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"


GENERIC_INTERNAL_MESSAGE = "An internal error occurred"

_HTTP_STATUS: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.INTERNAL: 500,
}

_GRPC_STATUS: dict[ErrorKind, grpc.StatusCode] = {
    ErrorKind.VALIDATION: grpc.StatusCode.INVALID_ARGUMENT,
    ErrorKind.NOT_FOUND: grpc.StatusCode.NOT_FOUND,
    ErrorKind.CONFLICT: grpc.StatusCode.ALREADY_EXISTS,
    ErrorKind.UNAUTHORIZED: grpc.StatusCode.UNAUTHENTICATED,
    ErrorKind.FORBIDDEN: grpc.StatusCode.PERMISSION_DENIED,
    ErrorKind.INTERNAL: grpc.StatusCode.INTERNAL,
}

_KIND_BY_GRPC_STATUS: dict[grpc.StatusCode, ErrorKind] = {
    code: kind for kind, code in _GRPC_STATUS.items()
}


class AppError(Exception):
    """Base exception for every classified failure."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.kind.value}: {self.message}: {self.cause}"
        return f"{self.kind.value}: {self.message}"

    @property
    def http_status(self) -> int:
        return http_status_for(self)

    @property
    def grpc_status(self) -> grpc.StatusCode:
        return grpc_status_for(self)

    def to_response(self, trace_id: str | None = None) -> dict:
        """Convert to the REST error envelope."""
        body: dict[str, Any] = {"code": self.kind.value, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        response: dict[str, Any] = {"error": body}
        if trace_id:
            response["trace_id"] = trace_id
        return response


# ─── Constructors (one per kind) ────────────────────────────────

class ValidationError(AppError):
    """Caller supplied invalid input."""
    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(ErrorKind.VALIDATION, message, details)


class NotFoundError(AppError):
    """Requested resource does not exist."""
    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            ErrorKind.NOT_FOUND, f"{resource} with id '{resource_id}' not found",
        )
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(AppError):
    """Write would violate a uniqueness or state constraint."""
    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(ErrorKind.CONFLICT, message, details)


class InternalError(AppError):
    """Technical failure: storage, transport, or anything unclassified."""
    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(ErrorKind.INTERNAL, message, details, cause)


class UnauthorizedError(AppError):
    def __init__(self, message: str):
        super().__init__(ErrorKind.UNAUTHORIZED, message)


class ForbiddenError(AppError):
    def __init__(self, message: str):
        super().__init__(ErrorKind.FORBIDDEN, message)


# ─── Classification helpers ─────────────────────────────────────

def as_app_error(err: BaseException | None) -> AppError | None:
    """First AppError found walking err and its __cause__ chain."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, AppError):
            return err
        seen.add(id(err))
        err = err.__cause__
    return None


def is_kind(err: BaseException | None, kind: ErrorKind) -> bool:
    app_err = as_app_error(err)
    return app_err is not None and app_err.kind == kind


def wrap(err: BaseException, message: str) -> AppError:
    """Re-contextualize err. Kind and details survive; foreign errors become INTERNAL."""
    app_err = as_app_error(err)
    if app_err is None:
        return InternalError(message, cause=err)
    return AppError(
        app_err.kind, f"{message}: {app_err.message}", app_err.details, cause=err,
    )


def classify(err: BaseException) -> AppError:
    """Force any exception into the taxonomy. Unclassified -> generic INTERNAL."""
    app_err = as_app_error(err)
    if app_err is not None:
        return app_err
    return InternalError(GENERIC_INTERNAL_MESSAGE, cause=err)


def http_status_for(err: BaseException) -> int:
    app_err = as_app_error(err)
    if app_err is None:
        return 500
    return _HTTP_STATUS.get(app_err.kind, 500)


def grpc_status_for(err: BaseException) -> grpc.StatusCode:
    app_err = as_app_error(err)
    if app_err is None:
        return grpc.StatusCode.INTERNAL
    return _GRPC_STATUS.get(app_err.kind, grpc.StatusCode.INTERNAL)


def from_rpc_error(err: BaseException) -> AppError:
    """Translate a gRPC failure back into the taxonomy.

    Recognized status codes keep the remote message. Anything else
    (UNAVAILABLE, DEADLINE_EXCEEDED, non-RPC exceptions) becomes INTERNAL
    with the original text kept only on the cause.
    """
    if isinstance(err, grpc.RpcError) and hasattr(err, "code"):
        code = err.code()
        kind = _KIND_BY_GRPC_STATUS.get(code)
        if kind is not None:
            return AppError(kind, err.details() or "", cause=err)
        return InternalError("remote call failed", cause=err)
    return InternalError("unknown error", cause=err)
