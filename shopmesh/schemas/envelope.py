"""Response Envelopes - the success and error bodies every HTTP route returns.

Invariants:
    - Success: {"data": ..., "trace_id": ...}
    - Error:   {"error": {"code", "message", "details"?}, "trace_id": ...}
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    data: T
    trace_id: str


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Any | None = None


class ErrorResponse(BaseModel):
    error: ErrorBody
    trace_id: str


def field_errors(errors: Any) -> list[dict]:
    """Flatten pydantic error dicts into {field, message, type} entries."""
    return [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in errors
    ]
