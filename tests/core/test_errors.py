"""Error Taxonomy - verifies status mappings, wrapping and RPC translation.

Tests:
    - Every kind maps to its HTTP status, gRPC status and wire code
    - is_kind() survives exception chaining and wrap()
    - from_rpc_error() inverts the gRPC map; unknown codes become INTERNAL
    - to_response() never exposes the cause
"""

import grpc
import pytest
from grpc.aio import AioRpcError, Metadata

from shopmesh.core.errors import (
    GENERIC_INTERNAL_MESSAGE, AppError, ConflictError, ErrorKind, ForbiddenError,
    InternalError, NotFoundError, UnauthorizedError, ValidationError,
    classify, from_rpc_error, grpc_status_for, http_status_for, is_kind, wrap,
)


def _rpc_error(code: grpc.StatusCode, details: str) -> AioRpcError:
    return AioRpcError(code, Metadata(), Metadata(), details=details)


@pytest.mark.parametrize("err, http, rpc, code", [
    (ValidationError("bad"), 400, grpc.StatusCode.INVALID_ARGUMENT, "VALIDATION_ERROR"),
    (NotFoundError("order", 1), 404, grpc.StatusCode.NOT_FOUND, "NOT_FOUND"),
    (ConflictError("dup"), 409, grpc.StatusCode.ALREADY_EXISTS, "CONFLICT"),
    (UnauthorizedError("who"), 401, grpc.StatusCode.UNAUTHENTICATED, "UNAUTHORIZED"),
    (ForbiddenError("no"), 403, grpc.StatusCode.PERMISSION_DENIED, "FORBIDDEN"),
    (InternalError("boom"), 500, grpc.StatusCode.INTERNAL, "INTERNAL_ERROR"),
])
def test_kind_maps_to_transport_statuses(err, http, rpc, code):
    assert err.http_status == http
    assert err.grpc_status == rpc
    assert err.kind.value == code


def test_unclassified_errors_map_to_500_and_internal():
    assert http_status_for(RuntimeError("x")) == 500
    assert grpc_status_for(RuntimeError("x")) == grpc.StatusCode.INTERNAL


def test_not_found_message_format():
    assert NotFoundError("order", 42).message == "order with id '42' not found"


def test_is_kind_follows_cause_chain():
    try:
        try:
            raise NotFoundError("user", 7)
        except NotFoundError as inner:
            raise RuntimeError("lookup failed") from inner
    except RuntimeError as outer:
        assert is_kind(outer, ErrorKind.NOT_FOUND)
        assert not is_kind(outer, ErrorKind.INTERNAL)


def test_is_kind_on_foreign_error_is_false():
    assert not is_kind(ValueError("x"), ErrorKind.VALIDATION)
    assert not is_kind(None, ErrorKind.VALIDATION)


def test_wrap_preserves_kind_and_details():
    original = ValidationError("total must be greater than 0", details={"total": 0})
    wrapped = wrap(original, "creating order")
    assert wrapped.kind == ErrorKind.VALIDATION
    assert wrapped.message == "creating order: total must be greater than 0"
    assert wrapped.details == {"total": 0}
    assert wrapped.__cause__ is original


def test_wrap_foreign_error_becomes_internal():
    wrapped = wrap(OSError("disk"), "saving")
    assert wrapped.kind == ErrorKind.INTERNAL
    assert wrapped.message == "saving"


def test_classify_hides_unknown_errors():
    err = classify(KeyError("secret"))
    assert err.kind == ErrorKind.INTERNAL
    assert err.message == GENERIC_INTERNAL_MESSAGE


def test_to_response_shape_and_no_cause_leak():
    err = InternalError("failed to create order", cause=RuntimeError("password=hunter2"))
    body = err.to_response("trace-1")
    assert body == {
        "error": {"code": "INTERNAL_ERROR", "message": "failed to create order"},
        "trace_id": "trace-1",
    }
    assert "hunter2" not in str(body)


def test_to_response_includes_details_when_present():
    body = ValidationError("user not found", details={"user_id": 9}).to_response("t")
    assert body["error"]["details"] == {"user_id": 9}


@pytest.mark.parametrize("code, kind", [
    (grpc.StatusCode.INVALID_ARGUMENT, ErrorKind.VALIDATION),
    (grpc.StatusCode.NOT_FOUND, ErrorKind.NOT_FOUND),
    (grpc.StatusCode.ALREADY_EXISTS, ErrorKind.CONFLICT),
    (grpc.StatusCode.UNAUTHENTICATED, ErrorKind.UNAUTHORIZED),
    (grpc.StatusCode.PERMISSION_DENIED, ErrorKind.FORBIDDEN),
    (grpc.StatusCode.INTERNAL, ErrorKind.INTERNAL),
])
def test_from_rpc_error_inverts_status_map(code, kind):
    err = from_rpc_error(_rpc_error(code, "remote says no"))
    assert err.kind == kind
    assert err.message == "remote says no"


def test_from_rpc_error_unknown_code_is_generic_internal():
    err = from_rpc_error(_rpc_error(grpc.StatusCode.UNAVAILABLE, "connect failed: 10.0.0.3"))
    assert err.kind == ErrorKind.INTERNAL
    assert err.message == "remote call failed"
    assert err.details is None
    assert "10.0.0.3" not in str(err.to_response("t"))


def test_from_rpc_error_non_rpc_exception():
    err = from_rpc_error(ValueError("weird"))
    assert err.kind == ErrorKind.INTERNAL
    assert isinstance(err.cause, ValueError)


def test_app_error_str_includes_cause_for_logs():
    err = AppError(ErrorKind.INTERNAL, "failed", cause=RuntimeError("root"))
    assert str(err) == "INTERNAL_ERROR: failed: root"
