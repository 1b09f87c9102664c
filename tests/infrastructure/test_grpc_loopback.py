"""gRPC over loopback - real grpc.aio server and channel, JSON codec on the wire.

Tests cover:
    - CreateOrder / GetOrder round-trip through the interceptor and codec
    - Unknown user -> VALIDATION, missing order -> NOT_FOUND on the client side
    - Out-of-range id -> VALIDATION, never an unclassified failure
    - x-trace-id metadata is bound inside the server handler
"""

import grpc
import pytest

from shopmesh.core.errors import AppError, ErrorKind
from shopmesh.core.trace import get_trace_id, trace_context
from shopmesh.infrastructure.rpc import (
    CREATE_ORDER, GET_ORDER, RpcClient, create_channel, decode, encode,
)
from shopmesh.rpc.interceptors import TracingServerInterceptor
from shopmesh.rpc.order_server import OrderRpcService
from shopmesh.services.order_service import OrderService

ECHO_TRACE = "/test.Echo/Trace"


async def _echo_trace(request: dict, context) -> dict:
    return {"trace_id": get_trace_id()}


def _echo_handler() -> grpc.GenericRpcHandler:
    return grpc.method_handlers_generic_handler("test.Echo", {
        "Trace": grpc.unary_unary_rpc_method_handler(
            _echo_trace, request_deserializer=decode, response_serializer=encode,
        ),
    })


@pytest.fixture
async def rpc(order_repo, user_client):
    server = grpc.aio.server(interceptors=[TracingServerInterceptor(5.0)])
    server.add_generic_rpc_handlers((
        OrderRpcService(OrderService(order_repo, user_client=user_client)).handler(),
        _echo_handler(),
    ))
    port = server.add_insecure_port("127.0.0.1:0")
    await server.start()
    client = RpcClient(create_channel(f"127.0.0.1:{port}"), timeout_seconds=5.0)
    yield client
    await client.close()
    await server.stop(None)


async def test_create_and_get_order(rpc):
    created = await rpc.call(CREATE_ORDER, {"user_id": 1, "total": 42.5})
    assert created["user_id"] == 1
    assert created["status"] == "pending"

    fetched = await rpc.call(GET_ORDER, {"id": created["id"]})
    assert fetched == created


async def test_unknown_user_is_validation(rpc, order_repo):
    with pytest.raises(AppError) as exc:
        await rpc.call(CREATE_ORDER, {"user_id": 999, "total": 10})
    assert exc.value.kind == ErrorKind.VALIDATION
    assert exc.value.message == "user not found"
    assert order_repo.create_calls == 0


async def test_missing_order_is_not_found(rpc):
    with pytest.raises(AppError) as exc:
        await rpc.call(GET_ORDER, {"id": 9999})
    assert exc.value.kind == ErrorKind.NOT_FOUND


async def test_out_of_range_id_is_validation(rpc):
    with pytest.raises(AppError) as exc:
        await rpc.call(GET_ORDER, {"id": 10**20})
    assert exc.value.kind == ErrorKind.VALIDATION
    assert exc.value.message == "invalid order id"


async def test_trace_id_reaches_handler(rpc):
    with trace_context("trace-loopback"):
        reply = await rpc.call(ECHO_TRACE, {})
    assert reply["trace_id"] == "trace-loopback"
