"""Unary Server Interceptor - trace binding, deadlines, logging and error mapping for RPCs.

Invariants:
    - The incoming x-trace-id is bound for the handler (generated if absent)
      and echoed in trailing metadata on success and failure
    - Each handler runs under timeout_seconds; overrunning it is INTERNAL
    - AppError -> its gRPC status with the error message
    - Any other exception -> INTERNAL "internal error", logged with traceback
    - VALIDATION failures are logged at debug level only
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable

import grpc

from shopmesh.core.errors import AppError, ErrorKind
from shopmesh.core.trace import TRACE_ID_METADATA_KEY, trace_context

logger = logging.getLogger(__name__)

UnaryBehavior = Callable[[Any, grpc.aio.ServicerContext], Awaitable[Any]]


def _incoming_trace_id(metadata) -> str | None:
    for key, value in metadata or ():
        if key == TRACE_ID_METADATA_KEY:
            return value
    return None


async def run_unary(
    behavior: UnaryBehavior,
    request: Any,
    context: grpc.aio.ServicerContext,
    method: str,
    trace_id: str | None,
    timeout_seconds: float | None,
) -> Any:
    """Run one unary handler inside a trace context and map its failure."""
    with trace_context(trace_id) as bound:
        trailing = ((TRACE_ID_METADATA_KEY, bound),)
        start = time.perf_counter()
        status = grpc.StatusCode.OK
        message = ""
        try:
            async with asyncio.timeout(timeout_seconds):
                response = await behavior(request, context)
        except AppError as e:
            status, message = e.grpc_status, e.message
            _log_app_error(e, method)
        except TimeoutError:
            status, message = grpc.StatusCode.INTERNAL, "request timed out"
            logger.error(f"grpc {method} timed out", extra={"rpc_method": method})
        except Exception as e:
            status, message = grpc.StatusCode.INTERNAL, "internal error"
            logger.error(
                f"unhandled error in grpc {method}: {e}",
                extra={"rpc_method": method},
                exc_info=True,
            )

        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info(
            "grpc request completed",
            extra={"rpc_method": method, "grpc_code": status.name, "duration_ms": duration_ms},
        )
        if status != grpc.StatusCode.OK:
            await context.abort(status, message, trailing_metadata=trailing)
        context.set_trailing_metadata(trailing)
        return response


def _log_app_error(err: AppError, method: str) -> None:
    extra = {"rpc_method": method, "error_code": err.kind.value}
    if err.kind == ErrorKind.VALIDATION:
        logger.debug(f"grpc {method} rejected: {err.message}", extra=extra)
    elif err.kind == ErrorKind.INTERNAL:
        logger.error(f"grpc {method} failed: {err}", extra=extra, exc_info=err)
    else:
        logger.info(f"grpc {method} failed: {err.message}", extra=extra)


class TracingServerInterceptor(grpc.aio.ServerInterceptor):
    """Wraps every unary-unary handler with run_unary()."""

    def __init__(self, timeout_seconds: float | None = None):
        self.timeout_seconds = timeout_seconds

    async def intercept_service(self, continuation, handler_call_details):
        handler = await continuation(handler_call_details)
        if handler is None or handler.unary_unary is None:
            return handler

        behavior = handler.unary_unary
        method = handler_call_details.method
        trace_id = _incoming_trace_id(handler_call_details.invocation_metadata)
        timeout_seconds = self.timeout_seconds

        async def wrapped(request, context):
            return await run_unary(
                behavior, request, context, method, trace_id, timeout_seconds,
            )

        return grpc.unary_unary_rpc_method_handler(
            wrapped,
            request_deserializer=handler.request_deserializer,
            response_serializer=handler.response_serializer,
        )
