"""Request Context Middleware - trace id binding and access logging for HTTP.

Invariants:
    - X-Trace-ID is read from the request or generated, bound for the request,
      stored on request.state.trace_id and echoed as a response header
    - One access log line per request (method, path, status, duration)

Design Decisions:
    - Pure ASGI over BaseHTTPMiddleware: handlers run in the same task, so the
      ContextVar binding is visible to services and loggers
"""

import logging
import time

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from shopmesh.core.trace import TRACE_ID_HEADER, trace_context

logger = logging.getLogger(__name__)

_TRACE_HEADER_KEY = TRACE_ID_HEADER.lower().encode("latin-1")


class RequestContextMiddleware:

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        incoming = None
        for key, value in scope.get("headers", []):
            if key == _TRACE_HEADER_KEY:
                incoming = value.decode("latin-1")
                break

        with trace_context(incoming) as trace_id:
            scope.setdefault("state", {})["trace_id"] = trace_id
            status_code = 500
            start = time.perf_counter()

            async def send_with_trace(message: Message) -> None:
                nonlocal status_code
                if message["type"] == "http.response.start":
                    status_code = message["status"]
                    headers = MutableHeaders(scope=message)
                    headers[TRACE_ID_HEADER] = trace_id
                await send(message)

            try:
                await self.app(scope, receive, send_with_trace)
            finally:
                logger.info(
                    "http request",
                    extra={
                        "method": scope["method"],
                        "path": scope["path"],
                        "status": status_code,
                        "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                    },
                )
