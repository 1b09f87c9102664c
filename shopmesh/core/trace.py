"""Trace Context - per-request correlation id carried through async call chains.

Invariants:
    - Exactly one trace id is bound per inbound request / RPC / consumed message
    - Absent or blank incoming ids are replaced by a fresh uuid4 string
    - Tasks spawned while a trace id is bound inherit it (asyncio copies contexts)

Design Decisions:
    - ContextVar over passing trace_id through every signature: asyncio tasks
      get a copy of the context, so concurrent requests never see each other's id
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

TRACE_ID_HEADER = "X-Trace-ID"
TRACE_ID_METADATA_KEY = "x-trace-id"

_trace_id: ContextVar[str] = ContextVar("trace_id", default="")


def new_trace_id() -> str:
    return str(uuid.uuid4())


def get_trace_id() -> str:
    """Trace id bound to the current context, or "" outside a request."""
    return _trace_id.get()


def ensure_trace_id(candidate: str | None) -> str:
    if candidate and candidate.strip():
        return candidate.strip()
    return new_trace_id()


@contextmanager
def trace_context(trace_id: str | None = None) -> Iterator[str]:
    """Bind a trace id (generated if missing) for the duration of the block."""
    bound = ensure_trace_id(trace_id)
    token = _trace_id.set(bound)
    try:
        yield bound
    finally:
        _trace_id.reset(token)
