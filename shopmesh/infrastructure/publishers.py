"""Event Publishers - fire-and-forget adapters from domain events to the event bus.

Invariants:
    - publish_*() returns immediately; delivery runs in a detached task
    - The envelope (and its trace_id) is built at hand-off time, inside the request
    - Delivery failures are logged with the order/user id, never raised
    - drain() waits for in-flight deliveries (used on shutdown)

Design Decisions:
    - Detached task over awaiting in the request: a committed order must not
      wait on, or be cancelled with, broker I/O
"""

import asyncio
import logging
from typing import Protocol

from shopmesh.core.events import (
    ROUTING_KEY_ORDER_CREATED, ROUTING_KEY_USER_CREATED,
    order_created_event, user_created_event,
)
from shopmesh.core.order import Order
from shopmesh.core.trace import get_trace_id
from shopmesh.core.user import User

logger = logging.getLogger(__name__)


class Publisher(Protocol):
    async def publish(self, routing_key: str, payload: dict) -> None: ...


class EventBusPublisher:
    """Implements OrderEventPublisher and UserEventPublisher."""

    def __init__(self, bus: Publisher):
        self._bus = bus
        self._pending: set[asyncio.Task] = set()

    def publish_order_created(self, order: Order) -> None:
        event = order_created_event(order, get_trace_id())
        self._dispatch(ROUTING_KEY_ORDER_CREATED, event, {"order_id": order.id})

    def publish_user_created(self, user: User) -> None:
        event = user_created_event(user, get_trace_id())
        self._dispatch(ROUTING_KEY_USER_CREATED, event, {"user_id": user.id})

    def _dispatch(self, routing_key: str, event: dict, log_extra: dict) -> None:
        task = asyncio.create_task(self._deliver(routing_key, event, log_extra))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, routing_key: str, event: dict, log_extra: dict) -> None:
        try:
            await self._bus.publish(routing_key, event)
        except Exception as e:
            logger.error(
                f"failed to publish {routing_key} event: {e}",
                extra={"routing_key": routing_key, **log_extra},
                exc_info=True,
            )

    async def drain(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
