"""Event Publishers - hand-off returns immediately; failures are logged, not raised."""

import asyncio
import logging

from shopmesh.core.domain_types import UserId
from shopmesh.core.errors import InternalError
from shopmesh.core.order import Order
from shopmesh.core.trace import trace_context
from shopmesh.core.user import User
from shopmesh.infrastructure.publishers import EventBusPublisher
from tests.fakes import RecordingBus


async def test_publish_does_not_wait_for_delivery():
    bus = RecordingBus()
    bus.release.clear()
    publisher = EventBusPublisher(bus)

    publisher.publish_order_created(Order.new(UserId(1), 5))
    await asyncio.sleep(0)
    assert bus.published == []

    bus.release.set()
    await publisher.drain()
    assert bus.published[0][0] == "order.created"


async def test_trace_id_captured_at_hand_off():
    bus = RecordingBus()
    publisher = EventBusPublisher(bus)

    with trace_context("t-user"):
        publisher.publish_user_created(User.new("Ann", "ann@example.com"))
    await publisher.drain()

    routing_key, event = bus.published[0]
    assert routing_key == "user.created"
    assert event["trace_id"] == "t-user"


async def test_delivery_failure_is_logged(caplog):
    publisher = EventBusPublisher(RecordingBus(fail=InternalError("event publish timed out")))
    order = Order.new(UserId(1), 5)
    order.id = 17

    with caplog.at_level(logging.ERROR, logger="shopmesh.infrastructure.publishers"):
        publisher.publish_order_created(order)
        await publisher.drain()

    record = caplog.records[-1]
    assert "order.created" in record.getMessage()
    assert record.order_id == 17
