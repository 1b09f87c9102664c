"""Domain Events - versioned envelopes published after successful writes.

Invariants:
    - Every envelope: version, event_type, timestamp, trace_id, payload
    - event_type equals the routing key it is published under
    - Payload holds only public entity fields (same shape as API responses)
"""

from datetime import datetime, timezone

from shopmesh.core.order import Order
from shopmesh.core.user import User

EVENT_VERSION = "1.0"

EXCHANGE_USERS = "users.events"
EXCHANGE_ORDERS = "orders.events"

ROUTING_KEY_USER_CREATED = "user.created"
ROUTING_KEY_ORDER_CREATED = "order.created"


def _envelope(event_type: str, payload: dict, trace_id: str) -> dict:
    return {
        "version": EVENT_VERSION,
        "event_type": event_type,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "trace_id": trace_id,
        "payload": payload,
    }


def order_created_event(order: Order, trace_id: str) -> dict:
    return _envelope(ROUTING_KEY_ORDER_CREATED, order.to_public(), trace_id)


def user_created_event(user: User, trace_id: str) -> dict:
    return _envelope(ROUTING_KEY_USER_CREATED, user.to_public(), trace_id)
