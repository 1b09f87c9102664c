"""User Event Consumer - reacts to user.created inside the orders service.

Invariants:
    - The body must parse as a UserCreatedEvent; otherwise the handler fails
      and the bus requeues the message after its retry delay
    - Runs inside the trace context bound from the message headers
"""

import logging

from pydantic import ValidationError as SchemaValidationError

from shopmesh.core.errors import ValidationError
from shopmesh.schemas.envelope import field_errors
from shopmesh.schemas.events import UserCreatedEvent

logger = logging.getLogger(__name__)

USER_CREATED_QUEUE = "orders.user-created"


async def handle_user_created(body: bytes) -> UserCreatedEvent:
    try:
        event = UserCreatedEvent.model_validate_json(body)
    except SchemaValidationError as e:
        raise ValidationError(
            "invalid user.created event", details={"errors": field_errors(e.errors())},
        ) from e
    logger.info(
        f"user registered: {event.payload.email}",
        extra={"user_id": event.payload.id, "routing_key": event.event_type},
    )
    return event
