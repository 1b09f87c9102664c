"""Order Service - cross-service order creation and order lookups.

Invariants:
    - create_order steps run in strict order: remote user check -> build/validate
      -> repository create -> event hand-off -> return
    - Remote NOT_FOUND becomes VALIDATION with details {"user_id": id} (HTTP 400, not 404)
    - Any other remote failure aborts with INTERNAL "failed to validate user"
    - Nothing is persisted unless the remote check (when configured) and validation pass
    - A failed create is INTERNAL "failed to create order"; step 1 is never compensated
    - Event hand-off failures are logged and swallowed; the order stays committed
    - get_order passes repository errors through unchanged

Design Decisions:
    - user_client and publisher are optional: the service runs degraded when the
      users service or the broker is unreachable at startup
    - No locks: the service is stateless, concurrency safety belongs to the repository
"""

import logging

from shopmesh.core.domain_types import OrderId, UserId
from shopmesh.core.errors import (
    ErrorKind, InternalError, ValidationError, is_kind,
)
from shopmesh.core.order import Order
from shopmesh.core.repository_protocols import (
    OrderEventPublisher, OrderRepository, UserClient,
)

logger = logging.getLogger(__name__)


class OrderService:
    """Order use cases. Depends only on the boundary protocols."""

    def __init__(
        self,
        repo: OrderRepository,
        publisher: OrderEventPublisher | None = None,
        user_client: UserClient | None = None,
    ):
        self._repo = repo
        self._publisher = publisher
        self._user_client = user_client

    async def create_order(self, user_id: UserId, total: float) -> Order:
        """Validate the user remotely, then persist and announce a pending order."""
        await self._ensure_user_exists(user_id)

        order = Order.new(user_id, total)

        try:
            await self._repo.create(order)
        except Exception as e:
            raise InternalError("failed to create order", cause=e) from e

        self._announce(order)

        logger.info(
            f"order created: {order.id}",
            extra={"order_id": order.id, "user_id": order.user_id, "total": order.total},
        )
        return order

    async def get_order(self, order_id: OrderId) -> Order:
        return await self._repo.get_by_id(order_id)

    async def list_user_orders(self, user_id: UserId) -> list[Order]:
        return await self._repo.get_by_user_id(user_id)

    async def confirm_order(self, order_id: OrderId) -> Order:
        order = await self._repo.get_by_id(order_id)
        order.confirm()
        await self._repo.update(order)
        logger.info(f"order confirmed: {order.id}", extra={"order_id": order.id})
        return order

    async def cancel_order(self, order_id: OrderId) -> Order:
        order = await self._repo.get_by_id(order_id)
        order.cancel()
        await self._repo.update(order)
        logger.info(f"order cancelled: {order.id}", extra={"order_id": order.id})
        return order

    async def _ensure_user_exists(self, user_id: UserId) -> None:
        if self._user_client is None:
            return
        try:
            await self._user_client.get_user(user_id)
        except Exception as e:
            if is_kind(e, ErrorKind.NOT_FOUND):
                raise ValidationError(
                    "user not found", details={"user_id": user_id},
                ) from e
            raise InternalError("failed to validate user", cause=e) from e

    def _announce(self, order: Order) -> None:
        if self._publisher is None:
            return
        try:
            self._publisher.publish_order_created(order)
        except Exception as e:
            logger.error(
                f"failed to publish order created event: {e}",
                extra={"order_id": order.id},
                exc_info=True,
            )
