"""Order Entity - validated value owned by the orchestrator until persisted.

Invariants:
    - validate() checks, in order: user_id set, total > 0, total <= 1,000,000
    - Order.new() always starts in PENDING with fresh UTC timestamps
    - Only PENDING -> CONFIRMED and PENDING -> CANCELLED are allowed; each bumps updated_at
    - id stays 0 until the repository assigns one
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from shopmesh.core.domain_types import OrderId, OrderStatus, UserId
from shopmesh.core.errors import ValidationError

MAX_ORDER_TOTAL = 1_000_000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Order:
    user_id: UserId
    total: float
    status: OrderStatus = OrderStatus.PENDING
    id: OrderId = OrderId(0)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def new(cls, user_id: UserId, total: float) -> "Order":
        """Build a pending order, raising ValidationError if it is invalid."""
        now = _utcnow()
        order = cls(
            user_id=user_id, total=total, status=OrderStatus.PENDING,
            created_at=now, updated_at=now,
        )
        order.validate()
        return order

    def validate(self) -> None:
        if not self.user_id:
            raise ValidationError("user_id is required")
        # `not >` also rejects NaN
        if not self.total > 0:
            raise ValidationError("total must be greater than 0")
        if self.total > MAX_ORDER_TOTAL:
            raise ValidationError("total cannot exceed 1,000,000")

    def confirm(self) -> None:
        self._transition(OrderStatus.CONFIRMED)

    def cancel(self) -> None:
        self._transition(OrderStatus.CANCELLED)

    def _transition(self, target: OrderStatus) -> None:
        if self.status != OrderStatus.PENDING:
            raise ValidationError(
                f"order cannot move from '{self.status.value}' to '{target.value}'",
                details={"order_id": self.id, "status": self.status.value},
            )
        self.status = target
        self.updated_at = _utcnow()

    def to_public(self) -> dict:
        """Public fields shared by HTTP responses, RPC replies and events."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "total": self.total,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }
