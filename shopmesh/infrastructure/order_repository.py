"""SQL Order Repository - OrderRepository backed by SQLAlchemy.

Invariants:
    - create() assigns id and timestamps on the passed Order
    - get_by_id() raises NotFoundError("order", id) on a miss
    - get_by_user_id() returns [] when nothing matches (never NotFoundError)
    - Ids outside [1, MAX_ID] cannot be stored, so lookups answer them without a query
    - Storage failures surface as INTERNAL via DatabaseSessionManager
"""

from datetime import datetime, timezone

from sqlalchemy import select

from shopmesh.core.domain_types import MAX_ID, OrderId, OrderStatus, UserId
from shopmesh.core.errors import NotFoundError
from shopmesh.core.order import Order
from shopmesh.infrastructure.database import DatabaseSessionManager
from shopmesh.models.order import OrderModel


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo; stored values are always UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _to_domain(model: OrderModel) -> Order:
    return Order(
        id=OrderId(model.id),
        user_id=UserId(model.user_id),
        total=model.total,
        status=OrderStatus(model.status),
        created_at=_aware(model.created_at),
        updated_at=_aware(model.updated_at),
    )


class SqlOrderRepository:

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def create(self, order: Order) -> None:
        model = OrderModel(
            user_id=order.user_id,
            total=order.total,
            status=order.status.value,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
        async with self._db.session() as session:
            session.add(model)
            await session.commit()
            await session.refresh(model)
        order.id = OrderId(model.id)
        order.created_at = _aware(model.created_at)
        order.updated_at = _aware(model.updated_at)

    async def get_by_id(self, order_id: OrderId) -> Order:
        if not 0 < order_id <= MAX_ID:
            raise NotFoundError("order", order_id)
        async with self._db.session() as session:
            model = await session.get(OrderModel, order_id)
        if model is None:
            raise NotFoundError("order", order_id)
        return _to_domain(model)

    async def get_by_user_id(self, user_id: UserId) -> list[Order]:
        if not 0 < user_id <= MAX_ID:
            return []
        async with self._db.session() as session:
            result = await session.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.id),
            )
            models = result.scalars().all()
        return [_to_domain(m) for m in models]

    async def update(self, order: Order) -> None:
        if not 0 < order.id <= MAX_ID:
            raise NotFoundError("order", order.id)
        async with self._db.session() as session:
            model = await session.get(OrderModel, order.id)
            if model is None:
                raise NotFoundError("order", order.id)
            model.status = order.status.value
            model.total = order.total
            model.updated_at = order.updated_at
            await session.commit()
