"""Order Schemas - wire shapes for order requests and responses.

Invariants:
    - CreateOrderRequest: 0 < user_id <= MAX_ID, total > 0 (total ceiling enforced by the entity)
    - OrderResponse mirrors Order.to_public()
"""

from pydantic import BaseModel, Field

from shopmesh.core.domain_types import MAX_ID
from shopmesh.core.order import Order


class CreateOrderRequest(BaseModel):
    user_id: int = Field(gt=0, le=MAX_ID, examples=[1])
    total: float = Field(gt=0, examples=[99.99])


class GetOrderRequest(BaseModel):
    id: int = Field(gt=0, le=MAX_ID)


class OrderResponse(BaseModel):
    id: int
    user_id: int
    total: float
    status: str
    created_at: str

    @classmethod
    def from_entity(cls, order: Order) -> "OrderResponse":
        return cls(**order.to_public())


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
