"""Order Routes - HTTP surface of the orders service.

Invariants:
    - Success bodies are {"data": ..., "trace_id": ...}
    - Path ids that are not positive integers -> VALIDATION "invalid order id" / "invalid user id"
    - Errors are raised as AppError and rendered by the global handlers
"""

from fastapi import APIRouter, Depends, Request, status

from shopmesh.api.deps import get_order_service, parse_id, trace_id_of
from shopmesh.core.domain_types import OrderId, UserId
from shopmesh.schemas.envelope import DataResponse
from shopmesh.schemas.order import CreateOrderRequest, OrderListResponse, OrderResponse
from shopmesh.services.order_service import OrderService

router = APIRouter(prefix="/api/v1", tags=["orders"])


@router.post(
    "/orders", response_model=DataResponse[OrderResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_order(
    body: CreateOrderRequest,
    request: Request,
    service: OrderService = Depends(get_order_service),
):
    order = await service.create_order(UserId(body.user_id), body.total)
    return DataResponse(data=OrderResponse.from_entity(order), trace_id=trace_id_of(request))


@router.get("/orders/{order_id}", response_model=DataResponse[OrderResponse])
async def get_order(
    order_id: str,
    request: Request,
    service: OrderService = Depends(get_order_service),
):
    order = await service.get_order(OrderId(parse_id(order_id, "invalid order id")))
    return DataResponse(data=OrderResponse.from_entity(order), trace_id=trace_id_of(request))


@router.get("/users/{user_id}/orders", response_model=DataResponse[OrderListResponse])
async def list_user_orders(
    user_id: str,
    request: Request,
    service: OrderService = Depends(get_order_service),
):
    orders = await service.list_user_orders(UserId(parse_id(user_id, "invalid user id")))
    data = OrderListResponse(orders=[OrderResponse.from_entity(o) for o in orders])
    return DataResponse(data=data, trace_id=trace_id_of(request))


@router.post("/orders/{order_id}/confirm", response_model=DataResponse[OrderResponse])
async def confirm_order(
    order_id: str,
    request: Request,
    service: OrderService = Depends(get_order_service),
):
    order = await service.confirm_order(OrderId(parse_id(order_id, "invalid order id")))
    return DataResponse(data=OrderResponse.from_entity(order), trace_id=trace_id_of(request))


@router.post("/orders/{order_id}/cancel", response_model=DataResponse[OrderResponse])
async def cancel_order(
    order_id: str,
    request: Request,
    service: OrderService = Depends(get_order_service),
):
    order = await service.cancel_order(OrderId(parse_id(order_id, "invalid order id")))
    return DataResponse(data=OrderResponse.from_entity(order), trace_id=trace_id_of(request))
