"""Gateway Routes - public REST forwarded to the users and orders RPC services.

Invariants:
    - Request bodies are validated here before any RPC is made
    - The bound trace id travels as x-trace-id metadata (RpcClient)
    - Remote failures arrive as AppError and render through the global handlers
"""

from fastapi import APIRouter, Depends, Request, status

from shopmesh.api.deps import (
    get_orders_gateway, get_users_gateway, parse_id, trace_id_of,
)
from shopmesh.infrastructure.service_clients import OrdersGateway, UsersGateway
from shopmesh.schemas.envelope import DataResponse
from shopmesh.schemas.order import CreateOrderRequest, OrderResponse
from shopmesh.schemas.user import CreateUserRequest, UserResponse

router = APIRouter(prefix="/api/v1", tags=["gateway"])


@router.post(
    "/users", response_model=DataResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    body: CreateUserRequest,
    request: Request,
    users: UsersGateway = Depends(get_users_gateway),
):
    data = await users.create_user(body.name, body.email)
    return DataResponse(data=UserResponse(**data), trace_id=trace_id_of(request))


@router.get("/users/{user_id}", response_model=DataResponse[UserResponse])
async def get_user(
    user_id: str,
    request: Request,
    users: UsersGateway = Depends(get_users_gateway),
):
    data = await users.get_user(parse_id(user_id, "invalid user id"))
    return DataResponse(data=UserResponse(**data), trace_id=trace_id_of(request))


@router.post(
    "/orders", response_model=DataResponse[OrderResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_order(
    body: CreateOrderRequest,
    request: Request,
    orders: OrdersGateway = Depends(get_orders_gateway),
):
    data = await orders.create_order(body.user_id, body.total)
    return DataResponse(data=OrderResponse(**data), trace_id=trace_id_of(request))


@router.get("/orders/{order_id}", response_model=DataResponse[OrderResponse])
async def get_order(
    order_id: str,
    request: Request,
    orders: OrdersGateway = Depends(get_orders_gateway),
):
    data = await orders.get_order(parse_id(order_id, "invalid order id"))
    return DataResponse(data=OrderResponse(**data), trace_id=trace_id_of(request))
