"""Route Dependencies - trace id, path id parsing and per-process collaborators from app.state."""

from fastapi import Request

from shopmesh.core.domain_types import MAX_ID
from shopmesh.core.errors import ValidationError
from shopmesh.core.trace import get_trace_id
from shopmesh.infrastructure.service_clients import OrdersGateway, UsersGateway
from shopmesh.services.order_service import OrderService
from shopmesh.services.user_service import UserService


def trace_id_of(request: Request) -> str:
    return getattr(request.state, "trace_id", None) or get_trace_id()


def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_users_gateway(request: Request) -> UsersGateway:
    return request.app.state.users_gateway


def get_orders_gateway(request: Request) -> OrdersGateway:
    return request.app.state.orders_gateway


def parse_id(raw: str, message: str) -> int:
    """Path ids must be integers in [1, MAX_ID]; anything else is VALIDATION."""
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(message, details={"id": raw}) from None
    if not 0 < value <= MAX_ID:
        raise ValidationError(message, details={"id": raw})
    return value
