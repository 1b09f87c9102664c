"""Order RPC Service - orders.v1.OrderService over the JSON codec."""

import grpc
from pydantic import ValidationError as SchemaValidationError

from shopmesh.core.domain_types import OrderId, UserId
from shopmesh.core.errors import ValidationError
from shopmesh.infrastructure.rpc import ORDER_SERVICE, decode, encode
from shopmesh.schemas.envelope import field_errors
from shopmesh.schemas.order import CreateOrderRequest, GetOrderRequest, OrderResponse
from shopmesh.services.order_service import OrderService


class OrderRpcService:

    def __init__(self, service: OrderService):
        self._service = service

    async def create_order(self, request: dict, context: grpc.aio.ServicerContext) -> dict:
        try:
            body = CreateOrderRequest.model_validate(request)
        except SchemaValidationError as e:
            raise ValidationError(
                "invalid request body", details={"errors": field_errors(e.errors())},
            ) from e
        order = await self._service.create_order(UserId(body.user_id), body.total)
        return OrderResponse.from_entity(order).model_dump()

    async def get_order(self, request: dict, context: grpc.aio.ServicerContext) -> dict:
        try:
            body = GetOrderRequest.model_validate(request)
        except SchemaValidationError as e:
            raise ValidationError("invalid order id") from e
        order = await self._service.get_order(OrderId(body.id))
        return OrderResponse.from_entity(order).model_dump()

    def handler(self) -> grpc.GenericRpcHandler:
        return grpc.method_handlers_generic_handler(ORDER_SERVICE, {
            "CreateOrder": grpc.unary_unary_rpc_method_handler(
                self.create_order, request_deserializer=decode, response_serializer=encode,
            ),
            "GetOrder": grpc.unary_unary_rpc_method_handler(
                self.get_order, request_deserializer=decode, response_serializer=encode,
            ),
        })
