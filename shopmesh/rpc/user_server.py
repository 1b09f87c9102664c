"""User RPC Service - users.v1.UserService over the JSON codec."""

import grpc
from pydantic import ValidationError as SchemaValidationError

from shopmesh.core.domain_types import UserId
from shopmesh.core.errors import ValidationError
from shopmesh.infrastructure.rpc import USER_SERVICE, decode, encode
from shopmesh.schemas.envelope import field_errors
from shopmesh.schemas.user import CreateUserRequest, GetUserRequest, UserResponse
from shopmesh.services.user_service import UserService


class UserRpcService:

    def __init__(self, service: UserService):
        self._service = service

    async def create_user(self, request: dict, context: grpc.aio.ServicerContext) -> dict:
        try:
            body = CreateUserRequest.model_validate(request)
        except SchemaValidationError as e:
            raise ValidationError(
                "invalid request body", details={"errors": field_errors(e.errors())},
            ) from e
        user = await self._service.create_user(body.name, body.email)
        return UserResponse.from_entity(user).model_dump()

    async def get_user(self, request: dict, context: grpc.aio.ServicerContext) -> dict:
        try:
            body = GetUserRequest.model_validate(request)
        except SchemaValidationError as e:
            raise ValidationError("invalid user id") from e
        user = await self._service.get_user(UserId(body.id))
        return UserResponse.from_entity(user).model_dump()

    def handler(self) -> grpc.GenericRpcHandler:
        return grpc.method_handlers_generic_handler(USER_SERVICE, {
            "CreateUser": grpc.unary_unary_rpc_method_handler(
                self.create_user, request_deserializer=decode, response_serializer=encode,
            ),
            "GetUser": grpc.unary_unary_rpc_method_handler(
                self.get_user, request_deserializer=decode, response_serializer=encode,
            ),
        })
