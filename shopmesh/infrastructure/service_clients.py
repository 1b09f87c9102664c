"""Gateway Service Clients - REST-facing wrappers over the users and orders RPC services.

Invariants:
    - Replies are returned as plain dicts in the public response shape
    - RPC failures surface as AppError with the remote kind preserved
      (INVALID_ARGUMENT -> 400, NOT_FOUND -> 404, ...), unmapped codes -> INTERNAL
"""

from shopmesh.infrastructure.rpc import (
    CREATE_ORDER, CREATE_USER, GET_ORDER, GET_USER, RpcClient,
)


class UsersGateway:

    def __init__(self, rpc: RpcClient):
        self._rpc = rpc

    async def create_user(self, name: str, email: str) -> dict:
        return await self._rpc.call(CREATE_USER, {"name": name, "email": email})

    async def get_user(self, user_id: int) -> dict:
        return await self._rpc.call(GET_USER, {"id": user_id})


class OrdersGateway:

    def __init__(self, rpc: RpcClient):
        self._rpc = rpc

    async def create_order(self, user_id: int, total: float) -> dict:
        return await self._rpc.call(CREATE_ORDER, {"user_id": user_id, "total": total})

    async def get_order(self, order_id: int) -> dict:
        return await self._rpc.call(GET_ORDER, {"id": order_id})
