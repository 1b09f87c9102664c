"""gRPC User Client - the orders service's view of the users service.

Invariants:
    - get_user raises NotFoundError when the users service reports NOT_FOUND
    - Every other failure (deadline, unavailable, remote INTERNAL, bad reply)
      is INTERNAL "failed to get user" wrapping the transport error
"""

from shopmesh.core.domain_types import UserId
from shopmesh.core.errors import ErrorKind, InternalError, NotFoundError, is_kind
from shopmesh.core.repository_protocols import UserInfo
from shopmesh.infrastructure.rpc import GET_USER, RpcClient


class GrpcUserClient:

    def __init__(self, rpc: RpcClient):
        self._rpc = rpc

    async def get_user(self, user_id: UserId) -> UserInfo:
        try:
            reply = await self._rpc.call(GET_USER, {"id": user_id})
            return UserInfo(
                id=UserId(int(reply["id"])),
                name=reply["name"],
                email=reply["email"],
            )
        except Exception as e:
            if is_kind(e, ErrorKind.NOT_FOUND):
                raise NotFoundError("user", user_id) from e
            raise InternalError("failed to get user", cause=e) from e

    async def close(self) -> None:
        await self._rpc.close()
