"""User Routes - HTTP surface of the users service."""

from fastapi import APIRouter, Depends, Request, status

from shopmesh.api.deps import get_user_service, parse_id, trace_id_of
from shopmesh.core.domain_types import UserId
from shopmesh.schemas.envelope import DataResponse
from shopmesh.schemas.user import CreateUserRequest, UserResponse
from shopmesh.services.user_service import UserService

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post(
    "", response_model=DataResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    body: CreateUserRequest,
    request: Request,
    service: UserService = Depends(get_user_service),
):
    user = await service.create_user(body.name, body.email)
    return DataResponse(data=UserResponse.from_entity(user), trace_id=trace_id_of(request))


@router.get("/{user_id}", response_model=DataResponse[UserResponse])
async def get_user(
    user_id: str,
    request: Request,
    service: UserService = Depends(get_user_service),
):
    user = await service.get_user(UserId(parse_id(user_id, "invalid user id")))
    return DataResponse(data=UserResponse.from_entity(user), trace_id=trace_id_of(request))
