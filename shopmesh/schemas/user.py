"""User Schemas - wire shapes for user requests and responses."""

from pydantic import BaseModel, Field

from shopmesh.core.domain_types import MAX_ID
from shopmesh.core.user import User


class CreateUserRequest(BaseModel):
    """Shape only; name/email rules live in the User entity."""
    name: str = Field(examples=["John Doe"])
    email: str = Field(examples=["john@example.com"])


class GetUserRequest(BaseModel):
    id: int = Field(gt=0, le=MAX_ID)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    created_at: str

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(**user.to_public())
