"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell - dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - Repositories raise AppError only: NotFoundError for misses, InternalError
      for storage failures, ConflictError for uniqueness violations

Design Decisions:
    - Protocol over ABC: structural subtyping, in-memory doubles need no base class
    - Publishers are synchronous "enqueue and forget": the caller never awaits
      delivery, the implementation owns scheduling and failure logging
"""

from dataclasses import dataclass
from typing import Protocol

from shopmesh.core.domain_types import OrderId, UserId
from shopmesh.core.order import Order
from shopmesh.core.user import User


@dataclass(frozen=True)
class UserInfo:
    """User as seen from the orders service (remote lookup result)."""
    id: UserId
    name: str
    email: str


class OrderRepository(Protocol):
    """Contract for order persistence - implemented by shell."""
    async def create(self, order: Order) -> None: ...
    async def get_by_id(self, order_id: OrderId) -> Order: ...
    async def get_by_user_id(self, user_id: UserId) -> list[Order]: ...
    async def update(self, order: Order) -> None: ...


class UserRepository(Protocol):
    """Contract for user persistence - implemented by shell."""
    async def create(self, user: User) -> None: ...
    async def get_by_id(self, user_id: UserId) -> User: ...
    async def get_by_email(self, email: str) -> User: ...


class UserClient(Protocol):
    """Remote user lookup. Raises NotFoundError or InternalError, nothing else."""
    async def get_user(self, user_id: UserId) -> UserInfo: ...


class OrderEventPublisher(Protocol):
    def publish_order_created(self, order: Order) -> None: ...


class UserEventPublisher(Protocol):
    def publish_user_created(self, user: User) -> None: ...
