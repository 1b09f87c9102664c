"""User Service - user registration and lookup.

Invariants:
    - Entity validation runs before any repository call
    - An existing email is CONFLICT "email already exists"
    - Email lookup failures other than NOT_FOUND abort with INTERNAL
    - user.created is handed off only after create() returns; hand-off failures are logged
"""

import logging

from shopmesh.core.domain_types import UserId
from shopmesh.core.errors import ConflictError, ErrorKind, InternalError, is_kind
from shopmesh.core.repository_protocols import UserEventPublisher, UserRepository
from shopmesh.core.user import User

logger = logging.getLogger(__name__)


class UserService:

    def __init__(
        self,
        repo: UserRepository,
        publisher: UserEventPublisher | None = None,
    ):
        self._repo = repo
        self._publisher = publisher

    async def create_user(self, name: str, email: str) -> User:
        user = User.new(name, email)

        try:
            await self._repo.get_by_email(user.email)
        except Exception as e:
            if not is_kind(e, ErrorKind.NOT_FOUND):
                raise InternalError("failed to check email existence", cause=e) from e
        else:
            raise ConflictError("email already exists")

        try:
            await self._repo.create(user)
        except Exception as e:
            if is_kind(e, ErrorKind.CONFLICT):
                # lost a race with a concurrent registration
                raise ConflictError("email already exists") from e
            raise InternalError("failed to create user", cause=e) from e

        if self._publisher is not None:
            try:
                self._publisher.publish_user_created(user)
            except Exception as e:
                logger.error(
                    f"failed to publish user created event: {e}",
                    extra={"user_id": user.id},
                    exc_info=True,
                )

        logger.info(f"user created: {user.id}", extra={"user_id": user.id})
        return user

    async def get_user(self, user_id: UserId) -> User:
        return await self._repo.get_by_id(user_id)
