"""SQL User Repository - UserRepository backed by SQLAlchemy.

Invariants:
    - get_by_id() / get_by_email() raise NotFoundError on a miss
    - A duplicate email on create() surfaces as CONFLICT (unique constraint)
"""

from datetime import datetime, timezone

from sqlalchemy import select

from shopmesh.core.domain_types import MAX_ID, UserId
from shopmesh.core.errors import NotFoundError
from shopmesh.core.user import User
from shopmesh.infrastructure.database import DatabaseSessionManager
from shopmesh.models.user import UserModel


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _to_domain(model: UserModel) -> User:
    return User(
        id=UserId(model.id),
        name=model.name,
        email=model.email,
        created_at=_aware(model.created_at),
        updated_at=_aware(model.updated_at),
    )


class SqlUserRepository:

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def create(self, user: User) -> None:
        model = UserModel(
            name=user.name,
            email=user.email,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
        async with self._db.session() as session:
            session.add(model)
            await session.commit()
            await session.refresh(model)
        user.id = UserId(model.id)
        user.created_at = _aware(model.created_at)
        user.updated_at = _aware(model.updated_at)

    async def get_by_id(self, user_id: UserId) -> User:
        if not 0 < user_id <= MAX_ID:
            raise NotFoundError("user", user_id)
        async with self._db.session() as session:
            model = await session.get(UserModel, user_id)
        if model is None:
            raise NotFoundError("user", user_id)
        return _to_domain(model)

    async def get_by_email(self, email: str) -> User:
        async with self._db.session() as session:
            result = await session.execute(
                select(UserModel).where(UserModel.email == email),
            )
            model = result.scalar_one_or_none()
        if model is None:
            raise NotFoundError("user", email)
        return _to_domain(model)
