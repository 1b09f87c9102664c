"""User Service - registration rules, conflicts and event hand-off."""

import pytest

from shopmesh.core.domain_types import UserId
from shopmesh.core.errors import AppError, ConflictError, ErrorKind, InternalError
from shopmesh.services.user_service import UserService


@pytest.fixture
def service(user_repo, publisher):
    return UserService(user_repo, publisher)


async def test_create_user_assigns_id_and_publishes(service, publisher):
    user = await service.create_user("  Ann Smith ", "ann@example.com")

    assert user.id == 1
    assert user.name == "Ann Smith"
    assert [u.email for u in publisher.users] == ["ann@example.com"]


async def test_duplicate_email_is_conflict(service, user_repo):
    await service.create_user("Ann", "ann@example.com")

    with pytest.raises(AppError) as exc:
        await service.create_user("Other", "ann@example.com")

    assert exc.value.kind == ErrorKind.CONFLICT
    assert exc.value.http_status == 409
    assert exc.value.message == "email already exists"
    assert user_repo.create_calls == 1


async def test_invalid_input_never_reaches_repository(service, user_repo):
    with pytest.raises(AppError) as exc:
        await service.create_user("A", "ann@example.com")
    assert exc.value.kind == ErrorKind.VALIDATION
    assert user_repo.create_calls == 0


async def test_email_lookup_failure_is_internal(service, user_repo):
    user_repo.fail_lookup = InternalError("database connection or operational error")

    with pytest.raises(AppError) as exc:
        await service.create_user("Ann", "ann@example.com")

    assert exc.value.kind == ErrorKind.INTERNAL
    assert exc.value.message == "failed to check email existence"


async def test_unique_race_on_create_is_conflict(service, user_repo):
    user_repo.fail_create = ConflictError("integrity constraint violated")

    with pytest.raises(AppError) as exc:
        await service.create_user("Ann", "ann@example.com")

    assert exc.value.kind == ErrorKind.CONFLICT
    assert exc.value.message == "email already exists"


async def test_create_failure_is_internal(service, user_repo, publisher):
    user_repo.fail_create = RuntimeError("disk full")

    with pytest.raises(AppError) as exc:
        await service.create_user("Ann", "ann@example.com")

    assert exc.value.message == "failed to create user"
    assert publisher.users == []


async def test_get_user_not_found(service):
    with pytest.raises(AppError) as exc:
        await service.get_user(UserId(5))
    assert exc.value.kind == ErrorKind.NOT_FOUND
