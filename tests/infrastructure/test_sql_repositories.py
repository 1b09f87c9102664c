"""SQL Repositories and DatabaseSessionManager against in-memory SQLite.

Tests cover:
    - Order create/get round-trip assigns ids and keeps aware timestamps
    - get_by_user_id returns [] when empty; update persists transitions
    - Unique email violation -> CONFLICT; bad SQL -> INTERNAL; slow session -> INTERNAL
    - Ids beyond the INTEGER column range read as missing; driver overflow -> INTERNAL
"""

import asyncio

import pytest
from sqlalchemy import text

from shopmesh.core.domain_types import MAX_ID, OrderId, OrderStatus, UserId
from shopmesh.core.errors import AppError, ErrorKind
from shopmesh.core.order import Order
from shopmesh.core.user import User
from shopmesh.infrastructure.order_repository import SqlOrderRepository
from shopmesh.infrastructure.user_repository import SqlUserRepository


@pytest.fixture
def orders(db_manager):
    return SqlOrderRepository(db_manager)


@pytest.fixture
def users(db_manager):
    return SqlUserRepository(db_manager)


async def test_order_round_trip(orders):
    order = Order.new(UserId(4), 250.5)
    await orders.create(order)

    assert order.id > 0
    fetched = await orders.get_by_id(order.id)
    assert fetched.id == order.id
    assert fetched.user_id == 4
    assert fetched.total == 250.5
    assert fetched.status == OrderStatus.PENDING
    assert fetched.created_at.tzinfo is not None


async def test_order_ids_are_distinct(orders):
    first, second = Order.new(UserId(1), 1), Order.new(UserId(1), 2)
    await orders.create(first)
    await orders.create(second)
    assert first.id != second.id


async def test_missing_order_is_not_found(orders):
    with pytest.raises(AppError) as exc:
        await orders.get_by_id(OrderId(123))
    assert exc.value.kind == ErrorKind.NOT_FOUND


async def test_get_by_user_id(orders):
    assert await orders.get_by_user_id(UserId(9)) == []
    for total in (1, 2):
        await orders.create(Order.new(UserId(9), total))
    await orders.create(Order.new(UserId(8), 3))

    found = await orders.get_by_user_id(UserId(9))
    assert [o.total for o in found] == [1, 2]


async def test_update_persists_transition(orders):
    order = Order.new(UserId(1), 10)
    await orders.create(order)
    order.cancel()
    await orders.update(order)

    assert (await orders.get_by_id(order.id)).status == OrderStatus.CANCELLED


async def test_update_missing_order_is_not_found(orders):
    ghost = Order.new(UserId(1), 10)
    ghost.id = OrderId(999)
    with pytest.raises(AppError) as exc:
        await orders.update(ghost)
    assert exc.value.kind == ErrorKind.NOT_FOUND


async def test_user_round_trip_and_email_lookup(users):
    user = User.new("Ann", "ann@example.com")
    await users.create(user)

    assert (await users.get_by_id(user.id)).email == "ann@example.com"
    assert (await users.get_by_email("ann@example.com")).id == user.id
    with pytest.raises(AppError) as exc:
        await users.get_by_email("nobody@example.com")
    assert exc.value.kind == ErrorKind.NOT_FOUND


async def test_duplicate_email_is_conflict(users):
    await users.create(User.new("Ann", "ann@example.com"))
    with pytest.raises(AppError) as exc:
        await users.create(User.new("Other", "ann@example.com"))
    assert exc.value.kind == ErrorKind.CONFLICT


async def test_bad_sql_is_internal(db_manager):
    with pytest.raises(AppError) as exc:
        async with db_manager.session() as session:
            await session.execute(text("SELECT * FROM no_such_table"))
    assert exc.value.kind == ErrorKind.INTERNAL
    assert exc.value.message == "database connection or operational error"


async def test_session_timeout_is_internal(db_manager):
    db_manager.timeout_seconds = 0.01
    with pytest.raises(AppError) as exc:
        async with db_manager.session():
            await asyncio.sleep(1)
    assert exc.value.message == "database operation timed out"


async def test_health_check(db_manager):
    assert await db_manager.health_check() is True


async def test_ids_beyond_column_range_are_not_found(orders, users):
    for order_id in (MAX_ID + 1, 10**20):
        with pytest.raises(AppError) as exc:
            await orders.get_by_id(OrderId(order_id))
        assert exc.value.kind == ErrorKind.NOT_FOUND
    assert await orders.get_by_user_id(UserId(10**20)) == []
    with pytest.raises(AppError) as exc:
        await users.get_by_id(UserId(10**20))
    assert exc.value.kind == ErrorKind.NOT_FOUND


async def test_driver_overflow_on_insert_is_internal(orders):
    with pytest.raises(AppError) as exc:
        await orders.create(Order.new(UserId(10**20), 5))
    assert exc.value.kind == ErrorKind.INTERNAL
    assert exc.value.message == "database operation failed"


async def test_unclassified_session_error_is_internal(db_manager):
    with pytest.raises(AppError) as exc:
        async with db_manager.session():
            raise OverflowError("int too large")
    assert exc.value.kind == ErrorKind.INTERNAL
    assert isinstance(exc.value.__cause__, OverflowError)


async def test_app_errors_pass_through_session(db_manager):
    from shopmesh.core.errors import NotFoundError

    with pytest.raises(NotFoundError):
        async with db_manager.session():
            raise NotFoundError("order", 1)
