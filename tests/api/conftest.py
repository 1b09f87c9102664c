"""API fixtures - app factories with in-memory collaborators on app.state.

Design Decisions:
    - Lifespan is not run (ASGITransport): collaborators are injected directly,
      so no database, broker or gRPC peer is needed
    - raise_app_exceptions=False so the catch-all 500 handler can be asserted
"""

import pytest
from httpx import ASGITransport, AsyncClient

from shopmesh.config import Settings
from shopmesh.main import create_gateway_app, create_orders_app, create_users_app
from shopmesh.services.order_service import OrderService
from shopmesh.services.user_service import UserService


def _client(app) -> AsyncClient:
    return AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    )


@pytest.fixture
def orders_app(order_repo, publisher, user_client):
    app = create_orders_app(Settings())
    app.state.order_service = OrderService(order_repo, publisher, user_client)
    return app


@pytest.fixture
async def orders_client(orders_app):
    async with _client(orders_app) as c:
        yield c


@pytest.fixture
async def users_client(user_repo, publisher, db_manager):
    app = create_users_app(Settings())
    app.state.user_service = UserService(user_repo, publisher)
    app.state.db_manager = db_manager
    async with _client(app) as c:
        yield c


@pytest.fixture
def gateway_app():
    return create_gateway_app(Settings())


@pytest.fixture
async def gateway_client(gateway_app):
    async with _client(gateway_app) as c:
        yield c
