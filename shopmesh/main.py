"""Shopmesh - FastAPI application factories for the gateway, users and orders processes.

Invariants:
    - Routes registered explicitly per process (no auto-discovery)
    - Global error handlers map AppError -> taxonomy envelope with trace_id
    - CORS configured from settings (not hardcoded)
    - External resources (database, gRPC server/channels, broker) are opened in the
      lifespan, registered on an AsyncExitStack as each opens, and closed in
      reverse order on shutdown or when a later startup step fails
    - The orders service starts degraded (no user check / no events) when the users
      service or the broker is unreachable at startup, and logs a warning

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Factories over a module-level app: one codebase serves three roles, and tests
      build apps with collaborators injected on app.state without running the lifespan
    - users and orders serve HTTP and gRPC from the same event loop
"""

import logging
from contextlib import AsyncExitStack, asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shopmesh.api.error_handlers import register_error_handlers
from shopmesh.api.middleware import RequestContextMiddleware
from shopmesh.api.routes import gateway, health, orders, users
from shopmesh.config import Settings, get_settings
from shopmesh.core.domain_types import ServiceName
from shopmesh.core.events import (
    EXCHANGE_ORDERS, EXCHANGE_USERS, ROUTING_KEY_USER_CREATED,
)
from shopmesh.infrastructure.database import DatabaseSessionManager
from shopmesh.infrastructure.event_bus import EventBus
from shopmesh.infrastructure.observability import setup_logging
from shopmesh.infrastructure.order_repository import SqlOrderRepository
from shopmesh.infrastructure.publishers import EventBusPublisher
from shopmesh.infrastructure.rpc import RpcClient, create_channel
from shopmesh.infrastructure.service_clients import OrdersGateway, UsersGateway
from shopmesh.infrastructure.user_client import GrpcUserClient
from shopmesh.infrastructure.user_repository import SqlUserRepository
from shopmesh.rpc.order_server import OrderRpcService
from shopmesh.rpc.server import build_server
from shopmesh.rpc.user_server import UserRpcService
from shopmesh.services.order_service import OrderService
from shopmesh.services.user_events import USER_CREATED_QUEUE, handle_user_created
from shopmesh.services.user_service import UserService

logger = logging.getLogger(__name__)

GRPC_SHUTDOWN_GRACE_SECONDS = 5.0


def _rpc_client(settings: Settings, target: str) -> RpcClient:
    channel = create_channel(
        target,
        mtls=settings.grpc_mtls_enabled,
        ca_file=settings.tls_ca_file,
        cert_file=settings.grpc_client_cert_file,
        key_file=settings.grpc_client_key_file,
    )
    return RpcClient(channel, timeout_seconds=settings.grpc_timeout_seconds)


def _database(settings: Settings, service: ServiceName) -> DatabaseSessionManager:
    return DatabaseSessionManager(
        settings.database_url_for(service),
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        timeout_seconds=settings.db_timeout_seconds,
    )


async def _connect_user_client(settings: Settings) -> GrpcUserClient | None:
    rpc = _rpc_client(settings, settings.users_grpc_addr)
    try:
        await rpc.wait_ready(settings.startup_connect_timeout_seconds)
    except TimeoutError:
        logger.warning(
            f"users service unreachable at {settings.users_grpc_addr}; "
            "orders will be created without user validation",
        )
        await rpc.close()
        return None
    return GrpcUserClient(rpc)


async def _connect_event_bus(settings: Settings, exchange: str) -> EventBus | None:
    if not settings.events_enabled:
        logger.info("event publishing disabled")
        return None
    bus = EventBus(
        settings.rabbitmq_url,
        exchange,
        publish_timeout_seconds=settings.publish_timeout_seconds,
        retry_delay_seconds=settings.consumer_retry_delay_seconds,
    )
    try:
        await bus.connect(settings.startup_connect_timeout_seconds)
    except Exception as e:
        logger.warning(
            f"RabbitMQ unavailable ({e}); running without events",
            extra={"exchange": exchange},
        )
        return None
    return bus


async def _shutdown_events(publisher: EventBusPublisher | None, bus: EventBus) -> None:
    if publisher is not None:
        await publisher.drain()
    await bus.close()


async def _start_grpc(stack: AsyncExitStack, handlers: list, settings: Settings) -> None:
    server = build_server(handlers, settings)
    await server.start()
    stack.push_async_callback(server.stop, GRPC_SHUTDOWN_GRACE_SECONDS)


@asynccontextmanager
async def orders_lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format, ServiceName.ORDERS.value)
    async with AsyncExitStack() as stack:
        db = _database(settings, ServiceName.ORDERS)
        stack.push_async_callback(db.dispose)

        user_client = await _connect_user_client(settings)
        if user_client is not None:
            stack.push_async_callback(user_client.close)

        bus = await _connect_event_bus(settings, EXCHANGE_ORDERS)
        publisher = None
        if bus is not None:
            publisher = EventBusPublisher(bus)
            stack.push_async_callback(_shutdown_events, publisher, bus)
            await bus.subscribe(
                USER_CREATED_QUEUE, EXCHANGE_USERS, [ROUTING_KEY_USER_CREATED],
                handle_user_created,
            )

        service = OrderService(SqlOrderRepository(db), publisher, user_client)
        app.state.db_manager = db
        app.state.order_service = service

        await _start_grpc(stack, [OrderRpcService(service).handler()], settings)
        logger.info(f"orders service started (gRPC :{settings.grpc_port})")
        yield
        logger.info("orders service shutting down")


@asynccontextmanager
async def users_lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format, ServiceName.USERS.value)
    async with AsyncExitStack() as stack:
        db = _database(settings, ServiceName.USERS)
        stack.push_async_callback(db.dispose)

        bus = await _connect_event_bus(settings, EXCHANGE_USERS)
        publisher = None
        if bus is not None:
            publisher = EventBusPublisher(bus)
            stack.push_async_callback(_shutdown_events, publisher, bus)

        service = UserService(SqlUserRepository(db), publisher)
        app.state.db_manager = db
        app.state.user_service = service

        await _start_grpc(stack, [UserRpcService(service).handler()], settings)
        logger.info(f"users service started (gRPC :{settings.grpc_port})")
        yield
        logger.info("users service shutting down")


@asynccontextmanager
async def gateway_lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format, ServiceName.GATEWAY.value)
    async with AsyncExitStack() as stack:
        users_rpc = _rpc_client(settings, settings.users_grpc_addr)
        stack.push_async_callback(users_rpc.close)
        orders_rpc = _rpc_client(settings, settings.orders_grpc_addr)
        stack.push_async_callback(orders_rpc.close)

        app.state.users_gateway = UsersGateway(users_rpc)
        app.state.orders_gateway = OrdersGateway(orders_rpc)
        logger.info("gateway started")
        yield
        logger.info("gateway shutting down")


def _build_app(
    service: ServiceName,
    settings: Settings,
    lifespan,
    routers: list[APIRouter],
) -> FastAPI:
    app = FastAPI(title=f"shopmesh {service.value}", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.service_name = service.value

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Trace-ID"],
    )
    # added last so it wraps CORS: preflights get a trace id too
    app.add_middleware(RequestContextMiddleware)

    register_error_handlers(app)
    app.include_router(health.router)
    for router in routers:
        app.include_router(router)
    return app


def create_orders_app(settings: Settings | None = None) -> FastAPI:
    return _build_app(
        ServiceName.ORDERS, settings or get_settings(), orders_lifespan, [orders.router],
    )


def create_users_app(settings: Settings | None = None) -> FastAPI:
    return _build_app(
        ServiceName.USERS, settings or get_settings(), users_lifespan, [users.router],
    )


def create_gateway_app(settings: Settings | None = None) -> FastAPI:
    return _build_app(
        ServiceName.GATEWAY, settings or get_settings(), gateway_lifespan, [gateway.router],
    )


_FACTORIES = {
    ServiceName.ORDERS: create_orders_app,
    ServiceName.USERS: create_users_app,
    ServiceName.GATEWAY: create_gateway_app,
}


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app for the role named by SERVICE_NAME."""
    settings = settings or get_settings()
    return _FACTORIES[settings.service_name](settings)
