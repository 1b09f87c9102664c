"""gRPC Server Host - builds the grpc.aio server for a service process.

Invariants:
    - Every server installs TracingServerInterceptor (trace, deadline, error mapping)
    - mTLS (client certificate required) when grpc_mtls_enabled, plaintext otherwise
"""

import logging

import grpc

from shopmesh.config import Settings
from shopmesh.infrastructure.rpc import server_credentials
from shopmesh.rpc.interceptors import TracingServerInterceptor

logger = logging.getLogger(__name__)


def build_server(
    handlers: list[grpc.GenericRpcHandler], settings: Settings,
) -> grpc.aio.Server:
    server = grpc.aio.server(
        interceptors=[TracingServerInterceptor(settings.grpc_timeout_seconds)],
    )
    server.add_generic_rpc_handlers(tuple(handlers))
    address = f"[::]:{settings.grpc_port}"
    if settings.grpc_mtls_enabled:
        server.add_secure_port(address, server_credentials(
            settings.grpc_server_cert_file,
            settings.grpc_server_key_file,
            settings.tls_ca_file,
        ))
        logger.info("gRPC mTLS enabled")
    else:
        server.add_insecure_port(address)
    return server
