"""gRPC Server Side - service handlers and the unary server interceptor."""
