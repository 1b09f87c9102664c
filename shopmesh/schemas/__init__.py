"""Pydantic Schemas - request/response validation for HTTP and RPC boundaries.

Invariants:
    - Schemas validate at system boundary (user input, RPC messages, consumed events)
    - Business rules stay in core/ entities; schemas only check shape and sign

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
    - The same request schemas validate HTTP bodies and JSON-encoded RPC messages
"""
