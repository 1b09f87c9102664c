"""Core Layer - entities, error taxonomy, trace context and boundary protocols.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, rpc/ or db/
    - No IO: validation and transitions are pure functions of their inputs

Design Decisions:
    - Functional core separated from imperative shell
"""
