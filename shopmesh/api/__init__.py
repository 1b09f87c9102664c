"""API Layer - FastAPI routes, middleware and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Every response is an envelope carrying trace_id
"""
