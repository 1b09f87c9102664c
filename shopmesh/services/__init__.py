"""Services Layer - order and user use cases plus event consumers.

Invariants:
    - Services depend only on core/ protocols; adapters are injected
    - Every failure leaving a service is an AppError
"""
