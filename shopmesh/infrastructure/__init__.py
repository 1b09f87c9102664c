"""Infrastructure Layer - adapters behind the core's boundary protocols.

Invariants:
    - Adapters implement core/repository_protocols.py; core never imports from here
    - Every external call is bounded by a timeout and mapped into the error taxonomy
"""
