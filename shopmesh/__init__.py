"""Shopmesh - gateway, users and orders services.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
