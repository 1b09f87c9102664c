"""Domain Types - identity types and closed enumerations.

Invariants:
    - UserId, OrderId wrap store-assigned integers; 0 means "not yet persisted"
    - Persisted ids lie in [1, MAX_ID]
    - OrderStatus is the only source of valid order states

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to the database without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", int)
OrderId = NewType("OrderId", int)

# ids are stored in 32-bit signed INTEGER columns
MAX_ID = 2**31 - 1


# ─── Enums ───────────────────────────────────────────────────────

class OrderStatus(str, Enum):
    """Order lifecycle states - maps to DB `status` column."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class ServiceName(str, Enum):
    """The three deployable processes."""
    GATEWAY = "gateway"
    USERS = "users"
    ORDERS = "orders"
