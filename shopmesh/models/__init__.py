"""ORM Models - SQLAlchemy declarative models for persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Each service owns its own database; orders never join users

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete for migrations and tests
"""

from shopmesh.models.order import OrderModel  # noqa: F401
from shopmesh.models.user import UserModel  # noqa: F401
