"""User Entity - validated registry record.

Invariants:
    - validate() checks, in order: name present, 2 <= len(name) <= 100,
      email present, email matches EMAIL_PATTERN
    - User.new() trims name and email before validating
    - Email uniqueness is a store concern (ConflictError), never a validation failure
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone

from shopmesh.core.domain_types import UserId
from shopmesh.core.errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class User:
    name: str
    email: str
    id: UserId = UserId(0)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def new(cls, name: str, email: str) -> "User":
        now = _utcnow()
        user = cls(
            name=name.strip(), email=email.strip(),
            created_at=now, updated_at=now,
        )
        user.validate()
        return user

    def validate(self) -> None:
        if not self.name:
            raise ValidationError("name is required")
        if not NAME_MIN_LENGTH <= len(self.name) <= NAME_MAX_LENGTH:
            raise ValidationError("name must be between 2 and 100 characters")
        if not self.email:
            raise ValidationError("email is required")
        if not EMAIL_PATTERN.fullmatch(self.email):
            raise ValidationError("email format is invalid")

    def to_public(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "created_at": self.created_at.isoformat(),
        }
