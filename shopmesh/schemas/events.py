"""Event Schemas - validation for consumed event envelopes."""

from pydantic import BaseModel


class UserCreatedPayload(BaseModel):
    id: int
    name: str
    email: str
    created_at: str


class UserCreatedEvent(BaseModel):
    version: str
    event_type: str
    timestamp: str
    trace_id: str = ""
    payload: UserCreatedPayload
