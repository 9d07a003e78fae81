"""Data models exchanged by the storage components."""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Record(BaseModel):
    """An encrypted record.

    All fields are opaque bytes; ``value`` is the caller's ciphertext
    as hex text. Strict mode keeps str/list inputs from being coerced.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    name: bytes
    description: bytes
    value: bytes


class Subscription(BaseModel):
    """Subscription state of a single caller."""

    expires_at: int = 0
    has_used_trial: bool = False

    def is_active(self, now: int) -> bool:
        return self.expires_at > now


class Event(BaseModel):
    """Audit event emitted on every state change."""

    model_config = ConfigDict(frozen=True)

    name: str
    args: dict[str, Any] = Field(default_factory=dict)
    timestamp: int


class Call(BaseModel):
    """A request bound to an already authenticated caller."""

    caller: str
    operation: str
    args: dict[str, Any] = Field(default_factory=dict)
    payment: int = 0


class Response(BaseModel):
    """Result of a dispatched call.

    On success ``ok`` is True and ``value`` holds the operation result;
    ``created_id`` carries the hex identifier of a newly created record.
    On failure ``error`` is the error kind and ``reason`` explains it.
    """

    ok: bool
    value: Any = None
    created_id: Optional[str] = None
    error: Optional[str] = None
    reason: Optional[str] = None
