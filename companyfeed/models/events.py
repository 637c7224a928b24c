"""Event models flowing through the subscription pipeline.

Two layers:

- ``ChangeEvent`` — a raw delta from the realtime store's streaming protocol
  (``put`` / ``patch`` / ``keep-alive`` / ``cancel`` / ``auth_revoked``).
- ``SnapshotEvent`` — what the DataSubscriber emits: either the full decoded
  collection after a change, or a terminal subscription error.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from companyfeed.models.company import Company


class ChangeKind(str, Enum):
    """Event names of the Firebase REST streaming protocol."""

    PUT = "put"
    PATCH = "patch"
    KEEP_ALIVE = "keep-alive"
    CANCEL = "cancel"
    AUTH_REVOKED = "auth_revoked"

    @property
    def is_terminal(self) -> bool:
        """Whether the store closes the stream after this event."""
        return self in (ChangeKind.CANCEL, ChangeKind.AUTH_REVOKED)


class ChangeEvent(BaseModel):
    """A single delta relative to the subscribed path."""

    model_config = ConfigDict(frozen=True)

    kind: ChangeKind
    path: str = "/"
    data: Any = None


class SnapshotEvent(BaseModel):
    """One full-collection read, or a terminal subscription error.

    Exactly one of ``records`` (success) or ``error`` (failure) is meaningful.
    ``records`` keeps the store's child order; sorting is the projector's job.
    """

    model_config = ConfigDict(frozen=True)

    records: tuple[Company, ...] = ()
    dropped_keys: tuple[str, ...] = ()
    error: str | None = None
    sequence: int = Field(default=0, ge=0)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @classmethod
    def success(
        cls,
        records: list[Company] | tuple[Company, ...],
        *,
        dropped_keys: list[str] | tuple[str, ...] = (),
        sequence: int = 0,
    ) -> SnapshotEvent:
        return cls(
            records=tuple(records),
            dropped_keys=tuple(dropped_keys),
            sequence=sequence,
        )

    @classmethod
    def failure(cls, message: str, *, sequence: int = 0) -> SnapshotEvent:
        return cls(error=message, sequence=sequence)
