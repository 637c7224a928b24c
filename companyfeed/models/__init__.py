"""companyfeed data models — all Pydantic v2, all frozen (immutable)."""

from companyfeed.models.company import Company, RecordDecodeError
from companyfeed.models.events import ChangeEvent, ChangeKind, SnapshotEvent

__all__ = [
    # company
    "Company",
    "RecordDecodeError",
    # events
    "ChangeKind",
    "ChangeEvent",
    "SnapshotEvent",
]
