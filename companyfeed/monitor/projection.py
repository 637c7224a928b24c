"""ViewModelProjector — render-ready state derived from snapshot events.

The projector does not accumulate.  Each event fully determines the next
state from the previous one:

- success: ``loading=False``, ``error=None``, records replaced and sorted
- error:   ``loading=False``, ``error=<message>``, records kept as they were

State machine::

    LOADING --success--> READY --success--> READY
    LOADING --error----> FAILED
    READY   --error----> FAILED

FAILED only changes when a new subscription delivers an event.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict

from companyfeed.models.company import Company
from companyfeed.models.events import SnapshotEvent

logger = logging.getLogger(__name__)

StateListener = Callable[["CompanyListState"], None]


class ViewState(str, Enum):
    """Coarse status of the company list screen."""

    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class CompanyListState(BaseModel):
    """A frozen, point-in-time view of the company list.

    This is exactly what a rendering surface consumes.
    """

    model_config = ConfigDict(frozen=True)

    loading: bool = True
    error: str | None = None
    records: tuple[Company, ...] = ()

    @property
    def status(self) -> ViewState:
        if self.error is not None:
            return ViewState.FAILED
        if self.loading:
            return ViewState.LOADING
        return ViewState.READY

    def recent(self, count: int) -> tuple[Company, ...]:
        """The first *count* records, shown in the "Recent List" strip."""
        return self.records[: max(count, 0)]

    def find(self, company_id: int) -> Company | None:
        """First record with *company_id* (ids are not unique)."""
        return next((c for c in self.records if c.id == company_id), None)


def sort_by_id(records: tuple[Company, ...] | list[Company]) -> tuple[Company, ...]:
    """Stable ascending sort by ``id``; duplicates keep their arrival order."""
    return tuple(sorted(records, key=lambda company: company.id))


def project(state: CompanyListState, event: SnapshotEvent) -> CompanyListState:
    """Pure transition function: previous state + event -> next state."""
    if event.is_error:
        return CompanyListState(loading=False, error=event.error, records=state.records)
    return CompanyListState(loading=False, error=None, records=sort_by_id(event.records))


class ViewModelProjector:
    """Holds the current ``CompanyListState`` and notifies observers.

    ``apply`` is the single mutation path and is called from the
    subscription's delivery thread.  Readers on other threads see either the
    old or the new frozen state, never a partial one.
    """

    def __init__(self, initial: CompanyListState | None = None) -> None:
        self._state = initial or CompanyListState()
        self._listeners: list[StateListener] = []
        self._lock = threading.Lock()
        self._changed = threading.Condition(self._lock)
        self._version = 0

    @property
    def state(self) -> CompanyListState:
        return self._state

    @property
    def version(self) -> int:
        """Incremented on every state change."""
        return self._version

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def apply(self, event: SnapshotEvent) -> CompanyListState:
        """Project *event*; observers are told only if the state changed."""
        with self._lock:
            new_state = project(self._state, event)
            if new_state == self._state:
                return self._state
            self._state = new_state
            self._version += 1
            self._changed.notify_all()

        logger.debug(
            "Projected %s: %d records (dropped %d).",
            new_state.status.value,
            len(new_state.records),
            len(event.dropped_keys),
        )
        for listener in list(self._listeners):
            listener(new_state)
        return new_state

    __call__ = apply

    def wait_for_change(self, since_version: int, timeout: float | None = None) -> bool:
        """Block until ``version`` moves past *since_version*."""
        with self._changed:
            return self._changed.wait_for(
                lambda: self._version > since_version, timeout
            )
