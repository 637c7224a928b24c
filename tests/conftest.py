"""Shared test fixtures for companyfeed."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

import pytest

from companyfeed.bridge.local_store import LocalCollectionStore
from companyfeed.core.subscriber import DataSubscriber
from companyfeed.models.company import Company
from companyfeed.models.events import SnapshotEvent
from companyfeed.monitor.projection import ViewModelProjector


class EventCollector:
    """Thread-safe snapshot listener that tests can block on."""

    def __init__(self) -> None:
        self.events: list[SnapshotEvent] = []
        self._cond = threading.Condition()

    def __call__(self, event: SnapshotEvent) -> None:
        with self._cond:
            self.events.append(event)
            self._cond.notify_all()

    def wait_for(self, count: int, timeout: float = 2.0) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: len(self.events) >= count, timeout)

    @property
    def last(self) -> SnapshotEvent:
        return self.events[-1]


@pytest.fixture
def collector() -> EventCollector:
    return EventCollector()


@pytest.fixture
def sample_data() -> dict[str, Any]:
    """A database export with three companies, stored out of id order."""
    return {
        "companies": {
            "c3": {
                "id": 3,
                "title": "Gamma",
                "city": "Oslo",
                "webpage": "https://gamma.example",
                "phone": "+47 1234",
            },
            "c1": {
                "id": 1,
                "title": "Alpha",
                "city": "Berlin",
                "webpage": "https://alpha.example",
                "logoUrl": "https://alpha.example/logo.png",
            },
            "c2": {"id": 2, "title": "Beta", "city": "Paris", "webpage": "https://beta.example"},
        }
    }


@pytest.fixture
def store(sample_data: dict[str, Any]) -> LocalCollectionStore:
    return LocalCollectionStore(sample_data)


@pytest.fixture
def subscriber(store: LocalCollectionStore) -> DataSubscriber:
    return DataSubscriber(store)


@pytest.fixture
def projector() -> ViewModelProjector:
    return ViewModelProjector()


@pytest.fixture
def make_company() -> Callable[..., Company]:
    """Factory fixture: build a Company with sensible defaults."""

    def _factory(id: int = 1, title: str = "Acme", **overrides: Any) -> Company:
        return Company(id=id, title=title, **overrides)

    return _factory
