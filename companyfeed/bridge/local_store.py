"""LocalCollectionStore — an in-process realtime store.

Speaks the same ``open(path)`` contract as ``RealtimeStream`` so the
subscriber cannot tell them apart.  Used for ``--fixture`` files in the CLI
and as the test double for the whole pipeline.

Writes are applied to a ``SnapshotTree`` and fanned out to every open stream
whose path is affected, translated into the deltas the real store would send:
a write below a listener arrives as a relative ``put``/``patch``, a write
above a listener arrives as a ``put`` of the listener's whole new value.
"""

from __future__ import annotations

import json
import logging
import queue
import threading
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from companyfeed.bridge import StreamError
from companyfeed.core.snapshot_tree import SnapshotTree, split_path
from companyfeed.models.events import ChangeEvent, ChangeKind

logger = logging.getLogger(__name__)

_CLOSED = object()


def _join(segments: list[str]) -> str:
    return "/" + "/".join(segments)


class LocalChangeStream:
    """Queue-backed stream handed out by ``LocalCollectionStore.open``."""

    def __init__(self, store: LocalCollectionStore, path: str) -> None:
        self._store = store
        self._path = path
        self._segments = split_path(path)
        self._queue: queue.Queue[Any] = queue.Queue()
        self._closed = False

    @property
    def path(self) -> str:
        return self._path

    @property
    def segments(self) -> list[str]:
        return self._segments

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, event: ChangeEvent) -> None:
        if not self._closed:
            self._queue.put(event)

    def __iter__(self) -> Iterator[ChangeEvent]:
        while True:
            item = self._queue.get()
            if item is _CLOSED or self._closed:
                return
            yield item
            if item.kind.is_terminal:
                return

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put(_CLOSED)
        self._store._detach(self)


class LocalCollectionStore:
    """Thread-safe in-memory JSON tree with realtime listeners.

    Parameters
    ----------
    data:
        Initial database contents (the whole tree, not one collection).
    """

    def __init__(self, data: Any = None) -> None:
        self._tree = SnapshotTree(data)
        self._lock = threading.Lock()
        self._streams: list[LocalChangeStream] = []
        self._read_error: str | None = None

    @classmethod
    def from_json_file(cls, path: Path) -> LocalCollectionStore:
        """Load a database export (``{"companies": {...}}``) from disk."""
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
        logger.info("LocalCollectionStore: loaded fixture %s.", path)
        return cls(data)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def value_at(self, path: str) -> Any:
        node = self._tree.value
        for segment in split_path(path):
            if isinstance(node, dict):
                node = node.get(segment)
            elif isinstance(node, list) and segment.isdigit() and int(segment) < len(node):
                node = node[int(segment)]
            else:
                return None
        return node

    def open(self, path: str) -> LocalChangeStream:
        with self._lock:
            if self._read_error is not None:
                raise StreamError(self._read_error)
            stream = LocalChangeStream(self, path)
            stream.push(ChangeEvent(kind=ChangeKind.PUT, path="/", data=self.value_at(path)))
            self._streams.append(stream)
        logger.debug("LocalCollectionStore: opened listener on %s.", path)
        return stream

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._streams)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set(self, path: str, value: Any) -> None:
        """Replace the value at *path* (``None`` deletes it)."""
        with self._lock:
            self._tree.apply(ChangeEvent(kind=ChangeKind.PUT, path=path, data=value))
            self._fan_out(ChangeKind.PUT, split_path(path), value)

    def update(self, path: str, children: Mapping[str, Any]) -> None:
        """Merge *children* into the object at *path*."""
        data = dict(children)
        with self._lock:
            self._tree.apply(ChangeEvent(kind=ChangeKind.PATCH, path=path, data=data))
            self._fan_out(ChangeKind.PATCH, split_path(path), data)

    def cancel(self, message: str) -> None:
        """Revoke every open listener, as the store does on a rules change."""
        with self._lock:
            for stream in list(self._streams):
                stream.push(ChangeEvent(kind=ChangeKind.CANCEL, data=message))

    def deny_reads(self, message: str | None) -> None:
        """Make future ``open`` calls fail with *message* (``None`` re-allows)."""
        with self._lock:
            self._read_error = message

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _fan_out(self, kind: ChangeKind, changed: list[str], data: Any) -> None:
        for stream in self._streams:
            listen = stream.segments
            if changed[: len(listen)] == listen:
                relative = _join(changed[len(listen):])
                stream.push(ChangeEvent(kind=kind, path=relative, data=data))
            elif listen[: len(changed)] == changed and self._affects(
                kind, listen[len(changed):], data
            ):
                stream.push(
                    ChangeEvent(
                        kind=ChangeKind.PUT,
                        path="/",
                        data=self.value_at(stream.path),
                    )
                )

    @staticmethod
    def _affects(kind: ChangeKind, below: list[str], data: Any) -> bool:
        if kind == ChangeKind.PUT:
            return True
        if not isinstance(data, dict):
            return False
        for key in data:
            touched = split_path(str(key))
            depth = min(len(touched), len(below))
            if touched[:depth] == below[:depth]:
                return True
        return False

    def _detach(self, stream: LocalChangeStream) -> None:
        with self._lock:
            if stream in self._streams:
                self._streams.remove(stream)
