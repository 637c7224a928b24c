"""Bridge layer between companyfeed and the outside world.

Modules
-------
realtime_stream
    Firebase Realtime Database REST streaming (Server-Sent Events) over
    ``httpx``.  Produces ``ChangeEvent`` deltas for a collection path.
local_store
    In-process realtime store with the same ``open(path)`` contract, used
    for offline fixtures and tests.
links
    Hands a raw URL string to the host's default browser.

Every change source implements the ``ChangeSource`` protocol below.  The
DataSubscriber depends only on that protocol, never on a concrete backend.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol, runtime_checkable

from companyfeed.models.events import ChangeEvent


class StreamError(RuntimeError):
    """Raised when a change stream cannot be opened or breaks while reading.

    The message is the store's own description where one is available
    (e.g. ``"Permission denied"``); it is surfaced to users as-is.
    """


@runtime_checkable
class ChangeStream(Protocol):
    """An open listener on one path, yielding deltas in arrival order."""

    def __iter__(self) -> Iterator[ChangeEvent]:
        ...

    def close(self) -> None:
        """Release the underlying connection.  Idempotent, thread-safe."""
        ...


@runtime_checkable
class ChangeSource(Protocol):
    """Anything that can open a ``ChangeStream`` on a collection path."""

    def open(self, path: str) -> ChangeStream:
        """Open a stream on *path*.

        Raises
        ------
        StreamError
            If the listener cannot be established.
        """
        ...


__all__ = ["ChangeSource", "ChangeStream", "StreamError"]
