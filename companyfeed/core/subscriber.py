"""DataSubscriber — live subscription to a collection, emitted as snapshots.

Each ``subscribe()`` call owns exactly one listener on the change source and
one delivery thread.  Every change (including the first read) becomes one
``SnapshotEvent`` carrying the *whole* decoded collection; a transport
failure becomes one terminal error event and ends the subscription.

The returned ``Subscription`` is the only way to release the connection.
Nothing is held in module or screen state.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from companyfeed.bridge import ChangeSource, ChangeStream, StreamError
from companyfeed.core.snapshot_tree import SnapshotTree
from companyfeed.models.company import Company, RecordDecodeError
from companyfeed.models.events import ChangeEvent, ChangeKind, SnapshotEvent

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[SnapshotEvent], None]
DecodeFailureHook = Callable[[str, Any, RecordDecodeError], None]

_DEFAULT_TERMINAL_MESSAGES: dict[ChangeKind, str] = {
    ChangeKind.CANCEL: "Listener cancelled by server",
    ChangeKind.AUTH_REVOKED: "Credential is no longer valid",
}


def terminal_message(change: ChangeEvent) -> str:
    """Error text for a ``cancel`` / ``auth_revoked`` event."""
    if isinstance(change.data, str) and change.data:
        return change.data
    if isinstance(change.data, dict) and isinstance(change.data.get("error"), str):
        return change.data["error"]
    return _DEFAULT_TERMINAL_MESSAGES.get(change.kind, change.kind.value)


class Subscription:
    """Handle for one open listener.  Close it when the screen goes away.

    ``close()`` is idempotent and may be called from any thread, including
    from inside the listener callback.  Once it returns, the listener will
    not be called again.
    """

    def __init__(
        self,
        subscriber: DataSubscriber,
        path: str,
        listener: SnapshotListener,
    ) -> None:
        self._subscriber = subscriber
        self._path = path
        self._listener = listener
        self._delivery_lock = threading.RLock()
        self._closed = False
        self._stream: ChangeStream | None = None
        self._events_delivered = 0
        self._thread = threading.Thread(
            target=self._run,
            name=f"companyfeed-subscription:{path}",
            daemon=True,
        )

    @property
    def path(self) -> str:
        return self._path

    @property
    def active(self) -> bool:
        """``True`` until closed or ended by a terminal error."""
        return not self._closed and self._thread.is_alive()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def events_delivered(self) -> int:
        return self._events_delivered

    def start(self) -> Subscription:
        self._thread.start()
        return self

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the delivery thread to finish.  Returns ``True`` if it did."""
        if threading.current_thread() is self._thread:
            return False
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def close(self) -> None:
        with self._delivery_lock:
            if self._closed:
                return
            self._closed = True
            stream = self._stream
        if stream is not None:
            stream.close()
        logger.info("Subscription on %s closed.", self._path)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else ("active" if self.active else "ended")
        return f"Subscription(path={self._path!r}, {state})"

    # ------------------------------------------------------------------
    # Delivery thread
    # ------------------------------------------------------------------

    def _deliver(self, event: SnapshotEvent) -> None:
        with self._delivery_lock:
            if self._closed:
                return
            self._events_delivered += 1
            try:
                self._listener(event)
            except Exception:
                logger.exception(
                    "Snapshot listener for %s raised; continuing.", self._path
                )

    def _fail(self, message: str) -> None:
        logger.warning("Subscription on %s failed: %s", self._path, message)
        self._deliver(
            SnapshotEvent.failure(message, sequence=self._events_delivered + 1)
        )

    def _run(self) -> None:
        try:
            stream = self._subscriber.source.open(self._path)
        except StreamError as exc:
            self._fail(str(exc))
            return

        with self._delivery_lock:
            if self._closed:
                stream.close()
                return
            self._stream = stream

        tree = SnapshotTree()
        try:
            for change in stream:
                if self._closed:
                    break
                if change.kind == ChangeKind.KEEP_ALIVE:
                    continue
                if change.kind.is_terminal:
                    self._fail(terminal_message(change))
                    break
                tree.apply(change)
                self._deliver(
                    self._subscriber.decode(
                        tree, sequence=self._events_delivered + 1
                    )
                )
        except StreamError as exc:
            if not self._closed:
                self._fail(str(exc))
        finally:
            stream.close()


class DataSubscriber:
    """Opens snapshot subscriptions against a ``ChangeSource``.

    Parameters
    ----------
    source:
        ``RealtimeStream`` for a live database, ``LocalCollectionStore``
        for fixtures and tests.
    on_decode_failure:
        Optional diagnostic hook called with ``(key, raw_value, error)`` for
        every child that fails to decode.  Failed children are always
        dropped from the snapshot, hook or not.
    """

    def __init__(
        self,
        source: ChangeSource,
        *,
        on_decode_failure: DecodeFailureHook | None = None,
    ) -> None:
        self._source = source
        self._on_decode_failure = on_decode_failure
        self._failures_lock = threading.Lock()
        self._decode_failures = 0

    @property
    def source(self) -> ChangeSource:
        return self._source

    @property
    def decode_failures(self) -> int:
        """Total children dropped across all subscriptions."""
        return self._decode_failures

    def subscribe(self, path: str, listener: SnapshotListener) -> Subscription:
        """Open a listener on *path*; events go to *listener* in arrival order."""
        logger.info("Subscribing to %s.", path)
        return Subscription(self, path, listener).start()

    def decode(self, tree: SnapshotTree, *, sequence: int = 0) -> SnapshotEvent:
        """Decode every child of *tree* into a success ``SnapshotEvent``."""
        records: list[Company] = []
        dropped: list[str] = []
        for key, raw in tree.children():
            try:
                records.append(Company.decode(key, raw))
            except RecordDecodeError as exc:
                dropped.append(key)
                self._record_failure(key, raw, exc)
        return SnapshotEvent.success(records, dropped_keys=dropped, sequence=sequence)

    def _record_failure(self, key: str, raw: Any, exc: RecordDecodeError) -> None:
        with self._failures_lock:
            self._decode_failures += 1
        logger.debug("Dropping undecodable child %r: %s", key, exc)
        if self._on_decode_failure is not None:
            self._on_decode_failure(key, raw, exc)
