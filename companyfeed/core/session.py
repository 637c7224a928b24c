"""CompanyFeedSession — one screen's worth of subscription + projection.

Owns the ``Subscription`` handle for its lifetime and closes it on exit,
so dismissing the screen always releases the connection.
"""

from __future__ import annotations

import logging
from typing import Any

from companyfeed.core.subscriber import DataSubscriber, Subscription
from companyfeed.monitor.projection import CompanyListState, ViewModelProjector

logger = logging.getLogger(__name__)


class SubscriptionClosedError(RuntimeError):
    """Raised when a closed session is asked to subscribe again."""


class CompanyFeedSession:
    """Wires a ``DataSubscriber`` into a ``ViewModelProjector``.

    Parameters
    ----------
    subscriber:
        Opens the live listener.
    projector:
        Receives every snapshot event.  A fresh one is created if omitted.
    path:
        Collection path, ``"companies"`` by default.
    """

    def __init__(
        self,
        subscriber: DataSubscriber,
        projector: ViewModelProjector | None = None,
        path: str = "companies",
    ) -> None:
        self._subscriber = subscriber
        self._projector = projector or ViewModelProjector()
        self._path = path
        self._subscription: Subscription | None = None
        self._closed = False

    @property
    def projector(self) -> ViewModelProjector:
        return self._projector

    @property
    def state(self) -> CompanyListState:
        return self._projector.state

    @property
    def subscription(self) -> Subscription | None:
        return self._subscription

    def start(self) -> CompanyFeedSession:
        """Open the subscription if it is not already open."""
        if self._closed:
            raise SubscriptionClosedError("Session has been closed")
        if self._subscription is None:
            self._subscription = self._subscriber.subscribe(
                self._path, self._projector.apply
            )
        return self

    def resubscribe(self) -> Subscription:
        """Replace the current subscription with a new one.

        This is the only way out of the failed state.  The projected state
        is untouched until the new subscription delivers its first event.
        """
        if self._closed:
            raise SubscriptionClosedError("Session has been closed")
        if self._subscription is not None:
            self._subscription.close()
        logger.info("Resubscribing to %s.", self._path)
        self._subscription = self._subscriber.subscribe(
            self._path, self._projector.apply
        )
        return self._subscription

    def wait_for_first_event(self, timeout: float | None = None) -> bool:
        """Block until the state has left LOADING.  Returns ``False`` on timeout."""
        version = self._projector.version
        if not self._projector.state.loading:
            return True
        return self._projector.wait_for_change(version, timeout)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._subscription is not None:
            self._subscription.close()
            self._subscription.join(timeout=1.0)

    def __enter__(self) -> CompanyFeedSession:
        return self.start()

    def __exit__(self, *exc: Any) -> None:
        self.close()
