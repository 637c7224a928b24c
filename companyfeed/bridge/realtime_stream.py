"""Realtime stream — Firebase Realtime Database REST streaming over httpx.

Protocol
--------
``GET {database_url}/{path}.json`` with ``Accept: text/event-stream`` keeps
the connection open and emits Server-Sent Events::

    event: put
    data: {"path": "/", "data": {...}}

``put`` and ``patch`` carry a JSON object with ``path`` and ``data``.
``keep-alive`` carries ``null``.  ``cancel`` and ``auth_revoked`` carry an
error description and end the stream.

The first event on every connection is a ``put`` at ``/`` with the full
current value, which is what makes the first read and every later change
look the same to the subscriber.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable, Iterator
from typing import Any

import httpx

from companyfeed.bridge import StreamError
from companyfeed.models.events import ChangeEvent, ChangeKind

logger = logging.getLogger(__name__)

_EVENT_STREAM = "text/event-stream"


# ---------------------------------------------------------------------------
# SSE parsing
# ---------------------------------------------------------------------------


def _decode_data(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _build_event(name: str, raw_data: str) -> ChangeEvent | None:
    try:
        kind = ChangeKind(name)
    except ValueError:
        logger.debug("Ignoring unknown stream event %r.", name)
        return None

    data = _decode_data(raw_data) if raw_data else None

    if kind in (ChangeKind.PUT, ChangeKind.PATCH):
        if not isinstance(data, dict) or "path" not in data:
            raise StreamError(f"Malformed {kind.value} event: {raw_data!r}")
        return ChangeEvent(kind=kind, path=str(data["path"]), data=data.get("data"))

    return ChangeEvent(kind=kind, data=data)


def parse_sse_lines(lines: Iterable[str]) -> Iterator[ChangeEvent]:
    """Parse Server-Sent Event lines into ``ChangeEvent``s.

    Events are dispatched on a blank line.  Multiple ``data:`` lines are
    joined with newlines.  Comment lines (``:``) and unknown fields are
    skipped.  A trailing event without a blank line is still dispatched.

    Raises
    ------
    StreamError
        If a ``put``/``patch`` payload is not ``{"path": ..., "data": ...}``.
    """
    name = ""
    data_lines: list[str] = []

    for line in lines:
        line = line.rstrip("\r")
        if not line:
            if name:
                event = _build_event(name, "\n".join(data_lines))
                if event is not None:
                    yield event
            name = ""
            data_lines = []
            continue
        if line.startswith(":"):
            continue

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if field == "event":
            name = value
        elif field == "data":
            data_lines.append(value)

    if name:
        event = _build_event(name, "\n".join(data_lines))
        if event is not None:
            yield event


def _error_message(response: httpx.Response) -> str:
    """Extract the store's ``{"error": "..."}`` message, else ``HTTP <code>``."""
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return f"HTTP {response.status_code}"


# ---------------------------------------------------------------------------
# Stream objects
# ---------------------------------------------------------------------------


class RealtimeChangeStream:
    """One open streaming response.  Iterate it on a single thread."""

    def __init__(
        self,
        path: str,
        response: httpx.Response,
        client: httpx.Client,
        *,
        owns_client: bool,
    ) -> None:
        self._path = path
        self._response = response
        self._client = client
        self._owns_client = owns_client
        self._lock = threading.Lock()
        self._closed = False

    @property
    def path(self) -> str:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[ChangeEvent]:
        try:
            for event in parse_sse_lines(self._response.iter_lines()):
                if self._closed:
                    return
                yield event
        except (httpx.HTTPError, httpx.StreamError) as exc:
            # close() from another thread tears the response down mid-read.
            if self._closed:
                return
            raise StreamError(str(exc) or type(exc).__name__) from exc

        if not self._closed:
            raise StreamError("Stream closed by server")

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._response.close()
        if self._owns_client:
            self._client.close()
        logger.info("RealtimeStream: closed listener on %s.", self._path)

    def __enter__(self) -> RealtimeChangeStream:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


class RealtimeStream:
    """Opens REST streaming listeners against a Firebase Realtime Database.

    Parameters
    ----------
    database_url:
        Root URL, e.g. ``https://my-app-default-rtdb.firebaseio.com``.
    auth_token:
        Database secret or ID token, sent as the ``auth`` query parameter.
    connect_timeout, read_timeout:
        Seconds.  The server sends ``keep-alive`` every 30 seconds, so the
        read timeout should be comfortably above that.
    client:
        Pre-configured ``httpx.Client`` (tests inject one backed by
        ``httpx.MockTransport``).  Not closed by the stream when given.
    """

    def __init__(
        self,
        database_url: str,
        *,
        auth_token: str | None = None,
        connect_timeout: float = 10.0,
        read_timeout: float = 60.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not database_url:
            raise ValueError("database_url is required")
        self._database_url = database_url.rstrip("/")
        self._auth_token = auth_token or None
        self._timeout = httpx.Timeout(read_timeout, connect=connect_timeout)
        self._client = client

    @property
    def database_url(self) -> str:
        return self._database_url

    def url_for(self, path: str) -> str:
        """REST URL of *path* (``companies`` → ``{root}/companies.json``)."""
        return f"{self._database_url}/{path.strip('/')}.json"

    def open(self, path: str) -> RealtimeChangeStream:
        owns_client = self._client is None
        client = self._client or httpx.Client(timeout=self._timeout)
        params = {"auth": self._auth_token} if self._auth_token else None
        url = self.url_for(path)

        try:
            request = client.build_request(
                "GET",
                url,
                params=params,
                headers={"Accept": _EVENT_STREAM},
            )
            response = client.send(request, stream=True, follow_redirects=True)
        except httpx.HTTPError as exc:
            if owns_client:
                client.close()
            raise StreamError(str(exc) or type(exc).__name__) from exc

        if response.status_code >= 400:
            response.read()
            message = _error_message(response)
            response.close()
            if owns_client:
                client.close()
            logger.warning(
                "RealtimeStream: listener on %s refused (%d): %s",
                path,
                response.status_code,
                message,
            )
            raise StreamError(message)

        logger.info("RealtimeStream: listening on %s.", url)
        return RealtimeChangeStream(path, response, client, owns_client=owns_client)

    def __repr__(self) -> str:
        return f"RealtimeStream(database_url={self._database_url!r})"
