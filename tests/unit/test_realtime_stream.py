"""Unit tests for the Firebase REST streaming transport.

Uses ``httpx.MockTransport`` so no network is touched.
"""

from __future__ import annotations

import httpx
import pytest

from companyfeed.bridge import ChangeSource, StreamError
from companyfeed.bridge.realtime_stream import RealtimeStream, parse_sse_lines
from companyfeed.core.subscriber import DataSubscriber
from companyfeed.models.events import ChangeKind

DB_URL = "https://demo-default-rtdb.firebaseio.com"

SSE_BODY = (
    "event: put\n"
    'data: {"path": "/", "data": {"a": {"id": 2, "title": "B"}, "b": {"id": 1, "title": "A"}}}\n'
    "\n"
    "event: keep-alive\n"
    "data: null\n"
    "\n"
    "event: patch\n"
    'data: {"path": "/", "data": {"c": {"id": 3, "title": "C"}}}\n'
    "\n"
)


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


# ---------------------------------------------------------------------------
# Test: SSE parsing
# ---------------------------------------------------------------------------


class TestParseSseLines:
    def test_put_and_patch(self):
        events = list(parse_sse_lines(SSE_BODY.splitlines()))
        assert [e.kind for e in events] == [
            ChangeKind.PUT,
            ChangeKind.KEEP_ALIVE,
            ChangeKind.PATCH,
        ]
        assert events[0].path == "/"
        assert events[0].data["a"]["title"] == "B"
        assert events[1].data is None

    def test_cancel_carries_message(self):
        lines = ["event: cancel", 'data: "Permission denied"', ""]
        (event,) = parse_sse_lines(lines)
        assert event.kind == ChangeKind.CANCEL
        assert event.data == "Permission denied"

    def test_unquoted_data_kept_as_string(self):
        lines = ["event: auth_revoked", "data: credential is no longer valid", ""]
        (event,) = parse_sse_lines(lines)
        assert event.data == "credential is no longer valid"

    def test_trailing_event_without_blank_line(self):
        lines = ["event: put", 'data: {"path": "/x", "data": 1}']
        (event,) = parse_sse_lines(lines)
        assert event.path == "/x"
        assert event.data == 1

    def test_comments_and_unknown_events_skipped(self):
        lines = [": comment", "event: rules_changed", "data: {}", "", "event: keep-alive", "data: null", ""]
        events = list(parse_sse_lines(lines))
        assert [e.kind for e in events] == [ChangeKind.KEEP_ALIVE]

    def test_malformed_put_raises(self):
        with pytest.raises(StreamError):
            list(parse_sse_lines(["event: put", "data: [1, 2]", ""]))


# ---------------------------------------------------------------------------
# Test: Opening streams
# ---------------------------------------------------------------------------


class TestRealtimeStreamOpen:
    def test_is_a_change_source(self):
        assert isinstance(RealtimeStream(DB_URL), ChangeSource)

    def test_requires_database_url(self):
        with pytest.raises(ValueError):
            RealtimeStream("")

    def test_url_for(self):
        stream = RealtimeStream(DB_URL + "/")
        assert stream.url_for("companies") == f"{DB_URL}/companies.json"
        assert stream.url_for("/companies/") == f"{DB_URL}/companies.json"

    def test_request_shape(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text=SSE_BODY)

        source = RealtimeStream(DB_URL, auth_token="secret", client=_client(handler))
        stream = source.open("companies")
        stream.close()

        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/companies.json"
        assert request.url.params["auth"] == "secret"
        assert request.headers["Accept"] == "text/event-stream"

    def test_no_auth_param_without_token(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text=SSE_BODY)

        RealtimeStream(DB_URL, client=_client(handler)).open("companies").close()
        assert "auth" not in seen[0].url.params

    def test_permission_denied(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": "Permission denied"})

        source = RealtimeStream(DB_URL, client=_client(handler))
        with pytest.raises(StreamError, match="Permission denied"):
            source.open("companies")

    def test_error_without_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="upstream down")

        source = RealtimeStream(DB_URL, client=_client(handler))
        with pytest.raises(StreamError, match="HTTP 503"):
            source.open("companies")

    def test_connect_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("no route to host", request=request)

        source = RealtimeStream(DB_URL, client=_client(handler))
        with pytest.raises(StreamError, match="no route to host"):
            source.open("companies")


class TestRealtimeStreamIteration:
    def test_yields_events_then_reports_server_close(self):
        source = RealtimeStream(
            DB_URL, client=_client(lambda request: httpx.Response(200, text=SSE_BODY))
        )
        stream = source.open("companies")
        received = []
        with pytest.raises(StreamError, match="closed by server"):
            for event in stream:
                received.append(event.kind)
        assert received == [ChangeKind.PUT, ChangeKind.KEEP_ALIVE, ChangeKind.PATCH]
        stream.close()

    def test_close_is_idempotent(self):
        source = RealtimeStream(
            DB_URL, client=_client(lambda request: httpx.Response(200, text=SSE_BODY))
        )
        stream = source.open("companies")
        stream.close()
        stream.close()
        assert stream.closed is True


class TestSubscriberOverHttp:
    """End-to-end through DataSubscriber with a mocked server."""

    def test_snapshots_then_terminal_error(self, collector):
        source = RealtimeStream(
            DB_URL, client=_client(lambda request: httpx.Response(200, text=SSE_BODY))
        )
        sub = DataSubscriber(source).subscribe("companies", collector)
        assert collector.wait_for(3)
        assert sub.join(timeout=2.0)

        first, second, last = collector.events
        assert {c.title for c in first.records} == {"A", "B"}
        assert {c.title for c in second.records} == {"A", "B", "C"}
        assert last.error == "Stream closed by server"

    def test_permission_denied_becomes_error_event(self, collector):
        source = RealtimeStream(
            DB_URL,
            client=_client(
                lambda request: httpx.Response(401, json={"error": "Permission denied"})
            ),
        )
        sub = DataSubscriber(source).subscribe("companies", collector)
        assert collector.wait_for(1)
        assert sub.join(timeout=2.0)
        assert collector.last.error == "Permission denied"
