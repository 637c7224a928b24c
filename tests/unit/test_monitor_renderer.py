"""Unit tests for the CompanyListRenderer.

Tests Rich panel output for each view state, the recent strip limit,
the phone placeholder, and logo placeholders.
"""

from __future__ import annotations

import threading

from rich.console import Console
from rich.panel import Panel

from companyfeed.models.company import Company
from companyfeed.models.events import SnapshotEvent
from companyfeed.monitor.projection import CompanyListState, ViewModelProjector
from companyfeed.monitor.renderer import (
    APP_TITLE,
    PLACEHOLDER_LOGO,
    CompanyListRenderer,
    logo_marker,
)


def _render_text(state: CompanyListState, *, recent_count: int = 5) -> str:
    console = Console(record=True, width=160, color_system=None)
    renderer = CompanyListRenderer(console=console, recent_count=recent_count)
    renderer.print_state(state)
    return console.export_text()


def _ready(*records: Company) -> CompanyListState:
    return CompanyListState(loading=False, records=tuple(records))


class TestRenderStates:
    def test_returns_panel(self):
        renderer = CompanyListRenderer(console=Console(width=80))
        assert isinstance(renderer.render_state(CompanyListState()), Panel)

    def test_loading(self):
        text = _render_text(CompanyListState())
        assert APP_TITLE in text
        assert "Loading companies" in text

    def test_error(self):
        state = CompanyListState(loading=False, error="PERMISSION_DENIED")
        text = _render_text(state)
        assert "Error: PERMISSION_DENIED" in text

    def test_error_hides_records(self):
        state = CompanyListState(
            loading=False, error="boom", records=(Company(id=1, title="Hidden Co"),)
        )
        assert "Hidden Co" not in _render_text(state)

    def test_ready_sections(self):
        text = _render_text(_ready(Company(id=1, title="Alpha", city="Berlin")))
        assert "Recent List" in text
        assert "Lists" in text
        assert "Alpha" in text

    def test_empty_ready(self):
        text = _render_text(_ready())
        assert "No companies yet." in text


class TestCompanyDetails:
    def test_phone_placeholder(self):
        text = _render_text(_ready(Company(id=1, title="A", city="Rome")))
        assert "Rome - Phone: N/A" in text

    def test_phone_shown(self):
        text = _render_text(_ready(Company(id=1, title="A", city="Rome", phone="123")))
        assert "Rome - Phone: 123" in text

    def test_webpage_shown_verbatim(self):
        text = _render_text(_ready(Company(id=1, title="A", webpage="htp:/broken")))
        assert "htp:/broken" in text

    def test_recent_strip_limited(self):
        records = [Company(id=i, title=f"Co{i:02d}") for i in range(8)]
        text = _render_text(_ready(*records), recent_count=2)
        recent_part = text.split("Lists")[0]
        assert "Co00" in recent_part
        assert "Co01" in recent_part
        assert "Co02" not in recent_part


class TestLogoMarker:
    def test_placeholder_without_logo(self):
        assert logo_marker(Company(id=1)).plain == PLACEHOLDER_LOGO

    def test_link_with_logo(self):
        marker = logo_marker(Company(id=1, logo_url="https://x/logo.png"))
        assert marker.plain != PLACEHOLDER_LOGO
        assert marker.style.link == "https://x/logo.png"


class TestRenderLive:
    def test_stops_when_event_set(self):
        console = Console(record=True, width=120, color_system=None)
        renderer = CompanyListRenderer(console=console)
        projector = ViewModelProjector()
        stop = threading.Event()

        def feed() -> None:
            projector.apply(SnapshotEvent.success([Company(id=1, title="Live Co")]))
            stop.set()

        timer = threading.Timer(0.05, feed)
        timer.start()
        renderer.render_live(projector, refresh_hz=20.0, stop=stop)
        timer.join()
        assert "Live Co" in console.export_text()
