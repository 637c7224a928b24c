"""Tests for external link opening."""

from __future__ import annotations

import webbrowser

from companyfeed.bridge.links import open_external_link


class TestOpenExternalLink:
    def test_passes_string_verbatim(self):
        opened: list[str] = []
        result = open_external_link(
            "not even a url", opener=lambda url: opened.append(url) or True
        )
        assert result is True
        assert opened == ["not even a url"]

    def test_defaults_to_webbrowser(self, monkeypatch):
        opened: list[str] = []
        monkeypatch.setattr(webbrowser, "open", lambda url: opened.append(url) or False)
        assert open_external_link("https://example.com") is False
        assert opened == ["https://example.com"]
