"""Shared helpers for CLI commands: build the change source and session."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from companyfeed.bridge import ChangeSource
from companyfeed.bridge.local_store import LocalCollectionStore
from companyfeed.bridge.realtime_stream import RealtimeStream
from companyfeed.config import FeedConfig, config
from companyfeed.core.session import CompanyFeedSession
from companyfeed.core.subscriber import DataSubscriber

FIXTURE_HELP = "Read from a local JSON database export instead of the live database."


def build_source(console: Console, fixture: Path | None, cfg: FeedConfig = config) -> ChangeSource:
    """Fixture file if given, otherwise the configured database."""
    if fixture is not None:
        if not fixture.exists():
            console.print(f"[bold red]Fixture not found:[/bold red] {fixture}")
            raise typer.Exit(code=1)
        return LocalCollectionStore.from_json_file(fixture)

    if not cfg.has_database:
        console.print("[bold red]No database configured.[/bold red]")
        console.print(
            "[dim]Set COMPANYFEED_DATABASE_URL or pass --fixture FILE.[/dim]"
        )
        raise typer.Exit(code=1)

    return RealtimeStream(
        cfg.database_url,
        auth_token=cfg.auth_token or None,
        connect_timeout=cfg.connect_timeout_seconds,
        read_timeout=cfg.read_timeout_seconds,
    )


def build_session(console: Console, fixture: Path | None) -> CompanyFeedSession:
    source = build_source(console, fixture)
    return CompanyFeedSession(DataSubscriber(source), path=config.collection_path)
