"""``companyfeed watch`` — live company list.

Re-renders on every snapshot.  The subscription stays open until Ctrl+C,
then is closed so the connection is released.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from companyfeed.cli.commands._source import FIXTURE_HELP, build_session
from companyfeed.config import config
from companyfeed.monitor.renderer import CompanyListRenderer

console = Console()


def watch_cmd(
    fixture: Path = typer.Option(None, "--fixture", "-f", help=FIXTURE_HELP),
    refresh_hz: float = typer.Option(
        None,
        "--refresh",
        "-r",
        help="Refresh rate in Hz (defaults to COMPANYFEED_REFRESH_HZ).",
    ),
) -> None:
    """Show the company list live until interrupted."""
    renderer = CompanyListRenderer(console=console, recent_count=config.recent_count)

    with build_session(console, fixture) as session:
        console.print(
            f"[dim]Watching {config.collection_path}. Press Ctrl+C to exit.[/dim]"
        )
        renderer.render_live(
            session.projector,
            refresh_hz=refresh_hz or config.refresh_hz,
        )
