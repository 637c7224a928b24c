"""``companyfeed show`` — print the company list once and exit.

Subscribes, waits for the first snapshot (or error), renders it, and
closes the subscription.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from companyfeed.cli.commands._source import FIXTURE_HELP, build_session
from companyfeed.config import config
from companyfeed.monitor.projection import ViewState
from companyfeed.monitor.renderer import CompanyListRenderer

console = Console()


def show_cmd(
    fixture: Path = typer.Option(None, "--fixture", "-f", help=FIXTURE_HELP),
    timeout: float = typer.Option(
        15.0,
        "--timeout",
        "-t",
        help="Seconds to wait for the first snapshot.",
    ),
) -> None:
    """Print the company list once."""
    renderer = CompanyListRenderer(console=console, recent_count=config.recent_count)

    with build_session(console, fixture) as session:
        if not session.wait_for_first_event(timeout):
            console.print(
                f"[bold red]No data received within {timeout:g}s.[/bold red]"
            )
            raise typer.Exit(code=1)
        state = session.state

    renderer.print_state(state)
    if state.status == ViewState.FAILED:
        raise typer.Exit(code=1)
