"""``companyfeed open COMPANY_ID`` — open a company's webpage.

Reads one snapshot and hands the first matching record's ``webpage`` to the
default browser, verbatim.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from companyfeed.bridge.links import open_external_link
from companyfeed.cli.commands._source import FIXTURE_HELP, build_session
from companyfeed.monitor.projection import ViewState

console = Console()


def open_cmd(
    company_id: int = typer.Argument(..., help="The company id to open."),
    fixture: Path = typer.Option(None, "--fixture", "-f", help=FIXTURE_HELP),
    timeout: float = typer.Option(
        15.0,
        "--timeout",
        "-t",
        help="Seconds to wait for the first snapshot.",
    ),
) -> None:
    """Open the webpage of the first company with COMPANY_ID."""
    with build_session(console, fixture) as session:
        if not session.wait_for_first_event(timeout):
            console.print(
                f"[bold red]No data received within {timeout:g}s.[/bold red]"
            )
            raise typer.Exit(code=1)
        state = session.state

    if state.status == ViewState.FAILED:
        console.print(f"[bold red]Error:[/bold red] {state.error}")
        raise typer.Exit(code=1)

    company = state.find(company_id)
    if company is None:
        console.print(f"[bold red]Company not found:[/bold red] {company_id}")
        raise typer.Exit(code=1)

    console.print(f"Opening [cyan]{company.title}[/cyan]: {company.webpage}")
    if not open_external_link(company.webpage):
        console.print("[yellow]No browser could be launched.[/yellow]")
