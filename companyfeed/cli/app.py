"""Main Typer application — imports and registers all CLI commands.

Entry point: ``companyfeed`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from companyfeed.cli.commands.open_cmd import open_cmd
from companyfeed.cli.commands.show_cmd import show_cmd
from companyfeed.cli.commands.watch_cmd import watch_cmd
from companyfeed.config import config

console = Console()

app = typer.Typer(
    name="companyfeed",
    help="companyfeed: live company list from a realtime database.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="show", help="Print the company list once.")(show_cmd)
app.command(name="watch", help="Show the company list live (Ctrl+C to exit).")(watch_cmd)
app.command(name="open", help="Open a company's webpage in the browser.")(open_cmd)


def parse_log_level(level: str) -> int:
    """Numeric level for a name like ``debug``; ``ValueError`` if unknown."""
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def configure_logging(level: int) -> None:
    """Route stdlib logging through Rich on stderr."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to COMPANYFEED_LOG_LEVEL).",
    ),
) -> None:
    try:
        level = parse_log_level(log_level or config.log_level)
    except ValueError as exc:
        console.print(f"[bold red]Invalid log level:[/bold red] {exc}")
        console.print("[dim]Use one of DEBUG, INFO, WARNING, ERROR, CRITICAL.[/dim]")
        raise typer.Exit(code=1)
    configure_logging(level)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
