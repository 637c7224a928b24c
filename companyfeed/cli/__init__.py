"""companyfeed CLI — Typer-based command-line interface.

Provides the ``companyfeed`` command with subcommands for printing the
company list once, watching it live, and opening a company's webpage.

All output uses Rich for formatted terminal display.
"""
