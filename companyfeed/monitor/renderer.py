"""Rich terminal renderer for the company list screen.

Turns ``CompanyListState`` into Rich renderables, with an optional
continuous ``Rich.Live`` mode driven by projector changes.

Layout
------
- header    : "My Companies App"
- loading   : spinner
- failed    : "Error: <message>" in red
- ready     : "Recent List" strip of small cards, then "Lists" with every
              company (logo, title, "<city> - Phone: <phone>", webpage)
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from rich.columns import Columns
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.spinner import Spinner
from rich.style import Style
from rich.table import Table
from rich.text import Text

from companyfeed.models.company import Company
from companyfeed.monitor.projection import CompanyListState, ViewState

if TYPE_CHECKING:
    from companyfeed.monitor.projection import ViewModelProjector


APP_TITLE = "My Companies App"
PLACEHOLDER_LOGO = "[#]"
LOGO_MARKER = "(o)"

_BRAND_STYLE = "bold white on #6200ee"


def logo_marker(company: Company) -> Text:
    """Logo cell: the image link when there is one, a placeholder otherwise."""
    if not company.has_logo:
        return Text(PLACEHOLDER_LOGO, style="dim")
    return Text(LOGO_MARKER, style=Style(color="cyan", link=company.logo_url))


def webpage_text(company: Company) -> Text:
    # Passed through untouched; an empty or bogus URL is still shown.
    return Text(
        company.webpage,
        style=Style(color="blue", underline=True, link=company.webpage or None),
    )


class CompanyListRenderer:
    """Renders ``CompanyListState`` as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    recent_count:
        How many leading records the "Recent List" strip shows.
    """

    def __init__(self, console: Console | None = None, *, recent_count: int = 5) -> None:
        self.console = console or Console()
        self.recent_count = recent_count

    # ------------------------------------------------------------------
    # Single state render
    # ------------------------------------------------------------------

    def render_state(self, state: CompanyListState) -> Panel:
        """Render a state as a Panel usable directly or in Rich.Live."""
        status = state.status
        if status == ViewState.LOADING:
            body: RenderableType = Spinner("dots", text=Text("Loading companies..."))
        elif status == ViewState.FAILED:
            body = Text(f"Error: {state.error}", style="bold red")
        else:
            body = self._render_lists(state)

        return Panel(
            body,
            title=Text(f" {APP_TITLE} ", style=_BRAND_STYLE),
            border_style="#6200ee",
            padding=(1, 2),
        )

    def _render_lists(self, state: CompanyListState) -> Group:
        if not state.records:
            return Group(
                Text("Recent List", style="bold"),
                Text("No companies yet.", style="dim"),
            )

        recent = Columns(
            [self._small_card(c) for c in state.recent(self.recent_count)],
            padding=(0, 1),
        )
        return Group(
            Text("Recent List", style="bold"),
            recent,
            Text(""),
            Text("Lists", style="bold"),
            self._build_company_table(state),
        )

    def _small_card(self, company: Company) -> Panel:
        content = Text.assemble(
            logo_marker(company), "\n", (company.title, "bold"), justify="center"
        )
        return Panel(content, width=22, border_style="white")

    def _build_company_table(self, state: CompanyListState) -> Table:
        table = Table(
            show_header=True,
            header_style="bold cyan",
            expand=True,
            show_lines=False,
        )
        table.add_column("#", style="dim", justify="right", width=5)
        table.add_column("Logo", justify="center", width=5)
        table.add_column("Company", min_width=12)
        table.add_column("Details", min_width=16)
        table.add_column("Webpage", min_width=16)

        for company in state.records:
            table.add_row(
                str(company.id),
                logo_marker(company),
                Text(company.title, style="bold"),
                Text(f"{company.city} - Phone: {company.display_phone}", style="grey50"),
                webpage_text(company),
            )
        return table

    # ------------------------------------------------------------------
    # Continuous live rendering
    # ------------------------------------------------------------------

    def render_live(
        self,
        projector: ViewModelProjector,
        *,
        refresh_hz: float = 4.0,
        stop: threading.Event | None = None,
    ) -> None:
        """Re-render whenever the projector's state changes.

        Runs until *stop* is set or Ctrl+C.  The caller owns the
        subscription and must close it afterwards.
        """
        from rich.live import Live

        interval = 1.0 / max(refresh_hz, 0.1)
        stop = stop or threading.Event()
        version = projector.version

        with Live(
            self.render_state(projector.state),
            console=self.console,
            refresh_per_second=refresh_hz,
            transient=False,
        ) as live:
            try:
                while not stop.is_set():
                    if projector.wait_for_change(version, timeout=interval):
                        version = projector.version
                        live.update(self.render_state(projector.state))
            except KeyboardInterrupt:
                pass
            live.update(self.render_state(projector.state))

    # ------------------------------------------------------------------
    # Standalone print
    # ------------------------------------------------------------------

    def print_state(self, state: CompanyListState) -> None:
        """Print a single state to the console."""
        self.console.print(self.render_state(state))
