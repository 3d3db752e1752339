"""Console output for search runs."""

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich import box

from .models import Award, Query, RunSummary
from .routes import describe

console = Console()

CABIN_STYLES = {
    "economy": "green",
    "premium": "cyan",
    "business": "yellow",
    "first": "red bold",
}


def format_duration(minutes: int) -> str:
    """Format a duration in minutes as 'Xh Ym'."""
    hours = minutes // 60
    mins = minutes % 60
    if hours == 0:
        return f"{mins}m"
    return f"{hours}h {mins}m"


def print_query(query: Query, out: Optional[Console] = None) -> None:
    """One line announcing the route being searched."""
    out = out or console
    style = CABIN_STYLES.get(query.cabin, "white")
    out.print(f"[dim]{query.engine}[/dim] Searching [{style}]{describe(query)}[/{style}]...")


def print_awards(awards: list[Award], out: Optional[Console] = None) -> None:
    """Table of the awards found for one query."""
    out = out or console
    if not awards:
        out.print("[dim]No award flights found[/dim]")
        return

    table = Table(box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table.add_column("Flights", no_wrap=True)
    table.add_column("Route", no_wrap=True)
    table.add_column("Date", no_wrap=True)
    table.add_column("Duration", justify="right")
    table.add_column("Stops", justify="right")
    table.add_column("Cabin")
    table.add_column("Fares")

    for award in awards:
        style = CABIN_STYLES.get(award.cabin, "white")
        cabin = award.cabin.title() + (" (mixed)" if award.mixed else "")
        fares = " ".join(award.fares) if award.fares else "[dim]none[/dim]"
        table.add_row(
            " → ".join(award.flights),
            f"{award.from_city} → {award.to_city}",
            award.date.isoformat(),
            format_duration(award.duration),
            str(award.stops),
            f"[{style}]{cabin}[/{style}]",
            fares,
        )
    out.print(table)


def print_summary(summary: RunSummary, out: Optional[Console] = None) -> None:
    out = out or console
    if summary.terminated_early:
        out.print("[yellow]Terminated search early: no award inventory found on recent days.[/yellow]")
    if summary.skipped > 0:
        out.print(f"Skipped {summary.skipped} queries.")
    if summary.failed > 0:
        out.print(f"[red]{summary.failed} queries failed.[/red]")
    out.print(
        f"[green]Search complete![/green] {summary.searched} of {summary.planned} queries run, "
        f"{summary.awards_saved} awards saved."
    )
