"""award-sweep CLI - search airline websites for award inventory over a date range."""

import asyncio
import logging
from datetime import date
from typing import Annotated, Optional

import typer

from . import engines
from .config import CABINS, DEFAULT_BACKOFF, SearchOptions
from .controller import run_search
from .engines.base import Engine
from .errors import AwardSweepError, ValidationError
from .formatter import console, print_summary
from .storage import Storage

app = typer.Typer(
    name="award-sweep",
    help="✈ Sweep airline websites for award inventory over a range of dates",
    rich_markup_mode="rich",
)

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)


def parse_date(value: str, label: str) -> date:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label} date: {value}") from None


def validate_arguments(
    options: SearchOptions,
    engine: Engine,
    today: Optional[date] = None,
) -> SearchOptions:
    """Check a search configuration against the engine, clamping the dates.

    Raises:
        ValidationError: if the configuration cannot be searched.
    """
    if options.cabin not in CABINS:
        raise ValidationError(f"Unrecognized cabin specified: {options.cabin}")
    if options.end < options.start:
        raise ValidationError(
            f"Invalid date range: {options.start.isoformat()} - {options.end.isoformat()}"
        )
    if options.quantity < 1:
        raise ValidationError(f"Invalid quantity: {options.quantity}")
    if options.account < 0:
        raise ValidationError(f"Invalid account index: {options.account}")
    if options.terminate < 0:
        raise ValidationError(f"Invalid termination setting: {options.terminate}")
    low, high = options.backoff
    if low < 0 or high < low:
        raise ValidationError(f"Invalid backoff range: {low} - {high}")

    cfg = engine.config
    if options.origin == options.destination:
        raise ValidationError(f"Origin and destination are the same: {options.origin}")

    # Clamp the search range to what the website allows
    first, last = engine.valid_date_range(today)
    if options.end < first or options.start > last:
        raise ValidationError(
            f"{cfg.name} ({cfg.id}) only supports searching within the range: "
            f"{first.isoformat()} - {last.isoformat()}"
        )
    if options.start < first:
        logger.warning(
            f"{cfg.name} ({cfg.id}) can only search from {cfg.min_days} day(s) from today, "
            f"adjusting start of search range to: {first.isoformat()}"
        )
        options.start = first
    if options.end > last:
        logger.warning(
            f"{cfg.name} ({cfg.id}) can only search up to {cfg.max_days} day(s) from today, "
            f"adjusting end of search range to: {last.isoformat()}"
        )
        options.end = last
    return options


@app.command()
def search(
    website: Annotated[str, typer.Option("--website", "-w", prompt="Airline website to search (2-letter code)?", help="IATA 2-letter code of the airline whose website to search")],
    from_city: Annotated[str, typer.Option("--from", "-f", prompt="Departure city (3-letter code)?", help="IATA 3-letter code of the departure airport")],
    to_city: Annotated[str, typer.Option("--to", "-t", prompt="Arrival city (3-letter code)?", help="IATA 3-letter code of the arrival airport")],
    cabin: Annotated[str, typer.Option("--cabin", "-c", prompt=f"Desired cabin class ({'/'.join(CABINS)})?", help=f"Cabin ({', '.join(CABINS)})")],
    start: Annotated[str, typer.Option("--start", "-s", prompt="Start date of search range (YYYY-MM-DD)?", help="Starting date of the search range (YYYY-MM-DD)")],
    end: Annotated[Optional[str], typer.Option("--end", "-e", help="Ending date of the search range (YYYY-MM-DD), defaults to start")] = None,
    quantity: Annotated[int, typer.Option("--quantity", "-q", help="# of passengers traveling")] = 1,
    account: Annotated[int, typer.Option("--account", "-a", help="Index of account to use")] = 0,
    partners: Annotated[bool, typer.Option("--partners", "-p", help="Include partner awards")] = False,
    oneway: Annotated[bool, typer.Option("--oneway", "-o", help="Search one-way award inventory only (default: both directions)")] = False,
    headless: Annotated[bool, typer.Option("--headless", help="Run the browser in headless mode")] = False,
    parse: Annotated[bool, typer.Option("--parser/--no-parser", help="Parse search results")] = True,
    reverse: Annotated[bool, typer.Option("--reverse", "-r", help="Run queries in reverse chronological order")] = False,
    terminate: Annotated[int, typer.Option("--terminate", help="Terminate search if no results are found for n successive days")] = 0,
    force: Annotated[bool, typer.Option("--force", help="Re-run queries, even if already in the database")] = False,
    backoff_min: Annotated[float, typer.Option("--backoff-min", help="Minimum seconds to wait when blocked")] = DEFAULT_BACKOFF[0],
    backoff_max: Annotated[float, typer.Option("--backoff-max", help="Maximum seconds to wait when blocked")] = DEFAULT_BACKOFF[1],
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose logging")] = False,
):
    """
    🔍 Search award inventory over a date range.

    Examples:

      award-sweep search -w SQ -f SIN -t HKG -c business -s 2025-06-01 -e 2025-06-30

      award-sweep search -w SQ -f SIN -t NRT -c first -s 2025-06-01 --oneway --terminate 7
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    website = website.upper()
    if not engines.supported(website):
        console.print(f"[red]Unsupported airline website to search: {website}[/red]")
        raise typer.Exit(1)
    engine = engines.load_engine(website)

    try:
        start_date = parse_date(start, "start")
        end_date = parse_date(end, "end") if end else start_date
        options = validate_arguments(
            SearchOptions(
                website=website,
                origin=from_city.upper(),
                destination=to_city.upper(),
                cabin=cabin.lower(),
                start=start_date,
                end=end_date,
                quantity=quantity,
                account=account,
                oneway=oneway,
                partners=partners,
                headless=headless,
                parse=parse,
                reverse=reverse,
                terminate=terminate,
                force=force,
                backoff=(backoff_min, backoff_max),
            ),
            engine,
        )
    except ValidationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(
        f"Searching {options.days} days of award inventory: "
        f"{options.start.isoformat()} - {options.end.isoformat()}"
    )
    try:
        summary = asyncio.run(run_search(engine, options, Storage(), console=console))
    except AwardSweepError as e:
        console.print(f"[red]A fatal error occurred! {e}[/red]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("[yellow]Search interrupted.[/yellow]")
        raise typer.Exit(130)

    print_summary(summary, console)


@app.command("engines")
def list_engines():
    """📋 List the airline websites that can be searched."""
    ids = engines.supported()
    if not ids:
        console.print("[dim]No engines installed.[/dim]")
        return
    for engine_id in ids:
        engine = engines.load_engine(engine_id)
        console.print(f"  [bold]{engine_id}[/bold] - {engine.config.name}")


if __name__ == "__main__":
    app()
