"""Data models for award-sweep searches and results."""

from dataclasses import dataclass, field
from datetime import date, time
from typing import Any, NamedTuple, Optional


class Trip(NamedTuple):
    """Route and dates of one planned query."""
    from_city: str
    to_city: str
    depart_date: date
    return_date: Optional[date] = None


@dataclass
class Query:
    """A single search request issued to an engine."""
    engine: str
    from_city: str
    to_city: str
    depart_date: date
    return_date: Optional[date]
    cabin: str
    quantity: int = 1
    partners: bool = False
    json_path: Optional[str] = None
    html_path: Optional[str] = None
    screenshot_path: Optional[str] = None

    @property
    def trip(self) -> Trip:
        return Trip(self.from_city, self.to_city, self.depart_date, self.return_date)

    @property
    def oneway(self) -> bool:
        return self.return_date is None


@dataclass
class Segment:
    """One flight within an award itinerary."""
    airline: str       # IATA 2-letter code
    flight: str        # e.g. "SQ 12"
    from_city: str
    to_city: str
    date: date
    departure: time
    arrival: time
    duration: int      # minutes
    lag_days: int      # days the arrival is offset from `date`
    next_connection: Optional[int] = None  # minutes until the next segment departs
    stops: int = 0
    cabin: Optional[str] = None


@dataclass
class Award:
    """A normalized award offer for one itinerary."""
    engine: str
    partner: bool
    from_city: str
    to_city: str
    date: date
    cabin: str
    mixed: bool
    duration: int      # first departure to last arrival, minutes
    travel_time: int   # flying time plus layovers, minutes
    stops: int
    quantity: int
    fares: list[str]   # empty = flight seen but no award seats
    segments: list[Segment]
    mileage: Optional[int] = None
    placeholder: bool = False  # marks a searched leg and cabin with no inventory, has no segments

    @property
    def flights(self) -> tuple[str, ...]:
        return tuple(s.flight for s in self.segments)

    @property
    def available(self) -> bool:
        return bool(self.fares)


class RouteKey(NamedTuple):
    """Grouping key for prior requests/awards on one leg of a route."""
    engine: str
    from_city: str
    to_city: str
    date: date
    cabin: str
    partners: bool


@dataclass
class PriorRequest:
    quantity: int


@dataclass
class PriorAward:
    quantity: int
    has_segments: bool
    fares: str  # space-joined fare codes, "" = no availability


@dataclass
class RouteHistory:
    """Requests and awards previously recorded for one route key."""
    requests: list[PriorRequest] = field(default_factory=list)
    awards: list[PriorAward] = field(default_factory=list)


@dataclass
class SearchResults:
    """Outcome of Engine.search() for one query.

    `awards` holds raw candidate records (dicts) from the engine's parser,
    or None when parsing is disabled.
    """
    query: Query
    error: Optional[str] = None
    blocked: bool = False
    awards: Optional[list[dict[str, Any]]] = None
    html_assets: list[str] = field(default_factory=list)
    json_assets: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RunSummary:
    """Counters reported at the end of a search run."""
    planned: int = 0
    searched: int = 0
    skipped: int = 0
    failed: int = 0
    awards_saved: int = 0
    terminated_early: bool = False
