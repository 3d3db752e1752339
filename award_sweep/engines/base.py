"""Base engine interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from ..models import Query, SearchResults


@dataclass(frozen=True)
class EngineConfig:
    """Static capabilities of an airline website engine."""
    id: str                   # IATA 2-letter code of the airline, e.g. "SQ"
    name: str                 # e.g. "Singapore Airlines"
    website: str = ""
    login_required: bool = False
    roundtrip_optimized: bool = False  # both legs are searched by one query
    trip_min_days: int = 0
    oneway_supported: bool = True
    min_days: int = 0         # earliest searchable date, days from today
    max_days: int = 330       # latest searchable date, days from today
    airlines: frozenset = field(default_factory=frozenset)  # carriers not counted as partners

    @property
    def own_airlines(self) -> frozenset:
        return self.airlines | {self.id}


class Engine(ABC):
    """Abstract base class for all airline website engines.

    Engines are supplied per airline. Shared chores such as writing search
    assets live in separate services (see AssetWriter), not in this class.
    """

    config: EngineConfig

    def valid_date_range(self, today: Optional[date] = None) -> tuple[date, date]:
        """First and last dates the website allows searching."""
        today = today or date.today()
        return (
            today + timedelta(days=self.config.min_days),
            today + timedelta(days=self.config.max_days),
        )

    @abstractmethod
    async def initialize(
        self,
        credentials: Optional[tuple[str, str]] = None,
        parse: bool = True,
        headless: bool = False,
    ) -> None:
        """
        Prepare a session, logging in when the website requires it.

        Args:
            credentials: (username, password), or None if login is not required
            parse: Whether search() should parse its assets into award candidates
            headless: Run the browser without a window

        Raises:
            Any exception on failure; the caller treats it as fatal.
        """
        ...

    @abstractmethod
    async def search(self, query: Query) -> SearchResults:
        """
        Run one query against the website.

        Returns:
            SearchResults with `error` set on a handled failure, `blocked` set
            when the site throttled us, and `awards` holding raw candidate
            dicts when parsing is enabled.

        Raises:
            EngineError: the search could not be completed. The controller
            logs it and moves on to the next query.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the browser session."""
        ...
