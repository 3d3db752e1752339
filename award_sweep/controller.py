"""Running a planned award search to completion.

Queries run one at a time, in plan order. Queries already answered by the
award database are skipped without touching the website. The engine is
started lazily, so a run whose queries are all redundant never opens a
browser.
"""

import asyncio
import logging
import random
from datetime import date
from typing import Callable, Optional

from rich.console import Console

from .accounts import get_credentials
from .config import SearchOptions
from .dedupe import simplify_awards
from .engines.base import Engine
from .errors import NormalizationError, SetupError
from .formatter import print_awards, print_query
from .models import Award, Query, RunSummary, SearchResults
from .normalize import normalize_awards
from .placeholders import placeholder_awards
from .planner import generate_queries
from .redundancy import is_redundant
from .routes import describe
from .storage import Storage

logger = logging.getLogger(__name__)


class SearchController:
    """Drives one search run against one engine."""

    def __init__(
        self,
        engine: Engine,
        storage: Storage,
        options: SearchOptions,
        credentials: Callable[[str, int], tuple[str, str]] = get_credentials,
        console: Optional[Console] = None,
        today: Optional[date] = None,
    ):
        self.engine = engine
        self.storage = storage
        self.options = options
        self.credentials = credentials
        self.console = console
        self.today = today
        self.summary = RunSummary()
        self._started = False

    def plan(self) -> list[Query]:
        valid_end = self.engine.valid_date_range(self.today)[1]
        return generate_queries(self.options, self.engine.config, valid_end)

    async def run(self) -> RunSummary:
        """Execute every planned query.

        Raises:
            SetupError: the engine could not be started.
            StorageError: the award database failed.
        """
        opts = self.options
        days_remaining = opts.terminate
        # Departure date being searched, and what its queries have returned so far
        current_date = None
        date_parsed = date_found = False
        try:
            queries = self.plan()
            self.summary.planned = len(queries)
            logger.info(
                f"Searching {opts.days} days of award inventory: "
                f"{opts.start.isoformat()} - {opts.end.isoformat()} ({len(queries)} queries)"
            )

            for query in queries:
                if not opts.force and is_redundant(query, self.storage.find(query)):
                    self.summary.skipped += 1
                    continue

                if opts.terminate and opts.parse and query.depart_date != current_date:
                    # A date only counts as empty once all of its queries have run
                    if date_parsed and not date_found:
                        days_remaining -= 1
                        if days_remaining < 0:
                            logger.warning(
                                f"Terminating search after no award inventory found for {opts.terminate} days."
                            )
                            self.summary.terminated_early = True
                            break
                    current_date = query.depart_date
                    date_parsed = date_found = False

                if not self._started:
                    await self._start_engine()

                if self.console is not None:
                    print_query(query, self.console)

                results = await self._search(query)
                if results is None:
                    self.summary.failed += 1
                    continue
                self.summary.searched += 1

                awards = self._record(results)
                if self.console is not None and awards is not None:
                    print_awards(awards, self.console)

                if awards is not None:
                    date_parsed = True
                    if awards:
                        date_found = True
                        days_remaining = opts.terminate

                if results.blocked:
                    await self._backoff()

            if self.summary.skipped > 0:
                logger.info(f"Skipped {self.summary.skipped} queries.")
            logger.info("Search complete!")
            return self.summary
        finally:
            await self._teardown()

    async def _start_engine(self) -> None:
        config = self.engine.config
        self._started = True
        try:
            creds = None
            if config.login_required:
                creds = self.credentials(config.id, self.options.account)
            await self.engine.initialize(
                credentials=creds,
                parse=self.options.parse,
                headless=self.options.headless,
            )
        except SetupError:
            raise
        except Exception as e:
            raise SetupError(f"Failed to initialize {config.name} ({config.id}): {e}") from e

    async def _search(self, query: Query) -> Optional[SearchResults]:
        try:
            results = await self.engine.search(query)
        except Exception as e:
            logger.error(f"Unexpected error occurred while searching {describe(query)}: {e}")
            logger.debug("Search failure details", exc_info=True)
            return None
        if results.error:
            logger.error(f"Search failed for {describe(query)}: {results.error}")
            return None
        return results

    def _record(self, results: SearchResults) -> Optional[list[Award]]:
        """Save the request and, when parsed, its awards.

        Legs and cabins the results say nothing about are saved as
        placeholders. Returns the parsed awards, or None if nothing was parsed.
        """
        request_id = self.storage.save_request(results)
        if not self.options.parse or results.awards is None:
            return None
        query = results.query
        try:
            awards = normalize_awards(query, results.awards, self.engine.config.own_airlines)
        except NormalizationError as e:
            logger.error(f"Discarding awards for {describe(query)}: {e}")
            return None
        awards = simplify_awards(awards)
        self.storage.save_awards(request_id, awards + placeholder_awards(query, awards))
        self.summary.awards_saved += len(awards)
        return awards

    async def _backoff(self) -> None:
        low, high = self.options.backoff
        delay = random.uniform(low, high)
        logger.warning(f"Blocked by server, waiting for {delay:.0f} seconds")
        await asyncio.sleep(delay)

    async def _teardown(self) -> None:
        try:
            if self._started:
                try:
                    await self.engine.close()
                except Exception as e:
                    logger.warning(f"Error closing {self.engine.config.id} engine: {e}")
        finally:
            self.storage.close()


async def run_search(
    engine: Engine,
    options: SearchOptions,
    storage: Optional[Storage] = None,
    console: Optional[Console] = None,
) -> RunSummary:
    """Convenience wrapper: open the default award database and run a search."""
    storage = storage or Storage()
    return await SearchController(engine, storage, options, console=console).run()
