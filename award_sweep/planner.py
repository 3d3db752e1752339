"""Expanding a date range into the queries needed to cover it.

A round-trip optimized engine returns both legs of a round trip from one
query, so a window of N days needs only about N round trips: each day's
outbound flights come from a query departing that day, and each day's
return flights come from a query returning that day. The legs that cannot
be paired inside the window (returns near the start, departures near the
end) are covered by extra queries anchored at the window edges.
"""

import logging
from datetime import date, timedelta

from . import routes
from .config import SearchOptions
from .engines.base import EngineConfig
from .models import Query, Trip

logger = logging.getLogger(__name__)


def _edge_trip(
    day: date,
    leg_cities: tuple[str, str],
    other_cities: tuple[str, str],
    engine: EngineConfig,
    valid_end: date,
) -> Trip:
    """Query covering the `leg_cities` flights departing on `day`.

    Uses a one-way search when the engine supports it, else a round trip of
    the engine's minimum length. The round trip departs on `day` when its
    return still falls in the searchable range; otherwise it returns on `day`,
    flying the opposite direction first.
    """
    if engine.oneway_supported:
        return Trip(*leg_cities, day, None)
    return_date = day + timedelta(days=engine.trip_min_days)
    if return_date <= valid_end:
        return Trip(*leg_cities, day, return_date)
    return Trip(*other_cities, day - timedelta(days=engine.trip_min_days), day)


def plan_trips(
    start: date,
    end: date,
    origin: str,
    destination: str,
    engine: EngineConfig,
    valid_end: date,
    oneway: bool = False,
    reverse: bool = False,
) -> list[Trip]:
    """Ordered, de-duplicated route/date skeletons covering [start, end]."""
    days = (end - start).days + 1
    if days <= 0:
        raise ValueError(f"Empty date range: {start} - {end}")

    gap = 0 if (oneway or not engine.roundtrip_optimized) else min(engine.trip_min_days, days)
    depart_cities = (origin, destination)
    return_cities = (destination, origin)
    trips: list[Trip] = []

    # Return legs at the beginning of the range
    for i in range(gap):
        day = start + timedelta(days=i)
        trips.append(_edge_trip(day, return_cities, depart_cities, engine, valid_end))

    # Middle of the range
    for i in range(days - gap):
        day = start + timedelta(days=i)
        if engine.roundtrip_optimized:
            return_date = None if oneway else day + timedelta(days=gap)
            trips.append(Trip(*depart_cities, day, return_date))
        else:
            trips.append(Trip(*depart_cities, day, None))
            if not oneway:
                trips.append(Trip(*return_cities, day, None))

    # Outbound legs at the end of the range
    for i in range(gap - 1, -1, -1):
        day = end - timedelta(days=i)
        trips.append(_edge_trip(day, depart_cities, return_cities, engine, valid_end))

    # Edge queries can coincide with each other near the end of the valid range
    unique = list(dict.fromkeys(trips))
    if len(unique) < len(trips):
        logger.debug(f"Dropped {len(trips) - len(unique)} duplicate queries")

    if reverse:
        unique.reverse()
    return unique


def generate_queries(
    options: SearchOptions,
    engine: EngineConfig,
    valid_end: date,
    assets_dir=None,
) -> list[Query]:
    """Build the full query list for a search run."""
    trips = plan_trips(
        options.start,
        options.end,
        options.origin,
        options.destination,
        engine,
        valid_end,
        oneway=options.oneway,
        reverse=options.reverse,
    )
    queries = []
    for trip in trips:
        query = Query(
            engine=engine.id,
            from_city=trip.from_city,
            to_city=trip.to_city,
            depart_date=trip.depart_date,
            return_date=trip.return_date,
            cabin=options.cabin,
            quantity=options.quantity,
            partners=options.partners,
        )
        base = routes.asset_path(query, assets_dir)
        query.json_path = base + ".json.gz"
        query.html_path = base + ".html.gz"
        query.screenshot_path = base + ".jpg"
        queries.append(query)
    return queries

