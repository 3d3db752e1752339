"""Recording which legs and cabins a search found empty.

A search that returns nothing for a cabin on a leg is itself a result: a
later query for a larger party on the same leg cannot do better. Such gaps
are saved as placeholder awards (no fares, no segments) so the redundancy
check can see them.
"""

from datetime import date
from typing import Iterable

from .config import CABINS
from .models import Award, Query


def query_legs(query: Query) -> list[tuple[str, str, date]]:
    """(from_city, to_city, date) of each leg a query searched."""
    legs = [(query.from_city, query.to_city, query.depart_date)]
    if query.return_date:
        legs.append((query.to_city, query.from_city, query.return_date))
    return legs


def placeholder_awards(
    query: Query,
    awards: list[Award],
    cabins: Iterable[str] = CABINS,
) -> list[Award]:
    """Placeholders for every leg and cabin with no award in `awards`."""
    covered = {(a.from_city, a.to_city, a.date, a.cabin) for a in awards}
    placeholders = []
    for from_city, to_city, day in query_legs(query):
        for cabin in cabins:
            if (from_city, to_city, day, cabin) in covered:
                continue
            placeholders.append(
                Award(
                    engine=query.engine,
                    partner=False,
                    from_city=from_city,
                    to_city=to_city,
                    date=day,
                    cabin=cabin,
                    mixed=False,
                    duration=0,
                    travel_time=0,
                    stops=0,
                    quantity=query.quantity,
                    fares=[],
                    segments=[],
                    placeholder=True,
                )
            )
    return placeholders
