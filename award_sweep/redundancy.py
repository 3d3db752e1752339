"""Deciding whether a query is already answered by stored results."""

from typing import Optional

from .models import Query, RouteHistory, RouteKey
from .routes import route_key


def _redundant_leg(history: Optional[RouteHistory], quantity: int) -> bool:
    if history is None:
        return False
    if any(r.quantity == quantity for r in history.requests):
        return True  # Already ran a request for this leg
    # No availability for an equal or smaller party means none for this one
    return any(
        a.has_segments and a.fares == "" and a.quantity <= quantity
        for a in history.awards
    )


def is_redundant(query: Query, history: dict[RouteKey, RouteHistory]) -> bool:
    """True if every leg of the query is answered by prior data."""
    outbound = history.get(route_key(query, query.depart_date))
    if not _redundant_leg(outbound, query.quantity):
        return False

    if query.return_date:
        inbound = history.get(route_key(query, query.return_date, reverse=True))
        if not _redundant_leg(inbound, query.quantity):
            return False

    return True
