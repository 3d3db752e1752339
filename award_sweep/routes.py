"""Route keys, asset paths and display strings for queries."""

from datetime import date
from pathlib import Path
from typing import Optional

from . import config
from .models import Query, RouteKey


def route_key(query: Query, leg_date: date, reverse: bool = False) -> RouteKey:
    """Key for one leg of a query.

    The outbound leg flies from_city -> to_city; with reverse=True the key is
    for the inbound leg (to_city -> from_city).
    """
    from_city, to_city = query.from_city, query.to_city
    if reverse:
        from_city, to_city = to_city, from_city
    return RouteKey(
        engine=query.engine,
        from_city=from_city,
        to_city=to_city,
        date=leg_date,
        cabin=query.cabin,
        partners=query.partners,
    )


def leg_keys(query: Query) -> list[RouteKey]:
    """Route keys of every leg a query covers, outbound first."""
    keys = [route_key(query, query.depart_date)]
    if query.return_date:
        keys.append(route_key(query, query.return_date, reverse=True))
    return keys


def asset_path(query: Query, assets_dir: Optional[Path] = None) -> str:
    """Base path (without extension) for the assets saved by a query."""
    assets_dir = assets_dir or config.ASSETS_DIR
    parts = [
        query.engine,
        query.from_city,
        query.to_city,
        query.depart_date.isoformat(),
    ]
    if query.return_date:
        parts.append(query.return_date.isoformat())
    parts.append(query.cabin)
    parts.append(str(query.quantity))
    if query.partners:
        parts.append("partners")
    return str(assets_dir / query.engine / "-".join(parts))


def describe(query: Query) -> str:
    """Human readable route, e.g. 'SIN → HKG 2024-01-01 (business, 2 pax)'."""
    text = f"{query.from_city} → {query.to_city} {query.depart_date.isoformat()}"
    if query.return_date:
        text = (
            f"{query.from_city} ⇄ {query.to_city} "
            f"{query.depart_date.isoformat()} / {query.return_date.isoformat()}"
        )
    return f"{text} ({query.cabin}, {query.quantity} pax)"
