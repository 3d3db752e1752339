"""Merging awards that describe the same bookable itinerary."""

from dataclasses import replace
from typing import Hashable

from .models import Award


def award_key(award: Award) -> tuple[Hashable, ...]:
    """Awards with equal keys are one itinerary offered under several fare codes."""
    return (award.flights, award.cabin, award.mixed, award.quantity, award.mileage)


def merge_fares(awards: list[Award]) -> list[str]:
    """Union of fare codes, in the order they were first seen."""
    return list(dict.fromkeys(code for award in awards for code in award.fares if code))


def simplify_awards(awards: list[Award]) -> list[Award]:
    """Collapse awards sharing a key into the first one, combining fare codes.

    Output keeps the order in which each key first appeared.
    """
    groups: dict[tuple, list[Award]] = {}
    for award in awards:
        groups.setdefault(award_key(award), []).append(award)
    return [replace(group[0], fares=merge_fares(group)) for group in groups.values()]
