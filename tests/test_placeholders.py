"""Tests for recording legs and cabins a search found empty."""

import copy
import sys
import os
from datetime import date
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from award_sweep.models import Query
from award_sweep.normalize import normalize_awards
from award_sweep.placeholders import placeholder_awards, query_legs
from tests.mock_data import SQ_NONSTOP, SQ_TG_CONNECTION

D1 = date(2024, 1, 1)
D3 = date(2024, 1, 3)


def make_query(return_date=None):
    return Query(
        engine="SQ",
        from_city="SIN",
        to_city="HKG",
        depart_date=D1,
        return_date=return_date,
        cabin="business",
        quantity=2,
    )


def test_legs():
    assert query_legs(make_query()) == [("SIN", "HKG", D1)]
    assert query_legs(make_query(D3)) == [("SIN", "HKG", D1), ("HKG", "SIN", D3)]


def test_every_cabin_when_nothing_found():
    placeholders = placeholder_awards(make_query(), [])
    assert [p.cabin for p in placeholders] == ["economy", "premium", "business", "first"]
    for p in placeholders:
        assert p.placeholder
        assert p.fares == []
        assert p.segments == []
        assert p.quantity == 2
        assert (p.engine, p.from_city, p.to_city, p.date) == ("SQ", "SIN", "HKG", D1)


def test_cabins_with_awards_left_out():
    query = make_query()
    awards = normalize_awards(query, [copy.deepcopy(SQ_NONSTOP), copy.deepcopy(SQ_TG_CONNECTION)])
    placeholders = placeholder_awards(query, awards)
    assert [p.cabin for p in placeholders] == ["economy", "premium", "first"]


def test_inbound_leg_of_round_trip():
    query = make_query(D3)
    awards = normalize_awards(query, [copy.deepcopy(SQ_NONSTOP)])
    placeholders = placeholder_awards(query, awards, cabins=["business"])
    assert [(p.from_city, p.to_city, p.date) for p in placeholders] == [("HKG", "SIN", D3)]
