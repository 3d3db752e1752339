"""Tests for the award database."""

import copy
import json
import sqlite3
import sys
import os
from datetime import date
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from award_sweep.errors import StorageError
from award_sweep.models import Query, SearchResults
from award_sweep.normalize import normalize_awards
from award_sweep.placeholders import placeholder_awards
from award_sweep.redundancy import is_redundant
from award_sweep.routes import route_key
from award_sweep.storage import Storage
from tests.mock_data import SQ_NONSTOP, SQ_REDEYE_SOLD_OUT, SQ_TG_CONNECTION

D1 = date(2024, 1, 1)
D3 = date(2024, 1, 3)


@pytest.fixture
def storage(tmp_path):
    db = Storage(tmp_path / "awards.db")
    yield db
    db.close()


def make_query(**changes):
    fields = dict(
        engine="SQ",
        from_city="SIN",
        to_city="HKG",
        depart_date=D1,
        return_date=None,
        cabin="business",
        quantity=1,
        json_path="/tmp/SQ-SIN-HKG.json.gz",
    )
    fields.update(changes)
    return Query(**fields)


def record(storage, query, *candidates):
    request_id = storage.save_request(
        SearchResults(query=query, awards=list(candidates), html_assets=["a.html.gz"])
    )
    awards = normalize_awards(query, [copy.deepcopy(c) for c in candidates])
    storage.save_awards(request_id, awards)
    return request_id


def test_creates_parent_directory(tmp_path):
    path = tmp_path / "nested" / "dir" / "awards.db"
    with Storage(path) as db:
        assert db.count("requests") == 0
    assert path.exists()


def test_empty_history(storage):
    query = make_query(return_date=D3)
    found = storage.find(query)
    assert len(found) == 2
    for history in found.values():
        assert history.requests == []
        assert history.awards == []


def test_request_round_trip(storage, tmp_path):
    query = make_query(quantity=2)
    request_id = storage.save_request(
        SearchResults(query=query, html_assets=["x.html.gz"], json_assets=["x.json.gz"])
    )
    assert request_id == 1

    history = storage.find(query)[route_key(query, D1)]
    assert [r.quantity for r in history.requests] == [2]

    conn = sqlite3.connect(tmp_path / "awards.db")
    row = conn.execute("SELECT json_path, assets, return_date FROM requests").fetchone()
    conn.close()
    assert row[0] == "/tmp/SQ-SIN-HKG.json.gz"
    assert json.loads(row[1]) == {"html": ["x.html.gz"], "json": ["x.json.gz"]}
    assert row[2] is None


def test_awards_and_segments_saved(storage):
    record(storage, make_query(), SQ_NONSTOP, SQ_TG_CONNECTION)
    assert storage.count("requests") == 1
    assert storage.count("awards") == 2
    assert storage.count("segments") == 3


def test_confirmed_empty_award_read_back(storage):
    query = make_query(quantity=2)
    record(storage, query, SQ_REDEYE_SOLD_OUT)

    history = storage.find(query)[route_key(query, D1)]
    assert len(history.awards) == 1
    prior = history.awards[0]
    assert prior.quantity == 2
    assert prior.has_segments is True
    assert prior.fares == ""


def test_fares_stored_space_joined(storage):
    query = make_query()
    candidate = copy.deepcopy(SQ_NONSTOP)
    candidate["fares"] = "I Z"
    record(storage, query, candidate)
    history = storage.find(query)[route_key(query, D1)]
    assert history.awards[0].fares == "I Z"


def test_roundtrip_request_covers_inbound_leg(storage):
    # SIN -> HKG Jan 1, back Jan 3: also answers HKG -> SIN on Jan 3
    storage.save_request(SearchResults(query=make_query(return_date=D3)))

    inbound = make_query(from_city="HKG", to_city="SIN", depart_date=D3)
    history = storage.find(inbound)[route_key(inbound, D3)]
    assert [r.quantity for r in history.requests] == [1]


def test_history_scoped_by_cabin_and_partners(storage):
    storage.save_request(SearchResults(query=make_query()))
    for other in (make_query(cabin="first"), make_query(partners=True), make_query(engine="CX")):
        history = storage.find(other)[route_key(other, D1)]
        assert history.requests == []


def test_redundant_after_save(storage):
    query = make_query(quantity=3)
    record(storage, make_query(quantity=2), SQ_REDEYE_SOLD_OUT)
    assert is_redundant(query, storage.find(query))
    assert not is_redundant(make_query(quantity=1), storage.find(make_query(quantity=1)))


def test_placeholder_read_back_as_confirmed_empty(storage):
    query = make_query(quantity=2, return_date=D3)
    request_id = storage.save_request(SearchResults(query=query, awards=[]))
    storage.save_awards(request_id, placeholder_awards(query, []))

    assert storage.count("awards") == 8
    assert storage.count("segments") == 0
    for key, history in storage.find(query).items():
        assert len(history.awards) == 1, key
        prior = history.awards[0]
        assert (prior.quantity, prior.has_segments, prior.fares) == (2, True, "")


def test_awards_scoped_by_cabin(storage):
    first_class = copy.deepcopy(SQ_REDEYE_SOLD_OUT)
    first_class["cabin"] = "first"
    record(storage, make_query(), first_class)

    query = make_query()
    assert storage.find(query)[route_key(query, D1)].awards == []


def test_count_rejects_unknown_table(storage):
    with pytest.raises(ValueError):
        storage.count("sqlite_master")


def test_closed_storage_raises(tmp_path):
    db = Storage(tmp_path / "awards.db")
    db.close()
    db.close()  # idempotent
    assert db.conn is None
    with pytest.raises(StorageError):
        db.find(make_query())
    with pytest.raises(StorageError):
        db.save_request(SearchResults(query=make_query()))


def test_unopenable_path(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    with pytest.raises(StorageError):
        Storage(blocker / "awards.db")
