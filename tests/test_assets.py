"""Tests for writing raw search assets."""

import gzip
import json
import sys
import os
from datetime import date
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from award_sweep.engines.assets import AssetWriter, append_path
from award_sweep.models import Query


def test_append_path():
    assert append_path("/data/SQ-SIN-HKG.html.gz", "-2") == "/data/SQ-SIN-HKG-2.html.gz"
    assert append_path("/data/SQ-SIN-HKG", "-2") == "/data/SQ-SIN-HKG-2"
    assert append_path("SQ.json", "-x") == "SQ-x.json"
    assert append_path("", "-2") == ""


def test_dots_in_directories_ignored():
    assert append_path("/home/a.b/SQ.jpg", "-1") == "/home/a.b/SQ-1.jpg"


@pytest.fixture
def query(tmp_path):
    base = tmp_path / "SQ" / "SQ-SIN-HKG-2024-01-01-business-1"
    return Query(
        engine="SQ",
        from_city="SIN",
        to_city="HKG",
        depart_date=date(2024, 1, 1),
        return_date=None,
        cabin="business",
        json_path=f"{base}.json.gz",
        html_path=f"{base}.html",
    )


def test_save_json_gzipped(query, tmp_path):
    writer = AssetWriter(query)
    path = writer.save_json("flights", {"fares": ["I"]})

    assert path == str(tmp_path / "SQ" / "SQ-SIN-HKG-2024-01-01-business-1-flights.json.gz")
    with gzip.open(path, "rt") as fp:
        assert json.load(fp) == {"fares": ["I"]}
    assert writer.json_assets == [path]
    assert writer.html_assets == []


def test_save_html_plain(query):
    writer = AssetWriter(query)
    first = writer.save_html("results", "<html>1</html>")
    second = writer.save_html("calendar", "<html>2</html>")

    assert first.endswith("-results.html")
    with open(first, encoding="utf-8") as fp:
        assert fp.read() == "<html>1</html>"
    assert writer.html_assets == [first, second]


def test_missing_path_rejected(query):
    query.html_path = None
    with pytest.raises(ValueError):
        AssetWriter(query).save_html("results", "<html></html>")
