"""Tests for console output."""

import copy
import io
import sys
import os
from datetime import date
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from rich.console import Console

from award_sweep.formatter import format_duration, print_awards, print_summary
from award_sweep.models import Query, RunSummary
from award_sweep.normalize import normalize_awards
from tests.mock_data import SQ_REDEYE_SOLD_OUT, SQ_TG_CONNECTION


def capture():
    out = io.StringIO()
    return out, Console(file=out, width=160)


def test_format_duration():
    assert format_duration(45) == "45m"
    assert format_duration(60) == "1h 0m"
    assert format_duration(405) == "6h 45m"


def test_print_awards_table():
    query = Query(
        engine="SQ",
        from_city="SIN",
        to_city="HKG",
        depart_date=date(2024, 1, 1),
        return_date=None,
        cabin="business",
    )
    awards = normalize_awards(query, [copy.deepcopy(SQ_TG_CONNECTION), copy.deepcopy(SQ_REDEYE_SOLD_OUT)])
    out, console = capture()
    print_awards(awards, console)
    text = out.getvalue()
    assert "SQ 708 → TG 600" in text
    assert "Business (mixed)" in text
    assert "6h 45m" in text
    assert "none" in text


def test_print_awards_empty():
    out, console = capture()
    print_awards([], console)
    assert "No award flights found" in out.getvalue()


def test_print_summary():
    out, console = capture()
    print_summary(
        RunSummary(planned=10, searched=4, skipped=3, failed=1, awards_saved=7, terminated_early=True),
        console,
    )
    text = out.getvalue()
    assert "Terminated search early" in text
    assert "Skipped 3 queries." in text
    assert "1 queries failed." in text
    assert "4 of 10 queries run, 7 awards saved." in text
