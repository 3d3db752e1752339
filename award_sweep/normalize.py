"""Validation and completion of raw award records scraped by engines.

Engines emit award candidates as plain dicts. Every segment must carry the
fields only the website can know (carrier, flight, airports, date, times,
lag days) and every award must carry its fare codes. Everything else is
derived here, one resolver function per field, so that a missing value is
always filled the same way regardless of which engine produced the record.

A single malformed record rejects the whole batch.
"""

import logging
import re
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, Optional

from .config import cabin_rank
from .errors import NormalizationError
from .models import Award, Query, Segment

logger = logging.getLogger(__name__)

AIRLINE_RE = re.compile(r"^[A-Z0-9]{2}$")
AIRPORT_RE = re.compile(r"^[A-Z]{3}$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^(\d{2}):(\d{2})$")


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------

def valid_airline_code(code: Any) -> bool:
    return isinstance(code, str) and bool(AIRLINE_RE.match(code))


def valid_airport_code(code: Any) -> bool:
    return isinstance(code, str) and bool(AIRPORT_RE.match(code))


def parse_date(value: Any) -> Optional[date]:
    """A calendar date from a date or 'YYYY-MM-DD' string, None if invalid."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not DATE_RE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def parse_time(value: Any) -> Optional[time]:
    """A time of day from a time or 'HH:MM' string, None if invalid."""
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        return None
    m = TIME_RE.match(value)
    if not m:
        return None
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        return None
    return time(hour, minute)


def parse_fares(value: Any) -> Optional[list[str]]:
    """Fare codes from a space-separated string or a list, None if unusable."""
    if isinstance(value, str):
        return value.split()
    if isinstance(value, (list, tuple)):
        return [str(code).strip() for code in value if str(code).strip()]
    return None


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------

def _departs(seg: Segment) -> datetime:
    return datetime.combine(seg.date, seg.departure)


def _arrives(seg: Segment) -> datetime:
    return datetime.combine(seg.date + timedelta(days=seg.lag_days), seg.arrival)


def _minutes(delta: timedelta) -> int:
    return int(delta.total_seconds() // 60)


def segment_duration(seg: Segment) -> int:
    return _minutes(_arrives(seg) - _departs(seg))


def next_connection(seg: Segment, following: Optional[Segment]) -> Optional[int]:
    """Layover between a segment's arrival and the next departure."""
    if following is None:
        return None
    return _minutes(_departs(following) - _arrives(seg))


def trip_duration(segments: list[Segment]) -> int:
    return _minutes(_arrives(segments[-1]) - _departs(segments[0]))


def travel_time(segments: list[Segment]) -> int:
    flying = sum(s.duration for s in segments)
    layovers = sum(s.next_connection or 0 for s in segments)
    return flying + layovers


def total_stops(segments: list[Segment]) -> int:
    return sum(s.stops for s in segments) + len(segments) - 1


def best_cabin(segments: list[Segment], fallback: str) -> str:
    """Highest service level flown on any segment."""
    cabins = [s.cabin for s in segments if s.cabin]
    if not cabins:
        return fallback
    return max(cabins, key=cabin_rank)


def mixed_cabin(segments: list[Segment]) -> bool:
    return len({s.cabin for s in segments if s.cabin}) > 1


def partner_award(own_airlines: Iterable[str], segments: list[Segment]) -> bool:
    """An award is a partner award if any flight is operated by another carrier."""
    own = set(own_airlines)
    return any(s.airline not in own for s in segments)


# ---------------------------------------------------------------------------
# Field resolution
# ---------------------------------------------------------------------------

def _given(record: dict, key: str) -> Any:
    """A value the source supplied, None when absent or empty (0, False, '' are re-derived)."""
    return record.get(key) or None


def resolve_int(record: dict, key: str, default) -> int:
    value = _given(record, key)
    if value is None:
        return default()
    try:
        return int(value)
    except (TypeError, ValueError):
        raise NormalizationError(f"Award has invalid {key}: {record!r}", record) from None


def resolve_bool(record: dict, key: str, default) -> bool:
    value = _given(record, key)
    return default() if value is None else bool(value)


def resolve_str(record: dict, key: str, default) -> str:
    value = _given(record, key)
    return default() if not value else str(value)


def resolve_date(record: dict, key: str, default) -> date:
    value = _given(record, key)
    if value is None:
        return default()
    parsed = parse_date(value)
    if parsed is None:
        raise NormalizationError(f"Award has invalid {key}: {record!r}", record)
    return parsed


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _check_segment(raw: Any) -> Segment:
    """Validate the required fields of one segment.

    Derived fields are filled later, once all segments are known.
    """
    if not isinstance(raw, dict):
        raise NormalizationError(f"Award has malformed segment: {raw!r}", raw)
    if not valid_airline_code(raw.get("airline")):
        raise NormalizationError(f"Award has invalid airline code in segment: {raw!r}", raw)
    if raw.get("flight") is None:
        raise NormalizationError(f"Award is missing property 'flight' in segment: {raw!r}", raw)
    if not valid_airport_code(raw.get("from_city")):
        raise NormalizationError(f"Award has invalid origin airport code in segment: {raw!r}", raw)
    if not valid_airport_code(raw.get("to_city")):
        raise NormalizationError(f"Award has invalid destination airport code in segment: {raw!r}", raw)
    seg_date = parse_date(raw.get("date"))
    if seg_date is None:
        raise NormalizationError(f"Award has invalid departure date in segment: {raw!r}", raw)
    departure = parse_time(raw.get("departure"))
    if departure is None:
        raise NormalizationError(f"Award has invalid departure in segment: {raw!r}", raw)
    arrival = parse_time(raw.get("arrival"))
    if arrival is None:
        raise NormalizationError(f"Award has invalid arrival in segment: {raw!r}", raw)
    lag_days = raw.get("lag_days")
    if not _is_count(lag_days):
        raise NormalizationError(f"Award has invalid lag days in segment: {raw!r}", raw)

    return Segment(
        airline=raw["airline"],
        flight=str(raw["flight"]),
        from_city=raw["from_city"],
        to_city=raw["to_city"],
        date=seg_date,
        departure=departure,
        arrival=arrival,
        duration=0,
        lag_days=lag_days,
        cabin=raw.get("cabin"),
    )


def normalize_segments(raw_segments: list) -> list[Segment]:
    segments = [_check_segment(raw) for raw in raw_segments]
    for idx, (raw, seg) in enumerate(zip(raw_segments, segments)):
        following = segments[idx + 1] if idx + 1 < len(segments) else None
        seg.duration = resolve_int(raw, "duration", lambda: segment_duration(seg))
        seg.next_connection = resolve_int(raw, "next_connection", lambda: next_connection(seg, following))
        seg.stops = resolve_int(raw, "stops", lambda: 0)
    return segments


def normalize_award(
    query: Query,
    record: dict,
    airlines: Optional[Iterable[str]] = None,
) -> Award:
    """Validate one candidate and fill in every derived field."""
    raw_segments = record.get("segments")
    if not raw_segments or not isinstance(raw_segments, (list, tuple)):
        raise NormalizationError(f"Missing segments for award: {record!r}", record)

    segments = normalize_segments(list(raw_segments))
    first, last = segments[0], segments[-1]

    if "fares" not in record or record["fares"] is None:
        raise NormalizationError(f"Award is missing property 'fares': {record!r}", record)
    fares = parse_fares(record["fares"])
    if fares is None:
        raise NormalizationError(f"Award has malformed fares: {record!r}", record)

    own_airlines = set(airlines) if airlines else {query.engine}

    return Award(
        engine=resolve_str(record, "engine", lambda: query.engine),
        partner=resolve_bool(record, "partner", lambda: partner_award(own_airlines, segments)),
        from_city=resolve_str(record, "from_city", lambda: first.from_city),
        to_city=resolve_str(record, "to_city", lambda: last.to_city),
        date=resolve_date(record, "date", lambda: first.date),
        cabin=resolve_str(record, "cabin", lambda: best_cabin(segments, query.cabin)),
        mixed=resolve_bool(record, "mixed", lambda: mixed_cabin(segments)),
        duration=resolve_int(record, "duration", lambda: trip_duration(segments)),
        travel_time=resolve_int(record, "travel_time", lambda: travel_time(segments)),
        stops=resolve_int(record, "stops", lambda: total_stops(segments)),
        quantity=resolve_int(record, "quantity", lambda: query.quantity),
        fares=fares,
        segments=segments,
        mileage=resolve_int(record, "mileage", lambda: None),
    )


def normalize_awards(
    query: Query,
    candidates: list[dict],
    airlines: Optional[Iterable[str]] = None,
) -> list[Award]:
    """Normalize a batch of candidates, in order.

    Raises:
        NormalizationError: on the first invalid record; nothing is returned
            for the batch.
    """
    awards = [normalize_award(query, record, airlines) for record in candidates]
    logger.debug(f"Normalized {len(awards)} awards for {query.from_city}->{query.to_city}")
    return awards
