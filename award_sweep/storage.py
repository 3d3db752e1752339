"""SQLite storage for search requests and the awards they returned.

Every query that reaches an engine is recorded as a request, whether or not
it was parsed. Parsed awards are stored against the request with their
segments. Legs and cabins a parsed search found empty are stored as
placeholder awards without segments. Prior requests and awards are read
back per route leg to decide whether a later query would be redundant.
"""

import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Optional

from . import config
from .errors import StorageError
from .models import (
    Award,
    PriorAward,
    PriorRequest,
    Query,
    RouteHistory,
    RouteKey,
    SearchResults,
)
from .routes import leg_keys

logger = logging.getLogger(__name__)

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS requests (
        id               INTEGER PRIMARY KEY AUTOINCREMENT,
        engine           TEXT    NOT NULL,
        partners         INTEGER NOT NULL,
        from_city        TEXT    NOT NULL,
        to_city          TEXT    NOT NULL,
        depart_date      TEXT    NOT NULL,
        return_date      TEXT,
        cabin            TEXT    NOT NULL,
        quantity         INTEGER NOT NULL,
        json_path        TEXT,
        html_path        TEXT,
        screenshot_path  TEXT,
        assets           TEXT,                -- JSON {"html": [...], "json": [...]}
        created_at       REAL    NOT NULL     -- UNIX timestamp
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS awards (
        id           INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id   INTEGER NOT NULL REFERENCES requests(id),
        engine       TEXT    NOT NULL,
        partner      INTEGER NOT NULL,
        from_city    TEXT    NOT NULL,
        to_city      TEXT    NOT NULL,
        date         TEXT    NOT NULL,
        cabin        TEXT    NOT NULL,
        mixed        INTEGER NOT NULL,
        duration     INTEGER,
        travel_time  INTEGER,
        stops        INTEGER,
        quantity     INTEGER NOT NULL,
        mileage      INTEGER,
        fares        TEXT    NOT NULL,        -- space-joined fare codes
        placeholder  INTEGER NOT NULL DEFAULT 0,  -- searched, nothing found
        created_at   REAL    NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS segments (
        id               INTEGER PRIMARY KEY AUTOINCREMENT,
        award_id         INTEGER NOT NULL REFERENCES awards(id),
        position         INTEGER NOT NULL,
        airline          TEXT    NOT NULL,
        flight           TEXT    NOT NULL,
        from_city        TEXT    NOT NULL,
        to_city          TEXT    NOT NULL,
        date             TEXT    NOT NULL,
        departure        TEXT    NOT NULL,
        arrival          TEXT    NOT NULL,
        duration         INTEGER,
        next_connection  INTEGER,
        stops            INTEGER,
        lag_days         INTEGER NOT NULL,
        cabin            TEXT
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_requests_route
    ON requests(engine, from_city, to_city, depart_date)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_awards_route
    ON awards(from_city, to_city, date)
    """,
]


class Storage:
    """Award database handle. Opened on construction, closed with close()."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path or config.DB_FILE)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.conn: Optional[sqlite3.Connection] = sqlite3.connect(self.path)
            for statement in SCHEMA:
                self.conn.execute(statement)
            self.conn.commit()
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"Cannot open award database {self.path}: {e}") from e

    def __enter__(self) -> "Storage":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _db(self) -> sqlite3.Connection:
        if self.conn is None:
            raise StorageError("Award database is closed")
        return self.conn

    # -----------------------------------------------------------------------
    # Reading
    # -----------------------------------------------------------------------

    def find(self, query: Query) -> dict[RouteKey, RouteHistory]:
        """Prior requests and awards for each leg of a query."""
        try:
            return {key: self._history(key) for key in leg_keys(query)}
        except sqlite3.Error as e:
            raise StorageError(f"Route lookup failed: {e}") from e

    def _history(self, key: RouteKey) -> RouteHistory:
        db = self._db()
        day = key.date.isoformat()
        # A leg is covered by a request flying it outbound, or by a round trip
        # in the opposite direction returning on that day
        request_rows = db.execute(
            """
            SELECT quantity FROM requests
            WHERE  engine = ? AND cabin = ? AND partners = ?
              AND  ((from_city = ? AND to_city = ? AND depart_date = ?)
                 OR (from_city = ? AND to_city = ? AND return_date = ?))
            ORDER  BY id
            """,
            (
                key.engine, key.cabin, int(key.partners),
                key.from_city, key.to_city, day,
                key.to_city, key.from_city, day,
            ),
        ).fetchall()
        award_rows = db.execute(
            """
            SELECT a.quantity, a.fares,
                   a.placeholder OR EXISTS (SELECT 1 FROM segments s WHERE s.award_id = a.id)
            FROM   awards a JOIN requests r ON a.request_id = r.id
            WHERE  r.engine = ? AND r.cabin = ? AND r.partners = ?
              AND  a.from_city = ? AND a.to_city = ? AND a.date = ? AND a.cabin = r.cabin
            ORDER  BY a.id
            """,
            (key.engine, key.cabin, int(key.partners), key.from_city, key.to_city, day),
        ).fetchall()
        return RouteHistory(
            requests=[PriorRequest(quantity=q) for (q,) in request_rows],
            awards=[
                PriorAward(quantity=q, has_segments=bool(has_segments), fares=fares)
                for q, fares, has_segments in award_rows
            ],
        )

    # -----------------------------------------------------------------------
    # Writing
    # -----------------------------------------------------------------------

    def save_request(self, results: SearchResults) -> int:
        """Record a search request, returning its id."""
        q = results.query
        assets = {"html": results.html_assets, "json": results.json_assets}
        try:
            db = self._db()
            cursor = db.execute(
                """
                INSERT INTO requests
                    (engine, partners, from_city, to_city, depart_date, return_date,
                     cabin, quantity, json_path, html_path, screenshot_path, assets,
                     created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    q.engine,
                    int(q.partners),
                    q.from_city,
                    q.to_city,
                    q.depart_date.isoformat(),
                    q.return_date.isoformat() if q.return_date else None,
                    q.cabin,
                    q.quantity,
                    q.json_path,
                    q.html_path,
                    q.screenshot_path,
                    json.dumps(assets),
                    time.time(),
                ),
            )
            db.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Saving request failed: {e}") from e
        return cursor.lastrowid

    def save_awards(self, request_id: int, awards: list[Award]) -> None:
        """Record the awards returned by a request, with their segments."""
        now = time.time()
        try:
            db = self._db()
            for award in awards:
                cursor = db.execute(
                    """
                    INSERT INTO awards
                        (request_id, engine, partner, from_city, to_city, date, cabin,
                         mixed, duration, travel_time, stops, quantity, mileage, fares,
                         placeholder, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        request_id,
                        award.engine,
                        int(award.partner),
                        award.from_city,
                        award.to_city,
                        award.date.isoformat(),
                        award.cabin,
                        int(award.mixed),
                        award.duration,
                        award.travel_time,
                        award.stops,
                        award.quantity,
                        award.mileage,
                        " ".join(award.fares),
                        int(award.placeholder),
                        now,
                    ),
                )
                award_id = cursor.lastrowid
                db.executemany(
                    """
                    INSERT INTO segments
                        (award_id, position, airline, flight, from_city, to_city, date,
                         departure, arrival, duration, next_connection, stops, lag_days,
                         cabin)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            award_id,
                            pos,
                            s.airline,
                            s.flight,
                            s.from_city,
                            s.to_city,
                            s.date.isoformat(),
                            s.departure.strftime("%H:%M"),
                            s.arrival.strftime("%H:%M"),
                            s.duration,
                            s.next_connection,
                            s.stops,
                            s.lag_days,
                            s.cabin,
                        )
                        for pos, s in enumerate(award.segments)
                    ],
                )
            db.commit()
        except sqlite3.Error as e:
            self._rollback()
            raise StorageError(f"Saving awards for request {request_id} failed: {e}") from e
        logger.debug(f"Saved {len(awards)} awards for request {request_id}")

    def count(self, table: str) -> int:
        """Number of rows in one of the storage tables."""
        if table not in ("requests", "awards", "segments"):
            raise ValueError(f"Unknown table: {table}")
        try:
            return self._db().execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        except sqlite3.Error as e:
            raise StorageError(f"Counting {table} failed: {e}") from e

    def _rollback(self) -> None:
        if self.conn is not None:
            try:
                self.conn.rollback()
            except sqlite3.Error as e:
                logger.warning(f"Rollback failed: {e}")

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None
