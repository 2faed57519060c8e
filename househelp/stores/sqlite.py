"""SQLite-backed candidate and history stores.

Scalar filters (rating, hourly rate, experience, verified) run in SQL; set,
availability and radius filters run in the Python filter chain over the rows
SQL returns. Blocking queries run in a worker thread so a cancelled request
does not hold the event loop.
"""

import asyncio
import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

from househelp.core.schemas import (
    AvailabilitySlot,
    CandidatePage,
    CandidateProvider,
    GeoPoint,
    HistoricalInteraction,
    SearchCriteria,
    ServiceType,
)
from househelp.pipeline.filters import build_filters, run_filter_chain
from househelp.stores.base import CandidateStore, HistoryStore

logger = logging.getLogger(__name__)

_PROVIDERS_TABLE = """
CREATE TABLE IF NOT EXISTS providers (
    id               TEXT    PRIMARY KEY,
    full_name        TEXT    NOT NULL DEFAULT '',
    services_json    TEXT    NOT NULL,
    experience_years REAL    NOT NULL DEFAULT 0.0,
    hourly_rate      REAL    NOT NULL DEFAULT 0.0,
    languages_json   TEXT    NOT NULL DEFAULT '[]',
    rating           REAL    NOT NULL DEFAULT 0.0,
    rating_count     INTEGER NOT NULL DEFAULT 0,
    latitude         REAL    NOT NULL,
    longitude        REAL    NOT NULL,
    verified         INTEGER NOT NULL DEFAULT 0,
    availability_json TEXT   NOT NULL DEFAULT '[]'
);
"""

_HOUSEHOLDS_TABLE = """
CREATE TABLE IF NOT EXISTS households (
    id          TEXT PRIMARY KEY,
    latitude    REAL,
    longitude   REAL
);
"""

_BOOKINGS_TABLE = """
CREATE TABLE IF NOT EXISTS bookings (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    household_id    TEXT NOT NULL,
    provider_id     TEXT,
    services_json   TEXT NOT NULL,
    created_at      TEXT NOT NULL
);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_PROVIDERS_TABLE)
    conn.execute(_HOUSEHOLDS_TABLE)
    conn.execute(_BOOKINGS_TABLE)
    conn.commit()
    return conn


def upsert_provider(conn: sqlite3.Connection, provider: CandidateProvider) -> None:
    """Insert or replace a provider row."""
    conn.execute(
        """
        INSERT OR REPLACE INTO providers
            (id, full_name, services_json, experience_years, hourly_rate,
             languages_json, rating, rating_count, latitude, longitude,
             verified, availability_json)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            provider.id,
            provider.full_name,
            json.dumps(sorted(s.value for s in provider.services)),
            provider.experience_years,
            provider.hourly_rate,
            json.dumps(sorted(provider.languages)),
            provider.rating,
            provider.rating_count,
            provider.location.latitude,
            provider.location.longitude,
            int(provider.verified),
            json.dumps([slot.model_dump(mode="json") for slot in provider.availability]),
        ),
    )
    conn.commit()


def upsert_household(
    conn: sqlite3.Connection,
    household_id: str,
    location: GeoPoint | None,
) -> None:
    conn.execute(
        "INSERT OR REPLACE INTO households (id, latitude, longitude) VALUES (?, ?, ?)",
        (
            household_id,
            location.latitude if location else None,
            location.longitude if location else None,
        ),
    )
    conn.commit()


def insert_booking(
    conn: sqlite3.Connection,
    household_id: str,
    booking: HistoricalInteraction,
    created_at: datetime | None = None,
) -> int:
    """Record a booking. Returns the row ID."""
    cursor = conn.execute(
        """
        INSERT INTO bookings (household_id, provider_id, services_json, created_at)
        VALUES (?, ?, ?, ?)
        """,
        (
            household_id,
            booking.provider_id,
            json.dumps([s.value for s in booking.service_types]),
            (created_at or datetime.now()).isoformat(),
        ),
    )
    conn.commit()
    return cursor.lastrowid or 0


def seed_from_dict(conn: sqlite3.Connection, data: dict[str, Any]) -> tuple[int, int, int]:
    """Load a fixture mapping with ``providers`` and ``households`` lists.

    Each household may carry a ``location`` and a ``bookings`` list, oldest
    first. Returns (providers, households, bookings) inserted.
    """
    providers = [CandidateProvider.model_validate(p) for p in data.get("providers") or []]
    for provider in providers:
        upsert_provider(conn, provider)

    households = data.get("households") or []
    booking_count = 0
    for household in households:
        household_id = str(household["id"])
        raw_location = household.get("location")
        location = GeoPoint.model_validate(raw_location) if raw_location else None
        upsert_household(conn, household_id, location)
        for raw in household.get("bookings") or []:
            insert_booking(conn, household_id, HistoricalInteraction.model_validate(raw))
            booking_count += 1

    logger.info(
        "Seeded %d providers, %d households, %d bookings",
        len(providers), len(households), booking_count,
    )
    return len(providers), len(households), booking_count


def _row_to_provider(row: sqlite3.Row) -> CandidateProvider:
    return CandidateProvider(
        id=row["id"],
        full_name=row["full_name"],
        services=frozenset(ServiceType(s) for s in json.loads(row["services_json"])),
        experience_years=row["experience_years"],
        hourly_rate=row["hourly_rate"],
        languages=frozenset(json.loads(row["languages_json"])),
        rating=row["rating"],
        rating_count=row["rating_count"],
        location=GeoPoint(latitude=row["latitude"], longitude=row["longitude"]),
        verified=bool(row["verified"]),
        availability=tuple(
            AvailabilitySlot.model_validate(slot)
            for slot in json.loads(row["availability_json"])
        ),
    )


class SQLiteCandidateStore(CandidateStore):
    """Candidate store over the ``providers`` table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    async def query(self, criteria: SearchCriteria) -> CandidatePage:
        return await asyncio.to_thread(self._query, criteria)

    async def top_rated(self, min_rating: float, limit: int) -> list[CandidateProvider]:
        return await asyncio.to_thread(self._top_rated, min_rating, limit)

    def _query(self, criteria: SearchCriteria) -> CandidatePage:
        clauses: list[str] = []
        params: list[Any] = []
        if criteria.min_rating is not None:
            clauses.append("rating >= ?")
            params.append(criteria.min_rating)
        if criteria.max_hourly_rate is not None:
            clauses.append("hourly_rate <= ?")
            params.append(criteria.max_hourly_rate)
        if criteria.min_experience_years is not None:
            clauses.append("experience_years >= ?")
            params.append(criteria.min_experience_years)
        if criteria.verified_only:
            clauses.append("verified = 1")

        sql = "SELECT * FROM providers"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY rating DESC, id ASC"

        rows = self._conn.execute(sql, params).fetchall()
        providers = [_row_to_provider(r) for r in rows]
        logger.debug("SQL prefilter: %d providers", len(providers))

        survivors = run_filter_chain(providers, build_filters(criteria, scalar=False))
        return CandidatePage(candidates=survivors, total=len(survivors))

    def _top_rated(self, min_rating: float, limit: int) -> list[CandidateProvider]:
        rows = self._conn.execute(
            """
            SELECT * FROM providers
            WHERE rating >= ?
            ORDER BY rating DESC, id ASC
            LIMIT ?
            """,
            (min_rating, limit),
        ).fetchall()
        return [_row_to_provider(r) for r in rows]


class SQLiteHistoryStore(HistoryStore):
    """History store over the ``bookings`` and ``households`` tables."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    async def recent_bookings(self, user_id: str, limit: int) -> list[HistoricalInteraction]:
        return await asyncio.to_thread(self._recent_bookings, user_id, limit)

    async def home_location(self, user_id: str) -> GeoPoint | None:
        return await asyncio.to_thread(self._home_location, user_id)

    def _recent_bookings(self, user_id: str, limit: int) -> list[HistoricalInteraction]:
        rows = self._conn.execute(
            """
            SELECT provider_id, services_json FROM bookings
            WHERE household_id = ?
            ORDER BY created_at DESC, id DESC
            LIMIT ?
            """,
            (user_id, limit),
        ).fetchall()
        return [
            HistoricalInteraction(
                service_types=tuple(ServiceType(s) for s in json.loads(r["services_json"])),
                provider_id=r["provider_id"],
            )
            for r in rows
        ]

    def _home_location(self, user_id: str) -> GeoPoint | None:
        row = self._conn.execute(
            "SELECT latitude, longitude FROM households WHERE id = ?",
            (user_id,),
        ).fetchone()
        if row is None or row["latitude"] is None or row["longitude"] is None:
            return None
        return GeoPoint(latitude=row["latitude"], longitude=row["longitude"])
