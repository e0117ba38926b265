"""
SQLite reservation store using aiosqlite.

Implements the persistence contract from ``court_booking.services.store``.
Tables are created automatically on open().

One connection is shared by the whole process.  Units of work take turns on
it through an asyncio.Lock, and each one is a single SQLite transaction:
``BEGIN IMMEDIATE`` for writers, which grabs the database write lock before
the availability check runs, and a plain ``BEGIN`` for readers, which in WAL
mode reads from one consistent snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from court_booking.models import Locations, Reservation, TimeProposal

logger = logging.getLogger(__name__)


# ── Schema ────────────────────────────────────────────────────────────────

_SCHEMA = """
CREATE TABLE IF NOT EXISTS reservations (
    id              TEXT PRIMARY KEY,
    recurring_id    TEXT,
    name            TEXT NOT NULL,
    is_active       INTEGER NOT NULL DEFAULT 1,
    customer_id     TEXT NOT NULL,
    start_time      TEXT NOT NULL,   -- ISO-8601, UTC, microsecond precision
    end_time        TEXT NOT NULL,
    badminton       INTEGER NOT NULL DEFAULT 0,
    table_tennis    INTEGER NOT NULL DEFAULT 0,
    created_at      TEXT NOT NULL,
    updated_at      TEXT NOT NULL,
    CHECK (start_time < end_time),
    CHECK (badminton = 1 OR table_tennis = 1)
);

CREATE INDEX IF NOT EXISTS idx_res_time ON reservations(start_time, end_time);
CREATE INDEX IF NOT EXISTS idx_res_recurring ON reservations(recurring_id);
CREATE INDEX IF NOT EXISTS idx_res_customer ON reservations(customer_id);
"""

# Shared courts: a stored row conflicts when it flags any court the
# proposal flags.
_COUNT_OVERLAPPING = """
SELECT COUNT(*) FROM reservations
WHERE is_active = 1
  AND start_time < ?
  AND end_time > ?
  AND ((? = 1 AND badminton = 1) OR (? = 1 AND table_tennis = 1))
  AND (? IS NULL OR id != ?)
"""

_INSERT = """
INSERT INTO reservations (
    id, recurring_id, name, is_active, customer_id,
    start_time, end_time, badminton, table_tennis,
    created_at, updated_at
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

_UPDATE = """
UPDATE reservations SET
    name = ?, is_active = ?,
    start_time = ?, end_time = ?,
    badminton = ?, table_tennis = ?,
    updated_at = ?
WHERE id = ?
"""


# ── Helpers ───────────────────────────────────────────────────────────────


def _iso(dt: datetime) -> str:
    """UTC with fixed precision, so stored strings sort chronologically."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _row_to_reservation(row: aiosqlite.Row) -> Reservation:
    """Convert a database row to a Reservation model."""
    return Reservation(
        id=row["id"],
        recurring_id=row["recurring_id"],
        name=row["name"],
        is_active=bool(row["is_active"]),
        customer_id=row["customer_id"],
        start_time=datetime.fromisoformat(row["start_time"]),
        end_time=datetime.fromisoformat(row["end_time"]),
        locations=Locations(
            badminton=bool(row["badminton"]),
            table_tennis=bool(row["table_tennis"]),
        ),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def _insert_params(reservation: Reservation) -> tuple:
    return (
        reservation.id,
        reservation.recurring_id,
        reservation.name,
        int(reservation.is_active),
        reservation.customer_id,
        _iso(reservation.start_time),
        _iso(reservation.end_time),
        int(reservation.locations.badminton),
        int(reservation.locations.table_tennis),
        _iso(reservation.created_at),
        _iso(reservation.updated_at),
    )


# ══════════════════════════════════════════════════════════════════════════
#                    REPOSITORY (one open transaction)
# ══════════════════════════════════════════════════════════════════════════


class SqliteReservationRepository:
    """Reservation queries executed inside the caller's transaction."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def count_active_overlapping(
        self, proposals: Sequence[TimeProposal]
    ) -> list[int]:
        counts = []
        for proposal in proposals:
            badminton = int(proposal.locations.badminton)
            table_tennis = int(proposal.locations.table_tennis)
            excluded = proposal.excluded_reservation_id
            async with self._db.execute(
                _COUNT_OVERLAPPING,
                (
                    _iso(proposal.end_time),
                    _iso(proposal.start_time),
                    badminton,
                    table_tennis,
                    excluded,
                    excluded,
                ),
            ) as cur:
                row = await cur.fetchone()
            counts.append(row[0])
        return counts

    async def create_one(self, reservation: Reservation) -> Reservation:
        now = _now()
        stored = reservation.model_copy(update={"created_at": now, "updated_at": now})
        await self._db.execute(_INSERT, _insert_params(stored))
        return stored

    async def create_many(self, reservations: Sequence[Reservation]) -> int:
        now = _now()
        rows = [
            _insert_params(r.model_copy(update={"created_at": now, "updated_at": now}))
            for r in reservations
        ]
        await self._db.executemany(_INSERT, rows)
        return len(rows)

    async def update_many(
        self, reservations: Sequence[Reservation]
    ) -> list[Reservation]:
        now = _now()
        saved = []
        for reservation in reservations:
            stored = reservation.model_copy(update={"updated_at": now})
            await self._db.execute(
                _UPDATE,
                (
                    stored.name,
                    int(stored.is_active),
                    _iso(stored.start_time),
                    _iso(stored.end_time),
                    int(stored.locations.badminton),
                    int(stored.locations.table_tennis),
                    _iso(now),
                    stored.id,
                ),
            )
            saved.append(stored)
        return saved

    async def find_many_by_id(self, ids: Sequence[str]) -> list[Reservation]:
        if not ids:
            return []
        placeholders = ", ".join("?" for _ in ids)
        async with self._db.execute(
            f"SELECT * FROM reservations WHERE id IN ({placeholders})", list(ids)
        ) as cur:
            rows = await cur.fetchall()
        return [_row_to_reservation(r) for r in rows]

    async def find_in_range(
        self,
        start: datetime,
        end: datetime,
        *,
        include_end: bool = False,
        active_only: bool = False,
    ) -> list[Reservation]:
        sql = "SELECT * FROM reservations WHERE start_time >= ?"
        sql += " AND start_time <= ?" if include_end else " AND start_time < ?"
        params: list = [_iso(start), _iso(end)]

        if active_only:
            sql += " AND is_active = 1"

        sql += " ORDER BY start_time"

        async with self._db.execute(sql, params) as cur:
            rows = await cur.fetchall()
        return [_row_to_reservation(r) for r in rows]

    async def find_by_recurring_id(
        self,
        recurring_id: str,
        *,
        active_only: bool = True,
        starting_from: datetime | None = None,
    ) -> list[Reservation]:
        sql = "SELECT * FROM reservations WHERE recurring_id = ?"
        params: list = [recurring_id]

        if active_only:
            sql += " AND is_active = 1"
        if starting_from is not None:
            sql += " AND start_time >= ?"
            params.append(_iso(starting_from))

        sql += " ORDER BY start_time"

        async with self._db.execute(sql, params) as cur:
            rows = await cur.fetchall()
        return [_row_to_reservation(r) for r in rows]


# ══════════════════════════════════════════════════════════════════════════
#                    STORE (connection + units of work)
# ══════════════════════════════════════════════════════════════════════════


class SqliteReservationStore:
    """Owns the SQLite connection and hands out units of work."""

    def __init__(self, path: str) -> None:
        self._path = path
        self._db: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    async def open(self) -> None:
        """Open the database and create tables if they don't exist."""
        db_path = Path(self._path)
        db_path.parent.mkdir(parents=True, exist_ok=True)

        # Autocommit mode: transactions are opened explicitly per unit of work.
        self._db = await aiosqlite.connect(str(db_path), isolation_level=None)
        self._db.row_factory = aiosqlite.Row  # dict-like rows
        await self._db.execute("PRAGMA journal_mode=WAL")
        await self._db.execute("PRAGMA foreign_keys=ON")
        await self._db.executescript(_SCHEMA)
        logger.info("Database initialized at %s", db_path)

    async def close(self) -> None:
        """Close the database connection."""
        if self._db is not None:
            await self._db.close()
            self._db = None
            logger.info("Database connection closed")

    def _connection(self) -> aiosqlite.Connection:
        if self._db is None:
            raise RuntimeError("Database not initialized, call open() first")
        return self._db

    @asynccontextmanager
    async def unit_of_work(
        self, write: bool = False
    ) -> AsyncIterator[SqliteReservationRepository]:
        db = self._connection()
        async with self._lock:
            await db.execute("BEGIN IMMEDIATE" if write else "BEGIN")
            try:
                yield SqliteReservationRepository(db)
                await db.commit()
            except BaseException:
                await db.rollback()
                raise
