"""
Repository: SQL operations for `events`.

This file contains only DB interaction code. It takes already-validated
values from `EventService` and converts DB rows to plain Python dicts
suitable for JSON responses. Keep business rules out of this module.

Important notes:
- SQL strings are simple and use positional parameters for psycopg.
- `insert_event` commits before returning; callers expect the write to
  be durable after the method returns.
- Any `psycopg.Error` leaves this module as `StorageUnavailable`.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import List, Dict, Any, Optional

import psycopg

from db import get_conn
from errors import StorageUnavailable

COLUMNS = "id, user_id, ts, type, category, name, value, unit"


@contextmanager
def _storage(op: str):
    try:
        yield
    except psycopg.Error as e:
        raise StorageUnavailable(f"{op} failed: {e}") from e


def row_to_event(r) -> Dict[str, Any]:
    """Map a `COLUMNS` row to the API's event dict.

    `value`/`unit` are only present when stored (the table enforces that
    they are set together).
    """

    out: Dict[str, Any] = {
        "id": str(r[0]),
        "userId": r[1],
        "timestamp": r[2],
        "type": r[3],
        "category": r[4],
        "name": r[5],
    }
    if r[6] is not None:
        out["value"] = r[6]
        out["unit"] = r[7]
    return out


class EventRepo:
    """DB access only. No business logic here.

    Responsibilities:
    - Execute queries scoped by `user_id` and return plain dict objects
    - Keep transaction/commit boundaries local and explicit
    """

    def insert_event(
        self,
        user_id: str,
        ts: datetime,
        type: str,
        category: str,
        name: str,
        value: Optional[float] = None,
        unit: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Insert one event and return the stored row, generated id included."""

        with _storage("Insert"):
            with get_conn() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        "INSERT INTO events (user_id, ts, type, category, name, value, unit) "
                        f"VALUES (%s, %s, %s, %s, %s, %s, %s) RETURNING {COLUMNS}",
                        (user_id, ts, type, category, name, value, unit),
                    )
                    row = cur.fetchone()
                conn.commit()
        return row_to_event(row)

    def fetch_events(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Fetch `user_id`'s events with `start <= ts <= end`, newest first.

        A `None` bound leaves that side open.
        """

        where = ["user_id=%s"]
        params: List[Any] = [user_id]
        if start is not None:
            where.append("ts >= %s")
            params.append(start)
        if end is not None:
            where.append("ts <= %s")
            params.append(end)

        with _storage("Query"):
            with get_conn() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        f"SELECT {COLUMNS} FROM events WHERE {' AND '.join(where)} "
                        "ORDER BY ts DESC, id DESC",
                        params,
                    )
                    return [row_to_event(r) for r in cur.fetchall()]

    def fetch_latest(
        self, user_id: str, type: str, before: datetime, after: datetime
    ) -> Optional[Dict[str, Any]]:
        """Most recent event of `type` with `after <= ts < before`, or None."""

        with _storage("Query"):
            with get_conn() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        f"SELECT {COLUMNS} FROM events "
                        "WHERE user_id=%s AND type=%s AND ts >= %s AND ts < %s "
                        "ORDER BY ts DESC LIMIT 1",
                        (user_id, type, after, before),
                    )
                    row = cur.fetchone()
        return row_to_event(row) if row else None

    def ping(self) -> None:
        """Lightweight DB health check. Raises `StorageUnavailable` on error."""

        with _storage("Health check"):
            with get_conn() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT 1;")
