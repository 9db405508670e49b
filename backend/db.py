"""
Database connection helper.

Every repository call opens its own connection through `get_conn()`; the
events table sees only single-row inserts and simple range reads, so no
pool or cross-request transaction is involved.

Usage:
    from db import get_conn
    with get_conn() as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1;")
"""

import psycopg
from settings import settings


def get_conn():
    """Return a new psycopg connection using `settings.db_url`.

    The short `connect_timeout` keeps HTTP requests from hanging when the
    database is unreachable; the repository turns that failure into
    `StorageUnavailable`.
    """

    return psycopg.connect(settings.db_url, connect_timeout=5)
