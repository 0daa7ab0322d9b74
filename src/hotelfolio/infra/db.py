"""psycopg2 connection and transaction helpers for the Postgres folio store."""

import os
from contextlib import contextmanager
from typing import Iterator

import psycopg2
from psycopg2.extensions import connection as PgConnection, cursor as PgCursor


def get_conn() -> PgConnection:
    """Open a connection to DATABASE_URL.

    Raises:
        RuntimeError: If DATABASE_URL is not set.
    """
    dsn = os.environ.get("DATABASE_URL")
    if not dsn:
        raise RuntimeError("DATABASE_URL environment variable not set")
    return psycopg2.connect(dsn)


@contextmanager
def txn(conn: PgConnection | None = None) -> Iterator[PgCursor]:
    """Yield a cursor inside one transaction.

    Commits when the block exits normally, rolls back on any exception.
    A connection opened here is also closed here; a passed-in one is not.
    """
    owns_conn = conn is None
    if owns_conn:
        conn = get_conn()

    try:
        with conn.cursor() as cur:
            yield cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        if owns_conn:
            conn.close()
