"""Database access layer using psycopg2.

Provides:
- get_conn(): Get a database connection from DATABASE_URL
- txn(): Context manager for short, safe transactions
"""

import os
from contextlib import contextmanager
from typing import Iterator

import psycopg2
from psycopg2.extensions import connection as PgConnection, cursor as PgCursor
from psycopg2.extensions import parse_dsn


class StoreUnavailableError(RuntimeError):
    """Raised when the database is not configured or cannot be reached."""

    pass


def _dsn_has_password(dsn: str) -> bool:
    try:
        return bool(parse_dsn(dsn).get("password"))
    except psycopg2.ProgrammingError:
        return False


def get_conn() -> PgConnection:
    """Get a new database connection from DATABASE_URL.

    If the DSN carries no password and DB_PASSWORD is set, the password is
    passed separately.

    Returns:
        psycopg2 connection object.

    Raises:
        StoreUnavailableError: If DATABASE_URL is not set or the server
            cannot be reached.
    """
    dsn = os.environ.get("DATABASE_URL")
    if not dsn:
        raise StoreUnavailableError("DATABASE_URL environment variable not set")

    kwargs: dict[str, str] = {}
    db_password = os.environ.get("DB_PASSWORD")
    if db_password and not _dsn_has_password(dsn):
        kwargs["password"] = db_password

    try:
        return psycopg2.connect(dsn, **kwargs)
    except psycopg2.OperationalError as exc:
        raise StoreUnavailableError(str(exc).strip()) from exc


@contextmanager
def txn(conn: PgConnection | None = None) -> Iterator[PgCursor]:
    """Context manager for a short, safe transaction.

    If conn is None, creates a new connection that is closed on exit.
    Commits on successful exit, rolls back on exception.

    Args:
        conn: Optional existing connection. If None, creates new one.

    Yields:
        Cursor for executing queries within the transaction.

    Example:
        with txn() as cur:
            cur.execute("UPDATE reservations SET status = %s WHERE id = %s", ("confirmed", rid))
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

