"""Database URL helpers for Alembic migrations.

Kept apart from env.py so they can be tested without triggering
alembic.context at import time.

DATABASE_URL may be a URL (postgres://, postgresql://, postgresql+psycopg2://)
or a libpq key=value DSN, the same forms the application's get_conn()
accepts. DB_PASSWORD fills in a missing password in either form.
"""

from __future__ import annotations

import os

from psycopg2.extensions import parse_dsn
from sqlalchemy.engine import URL, make_url

DRIVERNAME = "postgresql+psycopg2"


def _libpq_dsn_to_url(dsn: str) -> URL:
    """Convert a libpq key=value DSN to a SQLAlchemy URL.

    A host starting with "/" is a Unix socket directory and travels in the
    query string, as libpq expects.
    """
    params = parse_dsn(dsn)
    password = params.get("password") or os.environ.get("DB_PASSWORD") or None
    host = params.get("host", "localhost")
    port = int(params.get("port", 5432))

    if host.startswith("/"):
        return URL.create(
            DRIVERNAME,
            username=params.get("user"),
            password=password,
            database=params.get("dbname"),
            query={"host": host},
        )
    return URL.create(
        DRIVERNAME,
        username=params.get("user"),
        password=password,
        host=host,
        port=port,
        database=params.get("dbname"),
    )


def _normalize_url(raw: str) -> URL:
    url = make_url(raw)
    if url.drivername in ("postgres", "postgresql"):
        url = url.set(drivername=DRIVERNAME)
    if not url.password:
        db_password = os.environ.get("DB_PASSWORD")
        if db_password:
            url = url.set(password=db_password)
    return url


def _get_database_url() -> str:
    """DATABASE_URL rendered as a psycopg2 SQLAlchemy URL (password included)."""
    raw = os.environ.get("DATABASE_URL")
    if not raw:
        raise RuntimeError("DATABASE_URL is required to run migrations")
    url = _normalize_url(raw) if "://" in raw else _libpq_dsn_to_url(raw)
    return url.render_as_string(hide_password=False)
