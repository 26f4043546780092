"""Tests for database layer."""

import os
from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from innkeep.infra.db import StoreUnavailableError


class TestGetConnPasswordFallback:
    """Tests for DB_PASSWORD fallback in get_conn(); no real DB needed."""

    def test_db_password_fallback_dsn_without_password(self):
        from innkeep.infra.db import get_conn

        env = {"DATABASE_URL": "dbname=db user=u host=h port=5432", "DB_PASSWORD": "from-env"}
        with patch.dict(os.environ, env, clear=True), \
             patch("innkeep.infra.db.psycopg2.connect", return_value=MagicMock()) as mock_connect:
            get_conn()
            mock_connect.assert_called_once_with(
                "dbname=db user=u host=h port=5432",
                password="from-env",
            )

    def test_db_password_not_used_when_url_has_password(self):
        from innkeep.infra.db import get_conn

        env = {"DATABASE_URL": "postgres://u:p@h/db", "DB_PASSWORD": "from-env"}
        with patch.dict(os.environ, env, clear=True), \
             patch("innkeep.infra.db.psycopg2.connect", return_value=MagicMock()) as mock_connect:
            get_conn()
            mock_connect.assert_called_once_with("postgres://u:p@h/db")

    def test_no_db_password_env(self):
        from innkeep.infra.db import get_conn

        env = {"DATABASE_URL": "dbname=db user=u host=h"}
        with patch.dict(os.environ, env, clear=True), \
             patch("innkeep.infra.db.psycopg2.connect", return_value=MagicMock()) as mock_connect:
            get_conn()
            mock_connect.assert_called_once_with("dbname=db user=u host=h")


class TestStoreUnavailable:
    def test_missing_database_url(self):
        from innkeep.infra.db import get_conn

        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(StoreUnavailableError, match="DATABASE_URL"):
                get_conn()

    def test_unreachable_server(self):
        from innkeep.infra.db import get_conn

        env = {"DATABASE_URL": "dbname=db host=nowhere"}
        with patch.dict(os.environ, env, clear=True), \
             patch(
                 "innkeep.infra.db.psycopg2.connect",
                 side_effect=psycopg2.OperationalError("could not connect\n"),
             ):
            with pytest.raises(StoreUnavailableError, match="could not connect"):
                get_conn()


class TestTxnWithoutDb:
    """txn() commit/rollback semantics against a mock connection."""

    def test_commits_on_success(self):
        from innkeep.infra.db import txn

        conn = MagicMock()
        with txn(conn):
            pass
        conn.commit.assert_called_once()
        conn.rollback.assert_not_called()
        conn.close.assert_not_called()

    def test_rollback_on_exception(self):
        from innkeep.infra.db import txn

        conn = MagicMock()
        with pytest.raises(ValueError):
            with txn(conn):
                raise ValueError("rollback test")
        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()

    def test_owned_connection_closed(self):
        from innkeep.infra.db import txn

        conn = MagicMock()
        with patch("innkeep.infra.db.get_conn", return_value=conn):
            with txn():
                pass
        conn.close.assert_called_once()


# Skip integration tests if DATABASE_URL is not set
_skip_no_db = pytest.mark.skipif(
    not os.environ.get("DATABASE_URL"),
    reason="DATABASE_URL not set - skipping DB integration tests",
)


@_skip_no_db
class TestTxn:
    """Tests for txn() context manager."""

    def test_rollback_on_exception(self):
        from innkeep.infra.db import get_conn, txn

        conn = get_conn()
        try:
            with conn.cursor() as cur:
                cur.execute(
                    "CREATE TEMP TABLE test_rollback (id serial, val text)"
                )
            conn.commit()

            with pytest.raises(ValueError):
                with txn(conn) as cur:
                    cur.execute(
                        "INSERT INTO test_rollback (val) VALUES (%s)", ("bad",)
                    )
                    raise ValueError("rollback test")

            with conn.cursor() as cur:
                cur.execute("SELECT count(*) FROM test_rollback")
                assert cur.fetchone()[0] == 0
        finally:
            conn.close()

    def test_creates_conn_if_none(self):
        from innkeep.infra.db import txn

        with txn() as cur:
            cur.execute("SELECT 1")
            assert cur.fetchone()[0] == 1
