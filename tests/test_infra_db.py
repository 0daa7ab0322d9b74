"""Tests for database layer."""

import os
from unittest.mock import MagicMock, patch

import pytest


class TestGetConn:
    def test_missing_database_url(self):
        from hotelfolio.infra.db import get_conn

        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(RuntimeError, match="DATABASE_URL"):
                get_conn()

    def test_connects_with_dsn(self):
        from hotelfolio.infra.db import get_conn

        with patch.dict(os.environ, {"DATABASE_URL": "postgres://u:p@h/db"}, clear=True), \
             patch("hotelfolio.infra.db.psycopg2.connect", return_value=MagicMock()) as mock_connect:
            get_conn()
            mock_connect.assert_called_once_with("postgres://u:p@h/db")


class TestTxn:
    def test_commits_and_closes_owned_connection(self):
        from hotelfolio.infra.db import txn

        conn = MagicMock()
        with patch("hotelfolio.infra.db.get_conn", return_value=conn):
            with txn() as cur:
                assert cur is conn.cursor.return_value.__enter__.return_value

        conn.commit.assert_called_once()
        conn.rollback.assert_not_called()
        conn.close.assert_called_once()

    def test_rolls_back_on_error(self):
        from hotelfolio.infra.db import txn

        conn = MagicMock()
        with patch("hotelfolio.infra.db.get_conn", return_value=conn):
            with pytest.raises(ValueError):
                with txn():
                    raise ValueError("boom")

        conn.commit.assert_not_called()
        conn.rollback.assert_called_once()
        conn.close.assert_called_once()

    def test_passed_connection_not_closed(self):
        from hotelfolio.infra.db import txn

        conn = MagicMock()
        with txn(conn):
            pass

        conn.commit.assert_called_once()
        conn.close.assert_not_called()
