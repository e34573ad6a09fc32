"""Shared test fixtures for the dbconnection test suite."""

from unittest.mock import MagicMock, patch

import pytest


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_cursor():
    """Mock psycopg2 cursor yielding no rows."""
    cursor = MagicMock()
    cursor.__enter__.return_value = cursor
    cursor.__exit__.return_value = False
    cursor.__iter__.return_value = iter([])
    cursor.description = [("id",)]
    cursor.rowcount = 0
    return cursor


@pytest.fixture
def mock_pg(mock_cursor):
    """Patch psycopg2 in the connection module; connections hand out mock_cursor."""
    with patch("dbconnection.connection.psycopg2") as pg:
        conn = MagicMock()
        conn.closed = 0
        conn.cursor.return_value = mock_cursor
        pg.connect.return_value = conn
        yield pg


@pytest.fixture
def db(mock_pg):
    from dbconnection.connection import DatabaseConnection
    return DatabaseConnection("app", "app_user", "secret", "localhost")


def set_rows(cursor, rows):
    cursor.__iter__.return_value = iter(rows)
    cursor.rowcount = len(rows)


@pytest.fixture
def db_env(monkeypatch):
    """Set database environment variables."""
    monkeypatch.setenv("DB_NAME", "app")
    monkeypatch.setenv("DB_USER", "app_user")
    monkeypatch.setenv("DB_PASSWORD", "secret")
    monkeypatch.setenv("DB_HOST", "localhost:/var/run/postgresql")
