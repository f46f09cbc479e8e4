"""
Shared fixtures: a mocked psycopg2 pool installed into db.connection so
repositories run without a live database.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from psycopg2 import extras

from db import connection as db_connection


def make_cursor(rows=None, description=None):
    """A cursor double whose fetchone/fetchall return ``rows``."""
    rows = list(rows or [])
    cur = MagicMock(name="cursor")
    cur.fetchall.return_value = rows
    cur.fetchone.return_value = rows[0] if rows else None
    cur.description = description
    return cur


@pytest.fixture
def fake_db(monkeypatch):
    """
    Install a fake pool whose connection always hands out ``fake_db.cursor``.

    Tests replace ``fake_db.cursor`` attributes (fetchone, fetchall,
    description) to shape the result.
    """
    cur = make_cursor()
    conn = MagicMock(name="connection")
    conn.cursor.return_value.__enter__.return_value = cur
    pool = MagicMock(name="pool")
    pool.getconn.return_value = conn
    monkeypatch.setattr(db_connection, "_pool", pool)
    return SimpleNamespace(pool=pool, conn=conn, cursor=cur)


def set_rows(cur, rows, description=None):
    cur.fetchall.return_value = list(rows)
    cur.fetchone.return_value = rows[0] if rows else None
    cur.description = description


def describe(*names):
    """A minimal DB-API description: one 7-tuple per column."""
    return [(n, None, None, None, None, None, None) for n in names]


def make_dict_rows(columns, values):
    """Real DictRow objects, built from a cursor double that carries .index."""
    cur = SimpleNamespace(
        description=describe(*columns),
        index={name: i for i, name in enumerate(columns)},
    )
    rows = []
    for vals in values:
        row = extras.DictRow(cur)
        row[:] = list(vals)
        rows.append(row)
    return rows
