from unittest.mock import MagicMock

import psycopg2
import pytest
from psycopg2 import extras

from db import connection as db_connection
from db.exceptions import PoolNotInitializedError


@pytest.fixture(autouse=True)
def no_pool(monkeypatch):
    monkeypatch.setattr(db_connection, "_pool", None)


def test_get_connection_requires_pool():
    with pytest.raises(PoolNotInitializedError):
        db_connection.get_connection()


def test_pool_error_is_a_runtime_error():
    with pytest.raises(RuntimeError):
        db_connection.get_connection()


def test_release_without_pool_is_noop():
    db_connection.release_connection(MagicMock())


def test_init_pool_is_idempotent(monkeypatch):
    factory = MagicMock()
    monkeypatch.setattr(db_connection.pool, "SimpleConnectionPool", factory)

    db_connection.init_pool(1, 3)
    db_connection.init_pool(1, 3)

    factory.assert_called_once_with(1, 3, db_connection.DATABASE_URL)


def test_init_pool_reraises_operational_error(monkeypatch):
    factory = MagicMock(side_effect=psycopg2.OperationalError("refused"))
    monkeypatch.setattr(db_connection.pool, "SimpleConnectionPool", factory)

    with pytest.raises(psycopg2.OperationalError):
        db_connection.init_pool()
    assert db_connection._pool is None


def test_close_pool_resets_state(fake_db):
    db_connection.close_pool()
    fake_db.pool.closeall.assert_called_once()
    assert db_connection._pool is None


def test_connection_commits_and_releases(fake_db):
    with db_connection.connection() as conn:
        assert conn is fake_db.conn

    fake_db.conn.commit.assert_called_once()
    fake_db.conn.rollback.assert_not_called()
    fake_db.pool.putconn.assert_called_once_with(fake_db.conn)


def test_connection_rolls_back_on_error(fake_db):
    with pytest.raises(ValueError):
        with db_connection.connection():
            raise ValueError("boom")

    fake_db.conn.rollback.assert_called_once()
    fake_db.conn.commit.assert_not_called()
    fake_db.pool.putconn.assert_called_once_with(fake_db.conn)


def test_cursor_passes_factory(fake_db):
    with db_connection.cursor(extras.RealDictCursor) as cur:
        assert cur is fake_db.cursor

    fake_db.conn.cursor.assert_called_once_with(cursor_factory=extras.RealDictCursor)
