"""Tests for the PostgreSQL key-value store."""
from unittest.mock import MagicMock

import psycopg2
import pytest

from bookshelf import database
from bookshelf.database import Database


@pytest.fixture
def db(monkeypatch):
    """Database wired to a mocked connection pool."""
    pool = MagicMock()
    conn = MagicMock()
    cur = MagicMock()
    pool.getconn.return_value = conn
    conn.cursor.return_value.__enter__.return_value = cur
    monkeypatch.setattr(database.pool, "SimpleConnectionPool", MagicMock(return_value=pool))
    
    db = Database("postgresql://localhost/test")
    db.pool, db.conn, db.cur = pool, conn, cur
    return db


def test_init_schema_creates_table(db):
    db.init_schema()
    
    sql = db.cur.execute.call_args[0][0]
    assert "CREATE TABLE IF NOT EXISTS kv_store" in sql
    db.conn.commit.assert_called_once()
    db.pool.putconn.assert_called_once_with(db.conn)


def test_get_existing_key(db):
    db.cur.fetchone.return_value = ('[{"id": "1"}]',)
    
    assert db.get("myBookLibrary") == '[{"id": "1"}]'
    assert db.cur.execute.call_args[0][1] == ("myBookLibrary",)


def test_get_missing_key(db):
    db.cur.fetchone.return_value = None
    
    assert db.get("missing") is None


def test_set_upserts(db):
    db.set("myBookLibrary", "[]")
    
    sql, params = db.cur.execute.call_args[0]
    assert "ON CONFLICT (key) DO UPDATE" in sql
    assert params == ("myBookLibrary", "[]")
    db.conn.commit.assert_called_once()


def test_set_failure_rolls_back_and_raises(db):
    db.cur.execute.side_effect = psycopg2.OperationalError("connection lost")
    
    with pytest.raises(psycopg2.OperationalError):
        db.set("myBookLibrary", "[]")
    
    db.conn.rollback.assert_called_once()
    db.pool.putconn.assert_called_once_with(db.conn)


def test_stats_and_close(db):
    db.cur.fetchone.return_value = (3,)
    
    assert db.get_stats() == {"stored_keys": 3}
    
    with db:
        pass
    db.pool.closeall.assert_called_once()
