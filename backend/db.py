# backend/db.py
import logging
import os
import sqlite3
from contextlib import contextmanager

from flask import current_app, g

logger = logging.getLogger("expense-tracker")

SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "init_db.sql")


def get_db():
    db = getattr(g, '_database', None)
    if db is None:
        db_path = current_app.config["DB_PATH"]
        # ensure directory exists
        os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
        db = g._database = sqlite3.connect(db_path, check_same_thread=False)
        db.row_factory = sqlite3.Row
    return db


def close_db(exception=None):
    db = g.pop('_database', None)
    if db is not None:
        db.close()


def query_db(query, args=(), one=False):
    cur = get_db().execute(query, args)
    rv = cur.fetchall()
    cur.close()
    return (rv[0] if rv else None) if one else rv


def execute_db(query, args=()):
    conn = get_db()
    cur = conn.cursor()
    cur.execute(query, args)
    conn.commit()
    last = cur.lastrowid
    cur.close()
    return last


@contextmanager
def transaction():
    """Run several writes on the request connection as one unit.

    Commits when the block exits cleanly, rolls back and re-raises otherwise.
    """
    conn = get_db()
    cur = conn.cursor()
    try:
        yield cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cur.close()


def init_db(db_path):
    """
    Create the schema from init_db.sql next to this module.
    Idempotent (IF NOT EXISTS), so it is safe to call at app startup.
    """
    if not os.path.exists(SCHEMA_PATH):
        raise FileNotFoundError(f"init_db.sql not found at expected path: {SCHEMA_PATH}")

    os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        with open(SCHEMA_PATH, 'r', encoding='utf-8') as f:
            sql = f.read()
        conn.executescript(sql)
        conn.commit()
    finally:
        conn.close()
    logger.info("Database initialized at %s", db_path)
