"""
PostgreSQL connection helper.
Provides get_db() for use by services.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

import psycopg2
from psycopg2.extras import DictCursor

from eventqa.config import get_database_url


@contextmanager
def get_db() -> Iterator["psycopg2.extensions.connection"]:
    """
    Open a psycopg2 connection with dictionary-based row access.

    The connection is handed to registry and ledger functions explicitly;
    nothing in the service keeps a module-level connection around.

    Usage:
        with get_db() as conn:
            create_event(conn, user_id, data)

    Yields:
        psycopg2.extensions.connection: A connection object with DictCursor factory.

    Raises:
        psycopg2.Error: If connection fails.
    """
    try:
        conn = psycopg2.connect(get_database_url())
    except psycopg2.Error as e:
        logging.error(f"Error connecting to database: {e}")
        # Re-raise so the caller's error handler answers with a 500
        raise

    # Rows come back as dictionaries (e.g., {"user_id": 1, "email": "..."})
    conn.cursor_factory = DictCursor
    try:
        yield conn
    finally:
        # Uncommitted work is discarded on close
        conn.close()
