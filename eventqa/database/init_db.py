"""
Apply schema.sql to the database named by DATABASE_URL.

Every statement uses IF NOT EXISTS, so running this on an initialised
database is a no-op.

Usage:
    python -m eventqa.database.init_db
"""

import logging
import sys
from pathlib import Path

import psycopg2

from eventqa.database.db_connection import get_db

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"


def apply_schema(conn, schema_path: Path = SCHEMA_PATH) -> None:
    """
    Execute the schema file in one transaction.

    Args:
        conn: Open psycopg2 connection.
        schema_path (Path): SQL file to run.
    """
    schema = schema_path.read_text(encoding="utf-8")
    try:
        with conn.cursor() as cur:
            cur.execute(schema)
        conn.commit()
    except psycopg2.Error:
        conn.rollback()
        raise


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")
    try:
        with get_db() as conn:
            apply_schema(conn)
    except (psycopg2.Error, RuntimeError) as e:
        logging.error(f"Error applying database schema: {e}")
        return 1

    logging.info("Database schema applied successfully.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
