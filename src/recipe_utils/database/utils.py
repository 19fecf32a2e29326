"""Database utility functions for the recipe database."""

import contextlib
import pathlib
import sqlite3
from typing import Generator, Union


def get_connection(db_path: Union[str, pathlib.Path]) -> sqlite3.Connection:
    """Get a SQLite database connection with foreign keys enabled.

    Rows are returned as ``sqlite3.Row`` so columns can be read by name.

    Args:
        db_path: Path to the SQLite database file, or ":memory:"

    Returns:
        SQLite connection with foreign keys enabled
    """
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextlib.contextmanager
def transaction(conn: sqlite3.Connection) -> Generator[sqlite3.Cursor, None, None]:
    """Context manager for database transactions.

    Args:
        conn: SQLite database connection

    Yields:
        Database cursor for executing queries

    Example:
        with transaction(conn) as cur:
            cur.execute("DELETE FROM pantry_item WHERE id = ?", (item_id,))
    """
    cur = conn.cursor()
    try:
        yield cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
