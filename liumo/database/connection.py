"""
SQLite connection management for the Liumo corpus store.

Provides context managers for safe connection handling. Runtime readers
open the store read-only; the build pipeline opens it for writing.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from ..core import get_config, get_logger, DatabaseError

logger = get_logger(__name__)


class DatabaseManager:
    """
    Manages SQLite connections to a corpus store file.

    Every call to connection() or cursor() opens a fresh connection and
    closes it on exit; nothing is shared between calls.
    """

    def __init__(self, db_path: Path = None, read_only: bool = True):
        """
        Initialize database manager.

        Args:
            db_path: Path to SQLite database file. Defaults to config value.
            read_only: Open connections with mode=ro. Writers must pass False.
        """
        if db_path is None:
            db_path = get_config().paths.database_path
        self.db_path = Path(db_path)
        self.read_only = read_only

        if not read_only:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _create_connection(self) -> sqlite3.Connection:
        """Create a new database connection with optimal settings."""
        try:
            if self.read_only:
                uri = f"{self.db_path.resolve().as_uri()}?mode=ro"
                conn = sqlite3.connect(uri, uri=True, timeout=30.0)
            else:
                conn = sqlite3.connect(self.db_path, timeout=30.0)

            conn.row_factory = sqlite3.Row

            conn.execute("PRAGMA cache_size=-16000")  # 16MB cache
            conn.execute("PRAGMA temp_store=MEMORY")
            if not self.read_only:
                conn.execute("PRAGMA synchronous=NORMAL")

            return conn

        except sqlite3.Error as e:
            raise DatabaseError(
                f"Failed to connect to database: {e}",
                {"path": str(self.db_path), "read_only": self.read_only}
            )

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Context manager for database connections.

        Yields:
            SQLite connection with Row factory enabled.
        """
        conn = self._create_connection()
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def cursor(self, commit: bool = True) -> Generator[sqlite3.Cursor, None, None]:
        """
        Context manager for database cursors with automatic commit/rollback.

        Args:
            commit: Whether to commit on successful exit.

        Yields:
            SQLite cursor for query execution.
        """
        conn = self._create_connection()
        cursor = conn.cursor()

        try:
            yield cursor
            if commit:
                conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()


_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """Get the singleton read-only DatabaseManager for the configured store."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


@contextmanager
def get_connection() -> Generator[sqlite3.Connection, None, None]:
    """
    Get a read-only connection to the configured store.

    Yields:
        SQLite connection.
    """
    with get_db_manager().connection() as conn:
        yield conn
