"""
Database schema definitions for the Liumo corpus store.

Defines the poetry table, the FTS5 virtual table holding the
per-character spaced projection, the normalized tag relation, and the
schema version tag that readers check before querying.
"""

import sqlite3
from dataclasses import dataclass
from typing import Dict, FrozenSet

from ..core import get_logger, DatabaseError, SchemaMismatchError
from .connection import DatabaseManager

logger = get_logger(__name__)


SCHEMA_VERSION = 2


@dataclass(frozen=True)
class SchemaLayout:
    """Column shape of one schema generation."""
    version: int
    content_column: str
    has_layout_column: bool
    has_tag_table: bool
    required_tables: FrozenSet[str]


SCHEMA_LAYOUTS: Dict[int, SchemaLayout] = {
    # Generation 1: flat line list in `content`, tags only as a JSON column.
    1: SchemaLayout(
        version=1,
        content_column="content",
        has_layout_column=False,
        has_tag_table=False,
        required_tables=frozenset({"poetry", "poetry_fts"})
    ),
    2: SchemaLayout(
        version=2,
        content_column="content_json",
        has_layout_column=True,
        has_tag_table=True,
        required_tables=frozenset({"poetry", "poetry_fts", "poetry_tags"})
    ),
}


POETRY_TABLE_V1 = """
CREATE TABLE IF NOT EXISTS poetry (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    author TEXT NOT NULL,
    dynasty TEXT NOT NULL,
    content TEXT NOT NULL,
    type TEXT,
    tags TEXT DEFAULT '[]',
    source TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""

POETRY_TABLE_V2 = """
CREATE TABLE IF NOT EXISTS poetry (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    author TEXT NOT NULL,
    dynasty TEXT NOT NULL,
    content_json TEXT NOT NULL,
    type TEXT,
    layout_strategy TEXT,
    tags TEXT DEFAULT '[]',
    source TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""

POETRY_TAGS_TABLE = """
CREATE TABLE IF NOT EXISTS poetry_tags (
    tag TEXT NOT NULL,
    poetry_id TEXT NOT NULL,
    PRIMARY KEY (tag, poetry_id),
    FOREIGN KEY (poetry_id) REFERENCES poetry(id) ON DELETE CASCADE
) WITHOUT ROWID
"""

# Rows are joined back to poetry through rowid; the text is pre-spaced.
FTS_TABLE = """
CREATE VIRTUAL TABLE IF NOT EXISTS poetry_fts USING fts5(
    title,
    author,
    content,
    tokenize='unicode61'
)
"""

POETRY_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_poetry_dynasty ON poetry(dynasty)",
    "CREATE INDEX IF NOT EXISTS idx_poetry_created_at ON poetry(created_at)",
]

POETRY_TAGS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_poetry_tags_poetry_id ON poetry_tags(poetry_id)",
]


def init_schema(manager: DatabaseManager, version: int = SCHEMA_VERSION) -> None:
    """
    Create the store schema and stamp its version.

    Args:
        manager: Writable manager for the store being built.
        version: Schema generation to create. Only the build pipeline and
                 tests create anything other than the current one.
    """
    if version not in SCHEMA_LAYOUTS:
        raise DatabaseError(f"Unknown schema version: {version}", {"version": version})

    logger.info(f"Initializing corpus schema v{version} at {manager.db_path}")

    with manager.cursor() as cur:
        cur.execute(POETRY_TABLE_V2 if version >= 2 else POETRY_TABLE_V1)

        for index_sql in POETRY_INDEXES:
            cur.execute(index_sql)

        try:
            cur.execute(FTS_TABLE)
        except sqlite3.OperationalError as e:
            raise DatabaseError(f"Failed to create FTS table: {e}")

        if SCHEMA_LAYOUTS[version].has_tag_table:
            cur.execute(POETRY_TAGS_TABLE)
            for index_sql in POETRY_TAGS_INDEXES:
                cur.execute(index_sql)

        # PRAGMA does not accept bound parameters; version is a checked int.
        cur.execute(f"PRAGMA user_version = {int(version)}")


def read_schema_version(conn: sqlite3.Connection) -> int:
    """Read the schema version tag from an open store."""
    try:
        return conn.execute("PRAGMA user_version").fetchone()[0]
    except sqlite3.DatabaseError as e:
        raise DatabaseError(f"Failed to read schema version: {e}")


def verify_schema(conn: sqlite3.Connection) -> SchemaLayout:
    """
    Check that an open store has a schema this code understands.

    Args:
        conn: Open connection to the store.

    Returns:
        The SchemaLayout matching the store's version tag.

    Raises:
        SchemaMismatchError: If the version is unknown or tables are missing.
        DatabaseError: If the file cannot be read as a SQLite database.
    """
    version = read_schema_version(conn)
    layout = SCHEMA_LAYOUTS.get(version)

    if layout is None:
        raise SchemaMismatchError(
            f"Corpus store has schema version {version}, expected one of "
            f"{sorted(SCHEMA_LAYOUTS)}; the bundled asset and this build are out of step",
            found_version=version
        )

    try:
        rows = conn.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table'"
        ).fetchall()
    except sqlite3.DatabaseError as e:
        raise DatabaseError(f"Failed to inspect store tables: {e}")

    missing = layout.required_tables - {row[0] for row in rows}
    if missing:
        raise SchemaMismatchError(
            f"Corpus store claims schema version {version} but lacks tables: "
            f"{', '.join(sorted(missing))}",
            found_version=version,
            details={"missing_tables": sorted(missing)}
        )

    return layout


def get_statistics(manager: DatabaseManager) -> dict:
    """
    Get store statistics for dashboard display.

    Returns:
        Dictionary with record counts and size info.
    """
    with manager.connection() as conn:
        stats = {}

        row = conn.execute("SELECT COUNT(*) as count FROM poetry").fetchone()
        stats["total_records"] = row["count"]

        row = conn.execute(
            "SELECT COUNT(DISTINCT author) as count FROM poetry"
        ).fetchone()
        stats["total_authors"] = row["count"]

        row = conn.execute(
            "SELECT COUNT(DISTINCT dynasty) as count FROM poetry"
        ).fetchone()
        stats["total_dynasties"] = row["count"]

        stats["schema_version"] = read_schema_version(conn)

    size_bytes = manager.db_path.stat().st_size if manager.db_path.exists() else 0
    stats["store_size_mb"] = round(size_bytes / (1024 * 1024), 2)

    return stats
