"""
Database module for the SQLite corpus store with FTS5 full-text search.

Provides connection management, schema definitions and version checks,
and the repository used by the build pipeline and facet queries.
"""

from .connection import get_connection, get_db_manager, DatabaseManager
from .schema import (
    SCHEMA_VERSION,
    SCHEMA_LAYOUTS,
    SchemaLayout,
    init_schema,
    read_schema_version,
    verify_schema,
    get_statistics
)
from .repository import CorpusRepository, PoetryRow

__all__ = [
    "get_connection",
    "get_db_manager",
    "DatabaseManager",
    "SCHEMA_VERSION",
    "SCHEMA_LAYOUTS",
    "SchemaLayout",
    "init_schema",
    "read_schema_version",
    "verify_schema",
    "get_statistics",
    "CorpusRepository",
    "PoetryRow"
]
