"""
Corpus repository for reading and writing the poetry tables.

Writes happen only while the build pipeline assembles a store; at
runtime the repository is used for lookups and facet aggregates.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..core import get_logger
from .connection import DatabaseManager

logger = get_logger(__name__)


@dataclass
class PoetryRow:
    """One row ready for insertion into a current-schema store."""
    id: str
    title: str
    author: str
    dynasty: str
    content_json: str
    type: str
    layout_strategy: str
    tags_json: str
    tags: Tuple[str, ...]
    source: str
    fts_title: str
    fts_author: str
    fts_content: str
    created_at: Optional[str] = None


class CorpusRepository:
    """
    Repository for corpus store operations.

    Provides batch insertion for the build pipeline and the read-only
    aggregates the search layer needs.
    """

    def __init__(self, manager: DatabaseManager):
        self.manager = manager

    def insert_batch(self, rows: List[PoetryRow]) -> int:
        """
        Insert records with their FTS projection and tags in one transaction.

        Duplicate ids are ignored, keeping the first occurrence.

        Args:
            rows: Prepared rows.

        Returns:
            Number of records inserted.
        """
        if not rows:
            return 0

        inserted = 0

        with self.manager.cursor() as cur:
            for row in rows:
                cur.execute("""
                    INSERT OR IGNORE INTO poetry
                    (id, title, author, dynasty, content_json, type,
                     layout_strategy, tags, source, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, COALESCE(?, CURRENT_TIMESTAMP))
                """, (
                    row.id, row.title, row.author, row.dynasty, row.content_json,
                    row.type, row.layout_strategy, row.tags_json, row.source,
                    row.created_at
                ))

                if cur.rowcount == 0:
                    continue

                rowid = cur.lastrowid
                cur.execute(
                    "INSERT INTO poetry_fts (rowid, title, author, content) VALUES (?, ?, ?, ?)",
                    (rowid, row.fts_title, row.fts_author, row.fts_content)
                )
                cur.executemany(
                    "INSERT OR IGNORE INTO poetry_tags (tag, poetry_id) VALUES (?, ?)",
                    [(tag, row.id) for tag in row.tags]
                )
                inserted += 1

        logger.debug(f"Inserted {inserted} of {len(rows)} records")
        return inserted

    def count(self) -> int:
        """Get total record count."""
        with self.manager.connection() as conn:
            row = conn.execute("SELECT COUNT(*) as count FROM poetry").fetchone()
            return row["count"]

    def dynasty_counts(self, limit: int) -> List[Tuple[str, int]]:
        """
        Aggregate records by dynasty, largest groups first.

        Args:
            limit: Maximum number of dynasties to return.

        Returns:
            List of (dynasty, count) pairs.
        """
        with self.manager.connection() as conn:
            rows = conn.execute("""
                SELECT dynasty, COUNT(*) as c
                FROM poetry
                GROUP BY dynasty
                ORDER BY c DESC, dynasty
                LIMIT ?
            """, (limit,)).fetchall()

        return [(row["dynasty"], row["c"]) for row in rows]
