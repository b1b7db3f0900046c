"""
Search engine over the materialized corpus store.

Combines FTS5 keyword matching on the per-character spaced projection
with dynasty and tag filters, ordering and pagination. Every call opens
its own read-only connection and checks the store's schema version
before running anything against it.
"""

import sqlite3
import time
from contextlib import contextmanager
from dataclasses import replace
from typing import Generator, List, Optional

from ..core import (
    get_config,
    get_logger,
    Config,
    DatabaseError,
    SearchConnectionError,
    SearchQueryError,
    RecordDecodeError,
)
from ..database import DatabaseManager, CorpusRepository, verify_schema
from .models import CorpusRecord, Facets, SearchFilter, parse_tags, DEFAULT_LAYOUT
from .query_builder import CompiledQuery, build_lookup_query, build_search_query, describe

logger = get_logger(__name__)

REQUIRED_TEXT_FIELDS = ("id", "title", "author", "dynasty", "content")


class SearchEngine:
    """
    Keyword and category search over the corpus store.

    The engine holds no records and no open connections between calls.
    """

    def __init__(self, db_manager: DatabaseManager = None, config: Config = None):
        """
        Initialize the search engine.

        Args:
            db_manager: Read-only manager for the store. Defaults to the
                        configured store path.
            config: Configuration; defaults to the global instance.
        """
        self.config = config or get_config()
        self.db_manager = db_manager or DatabaseManager(
            self.config.paths.database_path,
            read_only=True
        )
        self.repository = CorpusRepository(self.db_manager)

        self.default_limit = self.config.search.default_limit
        self.max_limit = self.config.search.max_limit
        self.dynasty_limit = self.config.facets.dynasty_limit
        self.curated_tags = list(self.config.facets.tags)

    def search(self, keyword: str, filters: SearchFilter = None) -> List[CorpusRecord]:
        """
        Run a search.

        Args:
            keyword: Free text; blank selects filter-only mode.
            filters: Dynasty, tag and pagination parameters.

        Returns:
            Matching records, best match (or newest) first.

        Raises:
            SearchConnectionError: If the store cannot be opened or read.
            SchemaMismatchError: If the store has an unsupported schema.
            SearchQueryError: If the generated statement fails.
            RecordDecodeError: If a row cannot be decoded.
        """
        filters = replace(filters or SearchFilter(limit=self.default_limit), keyword=keyword or "")
        start_time = time.time()

        with self._open(keyword) as conn:
            layout = verify_schema(conn)
            query = build_search_query(filters, layout, self.max_limit)
            records = self._run(conn, query, keyword)

        logger.debug(
            f"Search '{filters.keyword}' ({query.mode}, dynasty={filters.dynasty}, "
            f"tag={filters.tag}): {len(records)} results in "
            f"{(time.time() - start_time) * 1000:.1f}ms"
        )

        return records

    def search_simple(
        self,
        keyword: str,
        dynasty: Optional[str] = None,
        tag: Optional[str] = None,
        offset: int = 0,
        limit: int = None
    ) -> List[CorpusRecord]:
        """
        Convenience wrapper matching the flat call surface used by the UI.

        Args:
            keyword: Search text.
            dynasty: Dynasty filter, empty for none.
            tag: Tag filter, empty for none.
            offset: Results to skip.
            limit: Page size (clamped to the configured maximum).

        Returns:
            List of CorpusRecord objects.
        """
        filters = SearchFilter(
            keyword=keyword,
            dynasty=dynasty,
            tag=tag,
            offset=offset,
            limit=limit or self.default_limit
        )
        return self.search(keyword, filters)

    def get_record(self, record_id: str) -> Optional[CorpusRecord]:
        """
        Fetch a single record by id.

        Args:
            record_id: Record identifier.

        Returns:
            CorpusRecord or None.
        """
        with self._open(None) as conn:
            layout = verify_schema(conn)
            records = self._run(conn, build_lookup_query(record_id, layout), None)

        return records[0] if records else None

    def facets(self) -> Facets:
        """
        List the dynasties present in the store and the curated tags.

        Dynasties are ordered by record count, largest first, and cut to the
        configured top N. Tags come from configuration rather than a scan of
        every record's tag list.
        """
        with self._open(None) as conn:
            verify_schema(conn)
            try:
                counts = self.repository.dynasty_counts(self.dynasty_limit)
            except sqlite3.Error as e:
                raise SearchQueryError(f"Facet query failed: {e}")

        return Facets(
            dynasties=tuple(dynasty for dynasty, _ in counts),
            tags=frozenset(self.curated_tags)
        )

    @contextmanager
    def _open(self, keyword: Optional[str]) -> Generator[sqlite3.Connection, None, None]:
        """Open a connection; storage failures surface as SearchConnectionError."""
        try:
            with self.db_manager.connection() as conn:
                yield conn
        except DatabaseError as e:
            logger.error(f"Corpus store unavailable: {e.message}")
            raise SearchConnectionError(
                f"Corpus store unavailable: {e.message}",
                query=keyword,
                details=e.details
            )

    def _run(
        self,
        conn: sqlite3.Connection,
        query: CompiledQuery,
        keyword: Optional[str]
    ) -> List[CorpusRecord]:
        """Execute a compiled query and decode every row, stopping at the first bad one."""
        try:
            cursor = conn.execute(query.sql, query.params)
        except (sqlite3.OperationalError, sqlite3.ProgrammingError) as e:
            logger.error(f"Search statement failed: {e} {describe(query, keyword)}")
            raise SearchQueryError(
                f"Search statement failed: {e}",
                query=keyword,
                details=describe(query, keyword)
            )
        except sqlite3.DatabaseError as e:
            raise SearchConnectionError(f"Corpus store unreadable: {e}", query=keyword)

        records = []
        while True:
            try:
                row = cursor.fetchone()
            except sqlite3.DatabaseError as e:
                raise SearchConnectionError(
                    f"Corpus store failed while reading results: {e}",
                    query=keyword
                )
            if row is None:
                break
            records.append(self._row_to_record(row, keyword))

        return records

    @staticmethod
    def _row_to_record(row: sqlite3.Row, keyword: Optional[str] = None) -> CorpusRecord:
        """
        Convert a result row into a CorpusRecord.

        Raises:
            RecordDecodeError: If a required column is missing or not text.
        """
        try:
            record_id = row["id"]
            values = {name: row[name] for name in REQUIRED_TEXT_FIELDS}
            category = row["category"]
            layout_strategy = row["layout_strategy"]
            tags_raw = row["tags"]
            source = row["source"]
        except (IndexError, KeyError) as e:
            raise RecordDecodeError(f"Result row is missing a column: {e}", query=keyword)

        for name, value in values.items():
            if not isinstance(value, str):
                raise RecordDecodeError(
                    f"Record field '{name}' is {type(value).__name__}, expected text",
                    record_id=record_id if isinstance(record_id, str) else None,
                    query=keyword
                )

        tags = parse_tags(tags_raw if isinstance(tags_raw, str) else None)
        if isinstance(tags_raw, str) and not tags and tags_raw.strip() not in ("", "[]"):
            logger.debug(f"Ignoring unreadable tags on record {record_id}")

        return CorpusRecord(
            id=values["id"],
            title=values["title"],
            author=values["author"],
            dynasty=values["dynasty"],
            content=values["content"],
            category=category or "unknown",
            tags=tags,
            layout_strategy=layout_strategy or DEFAULT_LAYOUT,
            source=source or ""
        )
