"""
Structured SQL builder for corpus searches.

Filters are collected as predicate clauses with their bound parameters
and joined at the end; caller-supplied values only ever travel as
parameters, never as SQL text.
"""

import json
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from ..database import SchemaLayout
from .models import SearchFilter, MAX_LIMIT
from .tokenizer import build_match_query

QUOTE_CHARS = frozenset('"\'')

LIKE_ESCAPE = "\\"

MODE_FILTER = "filter"
MODE_FULLTEXT = "fulltext"


class FilterExpression:
    """
    Conjunction of SQL predicates plus the parameters they bind.

    Clauses are kept in insertion order so the parameter list lines up
    with the placeholders.
    """

    def __init__(self):
        self.clauses: List[str] = []
        self.params: List[Any] = []

    def add(self, clause: str, *params: Any) -> "FilterExpression":
        if clause.count("?") != len(params):
            raise ValueError(
                f"Clause has {clause.count('?')} placeholders but {len(params)} parameters"
            )
        self.clauses.append(clause)
        self.params.extend(params)
        return self

    def where_sql(self) -> str:
        if not self.clauses:
            return "1=1"
        return " AND ".join(self.clauses)

    def __len__(self) -> int:
        return len(self.clauses)


@dataclass(frozen=True)
class CompiledQuery:
    """A ready-to-execute statement."""
    sql: str
    params: Tuple[Any, ...]
    mode: str
    limit: int


def strip_quotes(value: str) -> str:
    """Remove quote characters so a filter value cannot leave its match boundary."""
    return "".join(char for char in value if char not in QUOTE_CHARS).strip()


def escape_like(value: str) -> str:
    """Escape LIKE wildcards using the backslash escape character."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def serialized_tag_pattern(tag: str) -> str:
    """LIKE pattern matching the quoted tag token inside a JSON tag list."""
    return "%" + escape_like(json.dumps(tag, ensure_ascii=False)) + "%"


def select_columns(layout: SchemaLayout) -> str:
    """Projection normalized across schema generations."""
    layout_column = "p.layout_strategy" if layout.has_layout_column else "NULL"
    return (
        "p.id, p.title, p.author, p.dynasty, "
        f"p.{layout.content_column} AS content, "
        "p.type AS category, "
        f"{layout_column} AS layout_strategy, "
        "p.tags AS tags, p.source AS source"
    )


def build_filters(filters: SearchFilter, layout: SchemaLayout) -> FilterExpression:
    """
    Collect the categorical predicates for a request.

    Args:
        filters: Request parameters.
        layout: Schema of the store being queried.

    Returns:
        FilterExpression with dynasty and tag predicates as requested.
    """
    expression = FilterExpression()

    if filters.dynasty:
        expression.add("p.dynasty = ?", filters.dynasty)

    tag = strip_quotes(filters.tag) if filters.tag else ""
    if tag:
        if layout.has_tag_table:
            expression.add(
                "EXISTS (SELECT 1 FROM poetry_tags t WHERE t.poetry_id = p.id AND t.tag = ?)",
                tag
            )
        else:
            expression.add(
                f"p.tags LIKE ? ESCAPE '{LIKE_ESCAPE}'",
                serialized_tag_pattern(tag)
            )

    return expression


def build_search_query(
    filters: SearchFilter,
    layout: SchemaLayout,
    max_limit: int = MAX_LIMIT
) -> CompiledQuery:
    """
    Build the statement for a search request.

    Blank keywords list filtered records newest first; anything else
    goes through the FTS index ordered by rank.

    Args:
        filters: Request parameters.
        layout: Schema of the store being queried.
        max_limit: Hard cap on the page size.

    Returns:
        CompiledQuery with SQL and parameters.
    """
    expression = build_filters(filters, layout)
    limit = filters.effective_limit(max_limit)
    columns = select_columns(layout)

    match_query = build_match_query(filters.keyword) if filters.is_fulltext else ""

    if not match_query:
        sql = (
            f"SELECT {columns} FROM poetry p "
            f"WHERE {expression.where_sql()} "
            "ORDER BY p.created_at DESC, p.rowid DESC "
            "LIMIT ? OFFSET ?"
        )
        params = tuple(expression.params) + (limit, filters.offset)
        return CompiledQuery(sql=sql, params=params, mode=MODE_FILTER, limit=limit)

    sql = (
        f"SELECT {columns} FROM poetry_fts "
        "JOIN poetry p ON p.rowid = poetry_fts.rowid "
        "WHERE poetry_fts MATCH ?"
    )
    if expression:
        sql += f" AND {expression.where_sql()}"
    sql += " ORDER BY poetry_fts.rank LIMIT ? OFFSET ?"

    params = (match_query,) + tuple(expression.params) + (limit, filters.offset)
    return CompiledQuery(sql=sql, params=params, mode=MODE_FULLTEXT, limit=limit)


def build_lookup_query(record_id: str, layout: SchemaLayout) -> CompiledQuery:
    """Statement fetching one record by id."""
    sql = f"SELECT {select_columns(layout)} FROM poetry p WHERE p.id = ?"
    return CompiledQuery(sql=sql, params=(record_id,), mode=MODE_FILTER, limit=1)


def describe(query: CompiledQuery, keyword: Optional[str] = None) -> dict:
    """Compact summary for log messages and error details."""
    return {
        "mode": query.mode,
        "limit": query.limit,
        "param_count": len(query.params),
        "keyword": keyword,
    }
