"""
Search module for keyword and category search over the corpus store.

Provides the record and filter models, the CJK tokenization helpers,
the structured query builder, and the search engine.
"""

from .models import (
    CorpusRecord,
    SearchFilter,
    Facets,
    Paragraph,
    StructuredContent,
    parse_tags,
    MAX_LIMIT
)
from .tokenizer import space_cjk, build_match_query
from .query_builder import FilterExpression, CompiledQuery, build_search_query
from .engine import SearchEngine

__all__ = [
    "CorpusRecord",
    "SearchFilter",
    "Facets",
    "Paragraph",
    "StructuredContent",
    "parse_tags",
    "MAX_LIMIT",
    "space_cjk",
    "build_match_query",
    "FilterExpression",
    "CompiledQuery",
    "build_search_query",
    "SearchEngine"
]
