"""
Corpus build pipeline.

Turns source poem files into the SQLite store that ships, compressed,
inside the application.
"""

from .corpus_builder import (
    CorpusBuilder,
    BuildStats,
    load_source_file,
    normalize_content,
    prepare_row,
    pack_payload,
)

__all__ = [
    "CorpusBuilder",
    "BuildStats",
    "load_source_file",
    "normalize_content",
    "prepare_row",
    "pack_payload",
]
