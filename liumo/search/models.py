"""
Data models for search functionality.

Defines the corpus record returned by searches, the per-request filter,
the facet listing, and the structured poem body stored in content_json.
"""

import json
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Tuple

MAX_LIMIT = 100

DEFAULT_LAYOUT = "CENTER_ALIGNED"


def parse_tags(raw: Optional[str]) -> FrozenSet[str]:
    """
    Parse a serialized tag list into a set.

    Anything that is not a JSON list of strings yields an empty set; a
    damaged tag field must never fail the query it appears in.
    """
    if not raw:
        return frozenset()

    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return frozenset()

    if not isinstance(value, list):
        return frozenset()

    return frozenset(tag for tag in value if isinstance(tag, str) and tag)


@dataclass(frozen=True)
class Paragraph:
    """A block of lines sharing one presentation type."""
    type: str
    lines: Tuple[str, ...]


@dataclass(frozen=True)
class StructuredContent:
    """
    Parsed poem body.

    Attributes:
        paragraphs: Ordered paragraphs; empty when the body is unreadable.
    """
    paragraphs: Tuple[Paragraph, ...] = ()

    @classmethod
    def from_json(cls, raw: Optional[str]) -> "StructuredContent":
        """
        Parse a stored body leniently.

        Accepts the current {"paragraphs": [...]} shape and the legacy flat
        list of lines. Invalid input produces an empty body.
        """
        if not raw:
            return cls()

        try:
            value = json.loads(raw)
        except (TypeError, ValueError):
            return cls()

        if isinstance(value, list):
            lines = tuple(str(line) for line in value if str(line).strip())
            return cls((Paragraph("main", lines),)) if lines else cls()

        if not isinstance(value, dict) or not isinstance(value.get("paragraphs"), list):
            return cls()

        paragraphs = []
        for item in value["paragraphs"]:
            if not isinstance(item, dict) or not isinstance(item.get("lines"), list):
                continue
            paragraphs.append(Paragraph(
                type=str(item.get("type") or "main"),
                lines=tuple(str(line) for line in item["lines"])
            ))

        return cls(tuple(paragraphs))

    def plain_text(self) -> str:
        """Lines joined by newlines, paragraphs separated by a blank line."""
        return "\n\n".join("\n".join(p.lines) for p in self.paragraphs)

    def to_json(self) -> str:
        """Serialize to the current stored shape."""
        return json.dumps(
            {"paragraphs": [{"type": p.type, "lines": list(p.lines)} for p in self.paragraphs]},
            ensure_ascii=False
        )


@dataclass(frozen=True)
class CorpusRecord:
    """
    A single poem or prose piece from the corpus.

    Attributes:
        id: Unique, immutable identifier.
        title: Title (无题 when unknown).
        author: Author (佚名 when unknown).
        dynasty: Era label such as 唐 or 宋.
        content: Stored body as JSON text.
        category: Classification code (shi, ci, qu, prose, modern, ...).
        tags: Free-form tags.
        layout_strategy: Presentation hint, passed through untouched.
        source: Upstream collection the record came from.
    """
    id: str
    title: str
    author: str
    dynasty: str
    content: str
    category: str
    tags: FrozenSet[str] = field(default_factory=frozenset)
    layout_strategy: str = DEFAULT_LAYOUT
    source: str = ""

    @property
    def structured_content(self) -> StructuredContent:
        return StructuredContent.from_json(self.content)

    @property
    def plain_text(self) -> str:
        return self.structured_content.plain_text()

    def to_dict(self) -> dict:
        """Serializable form for the presentation layer."""
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "dynasty": self.dynasty,
            "content_json": self.content,
            "type": self.category,
            "tags": sorted(self.tags),
            "layout_strategy": self.layout_strategy,
            "source": self.source,
        }


@dataclass(frozen=True)
class SearchFilter:
    """
    Per-request search parameters.

    Attributes:
        keyword: Free text; blank means filter-only mode.
        dynasty: Exact dynasty to match, or None.
        tag: Tag that must be in the record's tag set, or None.
        offset: Results to skip (non-negative).
        limit: Requested page size; clamped by effective_limit().
    """
    keyword: str = ""
    dynasty: Optional[str] = None
    tag: Optional[str] = None
    offset: int = 0
    limit: int = 20

    def __post_init__(self):
        object.__setattr__(self, "keyword", self.keyword or "")
        object.__setattr__(self, "dynasty", self.dynasty or None)
        object.__setattr__(self, "tag", self.tag or None)

        if self.offset < 0:
            raise ValueError(f"offset must be non-negative, got {self.offset}")
        if self.limit <= 0:
            raise ValueError(f"limit must be positive, got {self.limit}")

    @property
    def is_fulltext(self) -> bool:
        return bool(self.keyword.strip())

    def effective_limit(self, max_limit: int = MAX_LIMIT) -> int:
        """Requested limit, capped at max_limit."""
        return min(self.limit, max_limit)


@dataclass(frozen=True)
class Facets:
    """
    Filter dimensions offered to the user.

    Attributes:
        dynasties: Dynasty labels, most populated first.
        tags: Curated tag labels shipped with the application.
    """
    dynasties: Tuple[str, ...]
    tags: FrozenSet[str]

    def sorted_tags(self, order: List[str] = None) -> List[str]:
        """Tags in the curated order when one is given, else sorted."""
        if order:
            return [tag for tag in order if tag in self.tags]
        return sorted(self.tags)
