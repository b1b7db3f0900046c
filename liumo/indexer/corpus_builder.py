"""
Build pipeline for the bundled corpus store.

Reads source JSON files of poems, normalizes every record, writes a
current-schema SQLite store with its per-character FTS projection and
normalized tags, and packs the result into the gzip payload that ships
with the application.
"""

import gzip
import json
import shutil
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from ..core import get_config, get_logger, Config, CorpusBuildError
from ..database import CorpusRepository, DatabaseManager, PoetryRow, init_schema, SCHEMA_VERSION
from ..search.models import Paragraph, StructuredContent
from ..search.tokenizer import space_cjk
from ..utils import clean_text, normalize_lines, ensure_directory

logger = get_logger(__name__)

DEFAULT_TITLE = "无题"
DEFAULT_AUTHOR = "佚名"
DEFAULT_DYNASTY = "未知"
DEFAULT_CATEGORY = "unknown"


@dataclass
class BuildStats:
    """Statistics from a build run."""
    files_scanned: int = 0
    files_failed: int = 0
    records_read: int = 0
    records_inserted: int = 0
    records_skipped: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def duplicates(self) -> int:
        return self.records_read - self.records_inserted - self.records_skipped


def load_source_file(path: Union[str, Path]) -> List[dict]:
    """
    Load poem objects from a source JSON file.

    A file holds either a list of poem objects or a single object.

    Raises:
        CorpusBuildError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CorpusBuildError(f"Cannot load source file: {e}", {"path": str(path)})

    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]

    raise CorpusBuildError(
        f"Source file must contain an object or a list, got {type(data).__name__}",
        {"path": str(path)}
    )


def normalize_content(raw) -> StructuredContent:
    """
    Turn any supported source body into structured content.

    Accepts a {"paragraphs": [{"type", "lines"}]} object, a list of lines,
    or a newline-separated string.
    """
    if isinstance(raw, dict):
        parsed = StructuredContent.from_json(json.dumps(raw, ensure_ascii=False))
        paragraphs = []
        for paragraph in parsed.paragraphs:
            lines = tuple(normalize_lines(list(paragraph.lines)))
            if lines:
                paragraphs.append(Paragraph(paragraph.type, lines))
        return StructuredContent(tuple(paragraphs))

    lines = tuple(normalize_lines(raw))
    if not lines:
        return StructuredContent()
    return StructuredContent((Paragraph("main", lines),))


def prepare_row(item: dict, default_layout: str = "CENTER_ALIGNED") -> Optional[PoetryRow]:
    """
    Normalize one source object into an insertable row.

    Args:
        item: Source poem object.
        default_layout: Layout hint for records that carry none.

    Returns:
        PoetryRow, or None when the record has no content.
    """
    raw_body = item.get("paragraphs")
    if raw_body is None:
        raw_body = item.get("content")

    content = normalize_content(raw_body)
    if not content.paragraphs:
        return None

    title = clean_text(str(item.get("title") or item.get("rhythmic") or "")) or DEFAULT_TITLE
    author = clean_text(str(item.get("author") or "")) or DEFAULT_AUTHOR
    dynasty = clean_text(str(item.get("dynasty") or "")) or DEFAULT_DYNASTY
    category = clean_text(str(item.get("type") or item.get("category") or "")) or DEFAULT_CATEGORY

    raw_tags = item.get("tags") or []
    if isinstance(raw_tags, str):
        raw_tags = [raw_tags]
    tags = {clean_text(str(tag)) for tag in raw_tags if tag is not None}
    # Type codes are offered as tag facets (shi, ci, ...), so they join the tag set.
    if category != DEFAULT_CATEGORY:
        tags.add(category)
    tags.discard("")
    sorted_tags = tuple(sorted(tags))

    return PoetryRow(
        id=str(item.get("id") or uuid.uuid4()),
        title=title,
        author=author,
        dynasty=dynasty,
        content_json=content.to_json(),
        type=category,
        layout_strategy=str(item.get("layout_strategy") or default_layout),
        tags_json=json.dumps(list(sorted_tags), ensure_ascii=False),
        tags=sorted_tags,
        source=str(item.get("source") or ""),
        fts_title=space_cjk(title),
        fts_author=space_cjk(author),
        fts_content=space_cjk(content.plain_text()),
        created_at=item.get("created_at")
    )


class CorpusBuilder:
    """
    Builds a corpus store from source records.

    The output file is recreated from scratch on every run. Records are
    inserted in batches; a file that fails to load is counted and skipped.
    """

    def __init__(
        self,
        output_path: Union[str, Path],
        progress_callback: Callable[[int, int, str], None] = None,
        config: Config = None,
        batch_size: int = None
    ):
        """
        Initialize the corpus builder.

        Args:
            output_path: Path of the SQLite store to create.
            progress_callback: Optional callback(current, total, filename)
                              called for every source file.
            config: Configuration; defaults to the global instance.
            batch_size: Records per transaction. Defaults to config value.
        """
        self.config = config or get_config()
        self.output_path = Path(output_path)
        self.progress_callback = progress_callback

        self.batch_size = batch_size or self.config.build.batch_size
        self.log_every = self.config.build.log_progress_every
        self.default_layout = self.config.build.default_layout

        self.manager: Optional[DatabaseManager] = None
        self.repository: Optional[CorpusRepository] = None

    def build(self, sources: Iterable[Union[str, Path]]) -> BuildStats:
        """
        Build the store from source JSON files.

        Args:
            sources: Paths of source files, processed in the given order.

        Returns:
            BuildStats with counts and any errors encountered.
        """
        paths = [Path(p) for p in sources]
        stats = BuildStats(files_scanned=len(paths))

        logger.info(f"Building corpus store from {len(paths)} source files")
        self._start()

        batch: List[PoetryRow] = []

        for i, path in enumerate(paths):
            if self.progress_callback:
                self.progress_callback(i + 1, len(paths), path.name)

            try:
                items = load_source_file(path)
            except CorpusBuildError as e:
                stats.files_failed += 1
                stats.errors.append(f"{path.name}: {e.message}")
                logger.warning(f"Skipping source file: {path.name}: {e.message}")
                continue

            self._collect(items, batch, stats)

        self._flush(batch, stats)
        self._finish(stats)

        return stats

    def build_from_records(self, records: Iterable[dict]) -> BuildStats:
        """
        Build the store from in-memory source objects.

        Args:
            records: Source poem objects.

        Returns:
            BuildStats for the run.
        """
        stats = BuildStats()
        self._start()

        batch: List[PoetryRow] = []
        self._collect(records, batch, stats)
        self._flush(batch, stats)
        self._finish(stats)

        return stats

    def _start(self) -> None:
        """Recreate the output store with an empty current schema."""
        ensure_directory(self.output_path.parent)
        for suffix in ("", "-wal", "-shm", "-journal"):
            Path(f"{self.output_path}{suffix}").unlink(missing_ok=True)

        self.manager = DatabaseManager(self.output_path, read_only=False)
        self.repository = CorpusRepository(self.manager)
        init_schema(self.manager, SCHEMA_VERSION)

    def _collect(self, items: Iterable[dict], batch: List[PoetryRow], stats: BuildStats) -> None:
        for item in items:
            stats.records_read += 1

            row = prepare_row(item, self.default_layout)
            if row is None:
                stats.records_skipped += 1
                continue

            batch.append(row)

            if len(batch) >= self.batch_size:
                self._flush(batch, stats)

            if stats.records_read % self.log_every == 0:
                logger.info(
                    f"Progress: {stats.records_read} records read, "
                    f"{stats.records_inserted} inserted"
                )

    def _flush(self, batch: List[PoetryRow], stats: BuildStats) -> None:
        if not batch:
            return
        stats.records_inserted += self.repository.insert_batch(batch)
        batch.clear()

    def _finish(self, stats: BuildStats) -> None:
        with self.manager.connection() as conn:
            conn.execute("VACUUM")

        logger.info(
            f"Corpus build complete: {stats.records_inserted} records, "
            f"{stats.records_skipped} without content, {stats.duplicates} duplicates, "
            f"{stats.files_failed} failed files"
        )


def pack_payload(
    db_path: Union[str, Path],
    payload_path: Union[str, Path],
    compresslevel: int = 9
) -> Path:
    """
    Compress a built store into a single-stream gzip payload.

    Args:
        db_path: Finished SQLite store.
        payload_path: Destination .gz file.
        compresslevel: gzip compression level.

    Returns:
        Path of the written payload.
    """
    db_path = Path(db_path)
    payload_path = Path(payload_path)

    if not db_path.exists():
        raise CorpusBuildError(f"Store not found: {db_path}", {"path": str(db_path)})

    ensure_directory(payload_path.parent)

    with open(db_path, "rb") as source, gzip.open(payload_path, "wb", compresslevel=compresslevel) as target:
        shutil.copyfileobj(source, target)

    logger.info(f"Packed {db_path.name} into {payload_path}")
    return payload_path
