"""
Tests for the corpus build pipeline.

All stores and payloads are written inside temporary directories.
"""

import gzip
import json
import sqlite3
import uuid
import pytest
from pathlib import Path

from liumo.core import CorpusBuildError
from liumo.database import DatabaseManager, read_schema_version, SCHEMA_VERSION
from liumo.indexer import (
    CorpusBuilder,
    load_source_file,
    normalize_content,
    prepare_row,
    pack_payload,
)
from liumo.search.models import Paragraph, StructuredContent


class TestPrepareRow:
    """Tests for prepare_row."""

    def test_defaults_for_missing_fields(self):
        row = prepare_row({"paragraphs": ["一行"]})

        assert row.title == "无题"
        assert row.author == "佚名"
        assert row.dynasty == "未知"
        assert row.type == "unknown"
        assert row.layout_strategy == "CENTER_ALIGNED"
        assert row.tags == ()
        assert uuid.UUID(row.id)

    def test_record_without_content_is_skipped(self):
        assert prepare_row({"id": "x", "title": "空"}) is None
        assert prepare_row({"id": "x", "paragraphs": ["", "   "]}) is None

    def test_rhythmic_used_as_title(self):
        row = prepare_row({"rhythmic": "浣溪沙", "paragraphs": ["一曲新词酒一杯"]})

        assert row.title == "浣溪沙"

    def test_category_joins_tags(self):
        row = prepare_row({"paragraphs": ["a"], "type": "ci", "tags": ["宋词三百首", "", None]})

        assert row.tags == ("ci", "宋词三百首")
        assert json.loads(row.tags_json) == ["ci", "宋词三百首"]

    def test_single_string_tag(self):
        assert prepare_row({"paragraphs": ["a"], "tags": "K12"}).tags == ("K12",)

    def test_fts_projection_is_spaced(self):
        row = prepare_row({"title": "春晓", "author": "孟浩然", "paragraphs": ["春眠不觉晓，", "处处闻啼鸟。"]})

        assert row.fts_title == "春 晓"
        assert row.fts_author == "孟 浩 然"
        assert row.fts_content == "春 眠 不 觉 晓 ， 处 处 闻 啼 鸟 。"

    def test_custom_default_layout(self):
        row = prepare_row({"paragraphs": ["a"]}, default_layout="LEFT_ALIGNED")

        assert row.layout_strategy == "LEFT_ALIGNED"

    def test_explicit_layout_kept(self):
        row = prepare_row({"paragraphs": ["a"], "layout_strategy": "INDENTED"})

        assert row.layout_strategy == "INDENTED"


class TestNormalizeContent:
    """Tests for normalize_content."""

    def test_string_split_on_newlines(self):
        content = normalize_content("第一行\n\n 第二行 \n")

        assert content == StructuredContent((Paragraph("main", ("第一行", "第二行")),))

    def test_list_of_lines(self):
        assert normalize_content(["a", "", "b"]).paragraphs[0].lines == ("a", "b")

    def test_structured_object(self):
        content = normalize_content({"paragraphs": [
            {"type": "preface", "lines": ["序"]},
            {"type": "main", "lines": ["", "  "]},
            {"type": "main", "lines": ["正文"]},
        ]})

        assert content.paragraphs == (
            Paragraph("preface", ("序",)),
            Paragraph("main", ("正文",)),
        )

    @pytest.mark.parametrize("raw", [None, 42, "", []])
    def test_unusable_body(self, raw):
        assert normalize_content(raw).paragraphs == ()


class TestLoadSourceFile:
    """Tests for load_source_file."""

    def test_list_file(self, temp_dir: Path, sample_records):
        path = temp_dir / "poems.json"
        path.write_text(json.dumps(sample_records, ensure_ascii=False), encoding="utf-8")

        assert len(load_source_file(path)) == 4

    def test_single_object_file(self, temp_dir: Path):
        path = temp_dir / "one.json"
        path.write_text('{"id": "a", "paragraphs": ["x"]}', encoding="utf-8")

        assert load_source_file(path) == [{"id": "a", "paragraphs": ["x"]}]

    def test_invalid_json(self, temp_dir: Path):
        path = temp_dir / "bad.json"
        path.write_text("[{", encoding="utf-8")

        with pytest.raises(CorpusBuildError) as exc_info:
            load_source_file(path)

        assert exc_info.value.details["path"] == str(path)

    def test_scalar_document(self, temp_dir: Path):
        path = temp_dir / "scalar.json"
        path.write_text("42", encoding="utf-8")

        with pytest.raises(CorpusBuildError):
            load_source_file(path)

    def test_missing_file(self, temp_dir: Path):
        with pytest.raises(CorpusBuildError):
            load_source_file(temp_dir / "absent.json")


class TestCorpusBuilder:
    """Tests for CorpusBuilder."""

    def test_build_from_records(self, temp_dir: Path, test_config, sample_records):
        output = temp_dir / "out" / "corpus.db"

        stats = CorpusBuilder(output, config=test_config).build_from_records(sample_records)

        assert stats.records_read == 4
        assert stats.records_inserted == 4
        assert stats.records_skipped == 0
        assert stats.duplicates == 0

        with DatabaseManager(output).connection() as conn:
            assert read_schema_version(conn) == SCHEMA_VERSION
            assert conn.execute("SELECT COUNT(*) FROM poetry_fts").fetchone()[0] == 4

    def test_build_from_files(self, temp_dir: Path, test_config, sample_records):
        sources = temp_dir / "sources"
        sources.mkdir()
        (sources / "a.json").write_text(json.dumps(sample_records[:2], ensure_ascii=False), encoding="utf-8")
        (sources / "b.json").write_text(json.dumps(sample_records[2:], ensure_ascii=False), encoding="utf-8")
        (sources / "broken.json").write_text("{not json", encoding="utf-8")

        progress = []
        builder = CorpusBuilder(
            temp_dir / "corpus.db",
            progress_callback=lambda current, total, name: progress.append((current, total, name)),
            config=test_config
        )
        stats = builder.build(sorted(sources.glob("*.json")))

        assert stats.files_scanned == 3
        assert stats.files_failed == 1
        assert stats.records_inserted == 4
        assert len(stats.errors) == 1
        assert "broken.json" in stats.errors[0]
        assert progress == [(1, 3, "a.json"), (2, 3, "b.json"), (3, 3, "broken.json")]

    def test_duplicates_and_empty_records(self, temp_dir: Path, test_config):
        records = [
            {"id": "a", "title": "first", "paragraphs": ["一"]},
            {"id": "a", "title": "second", "paragraphs": ["二"]},
            {"id": "b", "title": "empty", "paragraphs": []},
            {"id": "c", "paragraphs": ["三"]},
        ]
        output = temp_dir / "dup.db"

        stats = CorpusBuilder(output, config=test_config).build_from_records(records)

        assert stats.records_inserted == 2
        assert stats.records_skipped == 1
        assert stats.duplicates == 1

        conn = sqlite3.connect(output)
        try:
            title = conn.execute("SELECT title FROM poetry WHERE id = 'a'").fetchone()[0]
        finally:
            conn.close()
        assert title == "first"

    def test_rebuild_replaces_previous_store(self, temp_dir: Path, test_config, sample_records):
        output = temp_dir / "corpus.db"
        CorpusBuilder(output, config=test_config).build_from_records(sample_records)

        stats = CorpusBuilder(output, config=test_config).build_from_records(sample_records[:1])

        assert stats.records_inserted == 1
        with DatabaseManager(output).connection() as conn:
            assert conn.execute("SELECT COUNT(*) FROM poetry").fetchone()[0] == 1

    def test_tags_normalized(self, corpus_db: Path):
        with DatabaseManager(corpus_db).connection() as conn:
            tags = {
                row["tag"] for row in
                conn.execute("SELECT tag FROM poetry_tags WHERE poetry_id = 'tang-003'")
            }

        assert tags == {"唐诗三百首", "K12", "shi"}

    def test_batch_size_override(self, temp_dir: Path, test_config, sample_records):
        builder = CorpusBuilder(temp_dir / "c.db", config=test_config, batch_size=3)

        assert builder.batch_size == 3
        assert builder.build_from_records(sample_records).records_inserted == 4


class TestPackPayload:
    """Tests for pack_payload."""

    def test_payload_decompresses_to_store(self, temp_dir: Path, corpus_db: Path):
        payload = pack_payload(corpus_db, temp_dir / "dist" / "liumo.db.gz")

        assert payload.exists()
        assert gzip.decompress(payload.read_bytes()) == corpus_db.read_bytes()
        assert payload.stat().st_size < corpus_db.stat().st_size

    def test_missing_store(self, temp_dir: Path):
        with pytest.raises(CorpusBuildError):
            pack_payload(temp_dir / "absent.db", temp_dir / "out.gz")
