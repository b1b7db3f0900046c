"""
Pytest fixtures and configuration for the test suite.

Provides temporary directories, a small poetry corpus built into real
stores, gzip payloads and configurations so tests stay isolated from
the user's data directory.
"""

import gzip
import json
import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Callable, Generator, List

import sys
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))


SAMPLE_RECORDS = [
    {
        "id": "tang-001",
        "title": "静夜思",
        "author": "李白",
        "dynasty": "唐",
        "paragraphs": ["床前明月光，疑是地上霜。", "举头望明月，低头思故乡。"],
        "type": "shi",
        "tags": ["唐诗三百首"],
        "source": "chinese-poetry",
        "created_at": "2024-01-01 00:00:00",
    },
    {
        "id": "tang-002",
        "title": "春晓",
        "author": "孟浩然",
        "dynasty": "唐",
        "paragraphs": ["春眠不觉晓，处处闻啼鸟。", "夜来风雨声，花落知多少。"],
        "type": "shi",
        "tags": [],
        "created_at": "2024-01-03 00:00:00",
    },
    {
        "id": "tang-003",
        "title": "登鹳雀楼",
        "author": "王之涣",
        "dynasty": "唐",
        "content": "白日依山尽，黄河入海流。\n欲穷千里目，更上一层楼。",
        "type": "shi",
        "tags": ["唐诗三百首", "K12"],
        "created_at": "2024-01-02 00:00:00",
    },
    {
        "id": "song-001",
        "rhythmic": "水调歌头",
        "author": "苏轼",
        "dynasty": "宋",
        "content": {
            "paragraphs": [
                {"type": "preface", "lines": ["丙辰中秋，欢饮达旦，大醉，作此篇，兼怀子由。"]},
                {"type": "main", "lines": ["明月几时有？把酒问青天。", "不知天上宫阙，今夕是何年。"]},
            ]
        },
        "type": "ci",
        "tags": ["宋词三百首"],
        "layout_strategy": "LEFT_ALIGNED",
        "created_at": "2024-01-04 00:00:00",
    },
]

# Exactly the two records of the end-to-end filter example.
EXAMPLE_RECORDS = [
    {
        "id": "tang-001",
        "title": "静夜思",
        "author": "李白",
        "dynasty": "唐",
        "paragraphs": ["床前明月光，疑是地上霜。", "举头望明月，低头思故乡。"],
        "tags": ["唐诗三百首"],
    },
    {
        "id": "song-001",
        "title": "水调歌头",
        "author": "苏轼",
        "dynasty": "宋",
        "paragraphs": ["明月几时有？把酒问青天。"],
        "tags": ["宋词三百首"],
    },
]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test files.

    Yields:
        Path to temporary directory, cleaned up after test.
    """
    tmp = tempfile.mkdtemp(prefix="liumo_test_")
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def temp_config(temp_dir: Path) -> Generator[Path, None, None]:
    """
    Create a temporary config.json for testing.

    Args:
        temp_dir: Temporary directory fixture.

    Yields:
        Path to temporary config file.
    """
    config_dir = temp_dir / "config"
    config_dir.mkdir()

    app_data_dir = temp_dir / "appdata"
    logs_dir = temp_dir / "logs"

    config_data = {
        "paths": {
            "app_data_directory": str(app_data_dir),
            "database_filename": "test.db",
            "logs_directory": str(logs_dir)
        },
        "assets": {
            "css_path": "assets/style.css"
        },
        "search": {
            "default_limit": 20,
            "max_limit": 100
        },
        "facets": {
            "dynasty_limit": 20,
            "tags": ["唐诗三百首", "宋词三百首", "K12", "shi", "ci"]
        },
        "build": {
            "batch_size": 2,
            "log_progress_every": 2,
            "default_layout": "CENTER_ALIGNED"
        },
        "gui": {
            "page_title": "Test Liumo",
            "results_per_page": 10
        },
        "logging": {
            "level": "DEBUG",
            "format": "%(levelname)s - %(message)s",
            "max_file_size_mb": 1,
            "backup_count": 1
        }
    }

    config_path = config_dir / "config.json"
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config_data, f, ensure_ascii=False)

    yield config_path


@pytest.fixture
def test_config(temp_config: Path):
    """Config object loaded from the temporary config, outside the singleton."""
    from liumo.core.config_loader import Config
    return Config.from_file(temp_config)


@pytest.fixture
def sample_records() -> List[dict]:
    """Fresh copy of the sample corpus."""
    return json.loads(json.dumps(SAMPLE_RECORDS, ensure_ascii=False))


@pytest.fixture
def example_records() -> List[dict]:
    return json.loads(json.dumps(EXAMPLE_RECORDS, ensure_ascii=False))


@pytest.fixture
def build_store(temp_dir: Path, test_config) -> Callable[..., Path]:
    """
    Factory building a current-schema store from source objects.

    Returns:
        Callable(records, name="corpus.db") -> Path of the built store.
    """
    from liumo.indexer import CorpusBuilder

    def _build(records: List[dict], name: str = "corpus.db") -> Path:
        output = temp_dir / "build" / name
        CorpusBuilder(output, config=test_config).build_from_records(records)
        return output

    return _build


@pytest.fixture
def corpus_db(build_store, sample_records) -> Path:
    """Store built from the sample corpus."""
    return build_store(sample_records)


@pytest.fixture
def corpus_payload_bytes(corpus_db: Path) -> bytes:
    """Gzip-compressed bytes of the sample store."""
    return gzip.compress(corpus_db.read_bytes())


@pytest.fixture
def corpus_payload(corpus_payload_bytes: bytes):
    """AssetPayload wrapping the sample store."""
    from liumo.assets import AssetPayload
    return AssetPayload.from_bytes(corpus_payload_bytes, name="test.db.gz")


@pytest.fixture
def engine_for(test_config) -> Callable:
    """Factory for a SearchEngine reading the given store path."""
    from liumo.database import DatabaseManager
    from liumo.search import SearchEngine

    def _engine(db_path: Path):
        return SearchEngine(
            db_manager=DatabaseManager(db_path, read_only=True),
            config=test_config
        )

    return _engine


@pytest.fixture
def engine(engine_for, corpus_db: Path):
    """SearchEngine over the sample store."""
    return engine_for(corpus_db)


@pytest.fixture
def reset_config_singleton():
    """
    Reset the config singleton between tests.

    This ensures each test gets a fresh config instance.
    """
    from liumo.core import config_loader
    config_loader._config_instance = None
    yield
    config_loader._config_instance = None


@pytest.fixture
def reset_logger_singleton():
    """
    Reset the logger initialization flag between tests.
    """
    from liumo.core import logger
    logger._logger_initialized = False
    yield
    logger._logger_initialized = False


@pytest.fixture
def reset_db_singleton():
    """
    Reset the database manager singleton between tests.
    """
    from liumo.database import connection
    connection._db_manager = None
    yield
    connection._db_manager = None


@pytest.fixture
def configured_db(temp_config, reset_config_singleton, reset_db_singleton):
    """
    Set up the global configuration from the temp config.

    Resets both config and db singletons, ready for schema operations.
    """
    from liumo.core.config_loader import get_config
    yield get_config(temp_config)
    # Cleanup happens via reset fixtures
