"""
Tests for the configuration loader module.

Tests config loading, parsing, path resolution, and error handling.
"""

import json
import pytest
from pathlib import Path

from liumo.core.config_loader import (
    Config,
    PathsConfig,
    DEFAULT_CURATED_TAGS,
    get_config,
    reload_config,
)
from liumo.core.exceptions import ConfigurationError


class TestPathsConfig:
    """Tests for PathsConfig dataclass."""

    def test_derived_paths(self, temp_dir: Path):
        """Store and marker live side by side in the data directory."""
        config = PathsConfig(
            app_data_directory=temp_dir / "data",
            database_filename="liumo.db",
            logs_directory=temp_dir / "logs"
        )

        assert config.database_path == temp_dir / "data" / "liumo.db"
        assert config.version_marker_path == temp_dir / "data" / "liumo.db.version"


class TestConfigFromFile:
    """Tests for loading config from file."""

    def test_load_valid_config(self, temp_config: Path, reset_config_singleton):
        """Test loading a valid configuration file."""
        config = Config.from_file(temp_config)

        assert config.paths.database_filename == "test.db"
        assert config.search.max_limit == 100
        assert config.build.batch_size == 2
        assert config.gui.page_title == "Test Liumo"
        assert config.facets.tags[0] == "唐诗三百首"

    def test_load_missing_config_raises_error(self, temp_dir: Path):
        """Test that loading non-existent config raises ConfigurationError."""
        fake_path = temp_dir / "nonexistent" / "config.json"

        with pytest.raises(ConfigurationError) as exc_info:
            Config.from_file(fake_path)

        assert "not found" in str(exc_info.value.message).lower()

    def test_load_invalid_json_raises_error(self, temp_dir: Path):
        """Test that invalid JSON raises ConfigurationError."""
        config_dir = temp_dir / "config"
        config_dir.mkdir()
        config_path = config_dir / "config.json"
        config_path.write_text("{ invalid json }")

        with pytest.raises(ConfigurationError) as exc_info:
            Config.from_file(config_path)

        assert "invalid json" in str(exc_info.value.message).lower()

    def test_relative_paths_resolve_against_project_root(self, temp_dir: Path):
        """Relative paths are anchored at the directory above config/."""
        config_dir = temp_dir / "config"
        config_dir.mkdir()
        config_path = config_dir / "config.json"
        config_path.write_text(json.dumps({
            "paths": {"app_data_directory": "var/data", "logs_directory": "var/logs"},
            "assets": {"payload_path": "build/liumo.db.gz"}
        }))

        config = Config.from_file(config_path)

        assert config.paths.app_data_directory == temp_dir / "var" / "data"
        assert config.paths.logs_directory == temp_dir / "var" / "logs"
        assert config.assets.payload_path == temp_dir / "build" / "liumo.db.gz"

    def test_config_default_values(self, temp_dir: Path, reset_config_singleton):
        """Test that missing config values get defaults."""
        config_dir = temp_dir / "config"
        config_dir.mkdir()
        config_path = config_dir / "config.json"

        # Minimal config
        config_path.write_text(json.dumps({"paths": {}, "search": {}}))

        config = Config.from_file(config_path)

        assert config.search.default_limit == 20
        assert config.search.max_limit == 100
        assert config.facets.dynasty_limit == 20
        assert config.facets.tags == DEFAULT_CURATED_TAGS
        assert config.build.default_layout == "CENTER_ALIGNED"
        assert config.paths.database_filename == "liumo.db"
        assert config.assets.payload_path is None

    def test_empty_directories_use_per_user_locations(self, temp_dir: Path):
        """Blank directories fall back to the platform's per-user dirs."""
        config_dir = temp_dir / "config"
        config_dir.mkdir()
        config_path = config_dir / "config.json"
        config_path.write_text(json.dumps({"paths": {"app_data_directory": ""}}))

        config = Config.from_file(config_path)

        assert config.paths.app_data_directory.is_absolute()
        assert "liumo" in str(config.paths.app_data_directory)

    def test_non_positive_max_limit_rejected(self, temp_dir: Path):
        config_dir = temp_dir / "config"
        config_dir.mkdir()
        config_path = config_dir / "config.json"
        config_path.write_text(json.dumps({"search": {"max_limit": 0}}))

        with pytest.raises(ConfigurationError):
            Config.from_file(config_path)

    def test_default_config_without_file(self):
        config = Config.default()

        assert config.project_root == Path.cwd()
        assert config.search.max_limit == 100


class TestGetConfig:
    """Tests for the get_config singleton function."""

    def test_get_config_returns_same_instance(self, temp_config: Path, reset_config_singleton):
        """Test that get_config returns singleton instance."""
        config1 = get_config(temp_config)
        config2 = get_config()

        assert config1 is config2

    def test_reload_config_creates_new_instance(self, temp_config: Path, reset_config_singleton):
        """Test that reload_config creates a fresh instance."""
        _config1 = get_config(temp_config)  # noqa: F841

        with open(temp_config, "r", encoding="utf-8") as f:
            data = json.load(f)
        data["gui"]["page_title"] = "Modified Title"
        with open(temp_config, "w", encoding="utf-8") as f:
            json.dump(data, f)

        config2 = reload_config(temp_config)

        assert config2.gui.page_title == "Modified Title"

    def test_finds_config_upward(self, temp_config: Path, reset_config_singleton, monkeypatch):
        """get_config() locates config/config.json from a nested directory."""
        nested = temp_config.parent.parent / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        config = get_config()

        assert config.gui.page_title == "Test Liumo"
