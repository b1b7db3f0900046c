"""
Configuration loader for the Liumo corpus.

Loads settings from config.json and provides typed access via dataclasses.
Supports singleton pattern for global access and runtime reload capability.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from platformdirs import user_data_dir, user_log_dir

from .exceptions import ConfigurationError

APP_NAME = "liumo"

DEFAULT_CURATED_TAGS = [
    "唐诗三百首",
    "宋词三百首",
    "K12",
    "shi",
    "ci",
    "qu",
    "wen",
    "fu",
]


@dataclass
class PathsConfig:
    """Configuration for file system paths."""
    app_data_directory: Path
    database_filename: str
    logs_directory: Path

    @property
    def database_path(self) -> Path:
        """Location of the materialized corpus store."""
        return self.app_data_directory / self.database_filename

    @property
    def version_marker_path(self) -> Path:
        """Sidecar file recording which application version extracted the store."""
        return self.app_data_directory / f"{self.database_filename}.version"


@dataclass
class AssetsConfig:
    """Configuration for bundled assets."""
    payload_path: Optional[Path]
    css_path: Path


@dataclass
class SearchConfig:
    """Configuration for search functionality."""
    default_limit: int
    max_limit: int


@dataclass
class FacetsConfig:
    """Configuration for the dynasty and tag facets."""
    dynasty_limit: int
    tags: List[str]


@dataclass
class BuildConfig:
    """Configuration for the corpus build pipeline."""
    batch_size: int
    log_progress_every: int
    default_layout: str


@dataclass
class GUIConfig:
    """Configuration for Streamlit web interface."""
    page_title: str
    results_per_page: int


@dataclass
class LoggingConfig:
    """Configuration for logging behavior."""
    level: str
    format: str
    max_file_size_mb: int
    backup_count: int


@dataclass
class Config:
    """
    Main configuration container holding all config sections.

    Provides singleton access via get_config() function.
    """
    paths: PathsConfig
    assets: AssetsConfig
    search: SearchConfig
    facets: FacetsConfig
    build: BuildConfig
    gui: GUIConfig
    logging: LoggingConfig
    project_root: Path = field(default_factory=Path)

    @classmethod
    def from_file(cls, config_path: Path) -> "Config":
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the config.json file.

        Returns:
            Populated Config instance.

        Raises:
            ConfigurationError: If file is missing or invalid.
        """
        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                {"path": str(config_path)}
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {e}",
                {"path": str(config_path)}
            )

        project_root = config_path.parent.parent

        return cls._parse_config(data, project_root)

    @classmethod
    def default(cls) -> "Config":
        """Build a configuration made only of defaults, rooted at the working directory."""
        return cls._parse_config({}, Path.cwd())

    @classmethod
    def _parse_config(cls, data: dict, project_root: Path) -> "Config":
        """Parse raw config dict into typed Config object."""
        paths_data = data.get("paths", {})
        app_data = paths_data.get("app_data_directory") or user_data_dir(APP_NAME, appauthor=False)
        logs_dir = paths_data.get("logs_directory") or user_log_dir(APP_NAME, appauthor=False)
        paths = PathsConfig(
            app_data_directory=cls._resolve_path(app_data, project_root),
            database_filename=paths_data.get("database_filename", "liumo.db"),
            logs_directory=cls._resolve_path(logs_dir, project_root)
        )

        assets_data = data.get("assets", {})
        payload = assets_data.get("payload_path")
        assets = AssetsConfig(
            payload_path=cls._resolve_path(payload, project_root) if payload else None,
            css_path=cls._resolve_path(assets_data.get("css_path", "assets/style.css"), project_root)
        )

        search_data = data.get("search", {})
        search = SearchConfig(
            default_limit=search_data.get("default_limit", 20),
            max_limit=search_data.get("max_limit", 100)
        )

        if search.max_limit <= 0:
            raise ConfigurationError(
                "search.max_limit must be positive",
                {"max_limit": search.max_limit}
            )

        facets_data = data.get("facets", {})
        facets = FacetsConfig(
            dynasty_limit=facets_data.get("dynasty_limit", 20),
            tags=list(facets_data.get("tags", DEFAULT_CURATED_TAGS))
        )

        build_data = data.get("build", {})
        build = BuildConfig(
            batch_size=build_data.get("batch_size", 500),
            log_progress_every=build_data.get("log_progress_every", 5000),
            default_layout=build_data.get("default_layout", "CENTER_ALIGNED")
        )

        gui_data = data.get("gui", {})
        gui = GUIConfig(
            page_title=gui_data.get("page_title", "流墨 · 诗词检索"),
            results_per_page=gui_data.get("results_per_page", 20)
        )

        log_data = data.get("logging", {})
        logging_cfg = LoggingConfig(
            level=log_data.get("level", "INFO"),
            format=log_data.get("format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            max_file_size_mb=log_data.get("max_file_size_mb", 10),
            backup_count=log_data.get("backup_count", 5)
        )

        return cls(
            paths=paths,
            assets=assets,
            search=search,
            facets=facets,
            build=build,
            gui=gui,
            logging=logging_cfg,
            project_root=project_root
        )

    @staticmethod
    def _resolve_path(path_str: str, project_root: Path) -> Path:
        """Resolve a path string, making relative paths absolute."""
        path = Path(path_str).expanduser()
        if path.is_absolute():
            return path
        return project_root / path


_config_instance: Optional[Config] = None


def get_config(config_path: Path = None) -> Config:
    """
    Get the singleton Config instance.

    Args:
        config_path: Optional path to config file. If not provided,
                    searches upward from current directory.

    Returns:
        The global Config instance.

    Raises:
        ConfigurationError: If config cannot be loaded.
    """
    global _config_instance

    if _config_instance is None or config_path is not None:
        if config_path is None:
            config_path = _find_config_file()
        _config_instance = Config.from_file(Path(config_path))

    return _config_instance


def _find_config_file() -> Path:
    """Search upward from current directory to find config/config.json."""
    current = Path.cwd()

    for _ in range(10):
        config_path = current / "config" / "config.json"
        if config_path.exists():
            return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    raise ConfigurationError(
        "Could not find config/config.json in current directory or parents"
    )


def reload_config(config_path: Path = None) -> Config:
    """
    Force reload of configuration.

    Args:
        config_path: Optional path to config file.

    Returns:
        Fresh Config instance.
    """
    global _config_instance
    _config_instance = None
    return get_config(config_path)
