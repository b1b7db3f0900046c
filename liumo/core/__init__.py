"""
Core module providing foundational components.

This module contains the configuration loader, centralized logging setup,
and custom exception hierarchy. It has no internal dependencies.
"""

from .config_loader import get_config, reload_config, Config, SearchConfig, FacetsConfig
from .logger import get_logger
from .exceptions import (
    LiumoError,
    ConfigurationError,
    ProvisionError,
    CorpusBuildError,
    SearchError,
    SearchConnectionError,
    SearchQueryError,
    RecordDecodeError,
    SchemaMismatchError,
    DatabaseError
)

__all__ = [
    "get_config",
    "reload_config",
    "Config",
    "SearchConfig",
    "FacetsConfig",
    "get_logger",
    "LiumoError",
    "ConfigurationError",
    "ProvisionError",
    "CorpusBuildError",
    "SearchError",
    "SearchConnectionError",
    "SearchQueryError",
    "RecordDecodeError",
    "SchemaMismatchError",
    "DatabaseError"
]
