"""
Application startup sequencing.

Provisioning runs once, synchronously, before any search component is
constructed; a store that is mid-extraction is never opened.
"""

from typing import Tuple

from . import __version__
from .assets import AssetPayload, ProvisionResult, VersionedAssetProvisioner
from .core import get_config, get_logger, Config
from .database import DatabaseManager
from .search import SearchEngine

logger = get_logger(__name__)


def provision(config: Config = None, payload: AssetPayload = None) -> ProvisionResult:
    """
    Materialize the corpus store for the running version.

    Args:
        config: Configuration; defaults to the global instance.
        payload: Compressed store. Defaults to the configured payload or
                 the one bundled with the package.

    Returns:
        ProvisionResult from the provisioner.

    Raises:
        ProvisionError: If the store cannot be made ready.
    """
    config = config or get_config()
    payload = payload or AssetPayload.from_config(config)

    provisioner = VersionedAssetProvisioner(
        payload=payload,
        destination_dir=config.paths.app_data_directory,
        current_version=__version__,
        database_filename=config.paths.database_filename
    )
    return provisioner.ensure_ready()


def start(config: Config = None, payload: AssetPayload = None) -> SearchEngine:
    """
    Provision the store and hand back a search engine over it.

    Args:
        config: Configuration; defaults to the global instance.
        payload: Compressed store override, mainly for tests.

    Returns:
        SearchEngine reading the provisioned store.
    """
    engine, _ = start_with_result(config, payload)
    return engine


def start_with_result(
    config: Config = None,
    payload: AssetPayload = None
) -> Tuple[SearchEngine, ProvisionResult]:
    """Like start(), also returning what provisioning did."""
    config = config or get_config()

    result = provision(config, payload)
    logger.info(
        f"Liumo {__version__} ready ({result.decision.value}, "
        f"schema v{result.schema_version})"
    )

    engine = SearchEngine(
        db_manager=DatabaseManager(config.paths.database_path, read_only=True),
        config=config
    )
    return engine, result
