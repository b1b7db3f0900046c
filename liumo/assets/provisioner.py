"""
Versioned provisioning of the corpus store.

On every startup the provisioner decides whether the on-disk store must
be (re)extracted from the bundled payload. A sidecar marker file holds
the application version that last extracted the store. The marker is
removed before extraction and written only after the copy completed, so
an interrupted copy always leaves it absent and the next start retries.
"""

import os
import shutil
import sqlite3
import zlib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ..core import get_logger, ProvisionError
from ..database import SCHEMA_LAYOUTS
from ..utils import ensure_directory
from .payload import AssetPayload

logger = get_logger(__name__)

COPY_CHUNK_SIZE = 1024 * 1024

# Leftover journal files would be replayed against the fresh copy.
SIDECAR_SUFFIXES = ("-wal", "-shm", "-journal")


class ProvisionDecision(str, Enum):
    """Outcome of comparing the on-disk store with the running version."""
    MISSING_STORE = "missing_store"
    STALE_VERSION = "stale_version"
    MISSING_MARKER = "missing_marker"
    UP_TO_DATE = "up_to_date"

    @property
    def needs_extraction(self) -> bool:
        return self is not ProvisionDecision.UP_TO_DATE


@dataclass
class ProvisionResult:
    """
    Summary of one ensure_ready() call.

    Attributes:
        decision: Which rule of the decision table applied.
        extracted: Whether the payload was decompressed this time.
        schema_version: Version tag read from the store afterwards.
        bytes_written: Decompressed size, 0 when skipped.
    """
    decision: ProvisionDecision
    extracted: bool
    schema_version: Optional[int] = None
    bytes_written: int = 0

    @property
    def schema_supported(self) -> bool:
        return self.schema_version in SCHEMA_LAYOUTS


class VersionedAssetProvisioner:
    """
    Materializes the corpus store from its compressed payload when needed.

    Safe to call once per process start; repeated calls with an unchanged
    version are no-ops.
    """

    def __init__(
        self,
        payload: AssetPayload,
        destination_dir: Union[str, Path],
        current_version: str,
        database_filename: str = "liumo.db"
    ):
        """
        Initialize the provisioner.

        Args:
            payload: Compressed store to extract.
            destination_dir: Writable per-user data directory.
            current_version: Version string of the running application.
            database_filename: Name of the store file inside destination_dir.
        """
        self.payload = payload
        self.destination_dir = Path(destination_dir)
        self.current_version = current_version.strip()
        self.db_path = self.destination_dir / database_filename
        self.marker_path = self.destination_dir / f"{database_filename}.version"

    def read_marker(self) -> Optional[str]:
        """Return the recorded version, or None when there is no marker."""
        try:
            return self.marker_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise ProvisionError(
                f"Cannot read version marker: {e}",
                path=str(self.marker_path)
            )

    def decide(self) -> ProvisionDecision:
        """Apply the decision table, first match wins."""
        if not self.db_path.exists():
            return ProvisionDecision.MISSING_STORE

        marker = self.read_marker()

        if marker is None:
            return ProvisionDecision.MISSING_MARKER

        if marker != self.current_version:
            return ProvisionDecision.STALE_VERSION

        return ProvisionDecision.UP_TO_DATE

    def ensure_ready(self) -> ProvisionResult:
        """
        Make sure an up-to-date store exists on disk.

        Returns:
            ProvisionResult describing what happened.

        Raises:
            ProvisionError: On any filesystem or decompression failure.
        """
        decision = self.decide()

        if not decision.needs_extraction:
            logger.info(
                f"Corpus store at {self.db_path} is current (v{self.current_version})"
            )
            return ProvisionResult(
                decision=decision,
                extracted=False,
                schema_version=self._peek_schema_version()
            )

        logger.info(
            f"Provisioning corpus store ({decision.value}): "
            f"{self.payload.name} -> {self.db_path}"
        )

        bytes_written = self._extract()
        schema_version = self._read_schema_version()
        self._write_marker()

        if schema_version not in SCHEMA_LAYOUTS:
            logger.error(
                f"Provisioned store has unsupported schema version {schema_version}; "
                "searches will be refused"
            )

        logger.info(
            f"Corpus store ready: {bytes_written / (1024 * 1024):.1f} MB, "
            f"schema v{schema_version}"
        )

        return ProvisionResult(
            decision=decision,
            extracted=True,
            schema_version=schema_version,
            bytes_written=bytes_written
        )

    def _extract(self) -> int:
        """Stream-decompress the payload over the store file."""
        try:
            ensure_directory(self.destination_dir)
        except OSError as e:
            raise ProvisionError(
                f"Cannot create data directory: {e}",
                path=str(self.destination_dir)
            )

        try:
            self.marker_path.unlink(missing_ok=True)
            for suffix in SIDECAR_SUFFIXES:
                Path(f"{self.db_path}{suffix}").unlink(missing_ok=True)

            with self.payload.open() as source, open(self.db_path, "wb") as target:
                shutil.copyfileobj(source, target, COPY_CHUNK_SIZE)
                target.flush()
                os.fsync(target.fileno())
                bytes_written = target.tell()

        except (OSError, EOFError, zlib.error) as e:
            logger.error(f"Corpus extraction failed: {e}")
            raise ProvisionError(
                f"Failed to extract corpus payload: {e}",
                path=str(self.db_path),
                details={"payload": self.payload.name}
            )

        return bytes_written

    def _read_schema_version(self) -> int:
        """Read the version tag; an unreadable store is a provisioning failure."""
        try:
            conn = sqlite3.connect(f"{self.db_path.resolve().as_uri()}?mode=ro", uri=True)
            try:
                return conn.execute("PRAGMA user_version").fetchone()[0]
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise ProvisionError(
                f"Corpus store is not a readable database: {e}",
                path=str(self.db_path)
            )

    def _peek_schema_version(self) -> Optional[int]:
        """Version tag of an existing store, None when it cannot be read."""
        try:
            return self._read_schema_version()
        except ProvisionError as e:
            logger.warning(e.message)
            return None

    def _write_marker(self) -> None:
        try:
            self.marker_path.write_text(self.current_version, encoding="utf-8")
        except OSError as e:
            raise ProvisionError(
                f"Cannot write version marker: {e}",
                path=str(self.marker_path)
            )
