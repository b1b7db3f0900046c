"""
Compressed corpus payload bundled with the application.

The payload is a single gzip stream wrapping the SQLite store. It is
handed to the provisioner as an object rather than read from a fixed
location, so tests can supply a small fixture payload.
"""

import gzip
import hashlib
import io
from importlib import resources
from pathlib import Path
from typing import Union

from ..core import get_logger, Config, ProvisionError

logger = get_logger(__name__)

RESOURCE_PACKAGE = "liumo.resources"
RESOURCE_NAME = "liumo.db.gz"


class AssetPayload:
    """
    Immutable compressed bytes of the corpus store.

    Only the compressed form is held in memory; open() yields a streaming
    decompressor over it.
    """

    def __init__(self, data: bytes, name: str = RESOURCE_NAME):
        if not data:
            raise ProvisionError("Corpus payload is empty", details={"name": name})
        self._data = bytes(data)
        self.name = name

    @classmethod
    def from_bytes(cls, data: bytes, name: str = "inline") -> "AssetPayload":
        return cls(data, name=name)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "AssetPayload":
        """Load a payload from a .gz file on disk."""
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ProvisionError(f"Cannot read corpus payload: {e}", path=str(path))
        return cls(data, name=path.name)

    @classmethod
    def from_resource(
        cls,
        package: str = RESOURCE_PACKAGE,
        resource: str = RESOURCE_NAME
    ) -> "AssetPayload":
        """Load the payload shipped as package data."""
        try:
            data = resources.files(package).joinpath(resource).read_bytes()
        except (FileNotFoundError, ModuleNotFoundError) as e:
            raise ProvisionError(
                f"Bundled corpus payload {package}/{resource} is missing; "
                "build it with scripts/build_corpus.py",
                path=resource,
                details={"error": str(e)}
            )
        return cls(data, name=resource)

    @classmethod
    def from_config(cls, config: Config) -> "AssetPayload":
        """Use the configured payload path, falling back to the bundled resource."""
        if config.assets.payload_path is not None:
            return cls.from_file(config.assets.payload_path)
        return cls.from_resource()

    @property
    def size(self) -> int:
        """Compressed size in bytes."""
        return len(self._data)

    @property
    def sha256(self) -> str:
        return hashlib.sha256(self._data).hexdigest()

    def open(self) -> gzip.GzipFile:
        """Open a streaming decompressor over the payload."""
        return gzip.GzipFile(fileobj=io.BytesIO(self._data), mode="rb")

    def __repr__(self) -> str:
        return f"AssetPayload(name={self.name!r}, size={self.size})"
