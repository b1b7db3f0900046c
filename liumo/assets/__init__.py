"""
Asset module for the bundled corpus payload and its provisioning.

Provides the compressed payload wrapper and the versioned provisioner
that materializes the corpus store on startup.
"""

from .payload import AssetPayload
from .provisioner import (
    VersionedAssetProvisioner,
    ProvisionDecision,
    ProvisionResult
)

__all__ = [
    "AssetPayload",
    "VersionedAssetProvisioner",
    "ProvisionDecision",
    "ProvisionResult"
]
