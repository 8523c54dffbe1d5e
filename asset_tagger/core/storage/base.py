"""
Contracts for the external persistence collaborators.

All operations are coroutines. Implementations raise ``NotFound`` for
missing metadata and ``PersistenceFailure`` for anything else that goes
wrong while reading or writing.
"""

from typing import List

from ..annotation.state import Asset, AssetMetadata, Project


class AssetMetadataStore:
    """Loads and saves the metadata of one asset as a whole unit."""

    async def load(self, asset: Asset) -> AssetMetadata:
        """
        Load metadata for an asset.

        Raises:
            NotFound: nothing was saved for this asset yet
            PersistenceFailure: the store could not be read
        """
        raise NotImplementedError

    async def save(self, metadata: AssetMetadata) -> AssetMetadata:
        """
        Overwrite the stored metadata and echo the saved value.

        Idempotent. No partial patching, last writer wins.
        """
        raise NotImplementedError


class ProjectStore:
    async def load(self, ref: str) -> Project:
        """
        Raises:
            NotFound: no project is stored under ``ref``
            PersistenceFailure: the stored project could not be read
        """
        raise NotImplementedError

    async def save(self, project: Project) -> Project:
        raise NotImplementedError


class AssetProvider:
    """Lists the assets physically present at a project's source location."""

    async def get_assets(self) -> List[Asset]:
        raise NotImplementedError
