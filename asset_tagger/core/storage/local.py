"""
Local folder storage.

Keeps one JSON file per asset (``<asset id>-asset.json``) and one per
project (``<project name>.json``) in a target folder, and discovers media
files in a source folder.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

from ..annotation.state import Asset, AssetMetadata, Project
from ..assets.reconciler import asset_from_path
from ..errors import NotFound, PersistenceFailure
from .base import AssetMetadataStore, AssetProvider, ProjectStore

logger = logging.getLogger(__name__)

METADATA_SUFFIX = "-asset.json"


class LocalFileStorage(AssetMetadataStore, ProjectStore, AssetProvider):
    """
    JSON-file persistence rooted at a folder.

    Args:
        target: Folder where metadata and project files are written
        source: Folder scanned for media files, defaults to ``target``
    """

    def __init__(self, target: Path, source: Optional[Path] = None):
        self.target = Path(target)
        self.source = Path(source) if source is not None else self.target

    def metadata_path(self, asset_id: str) -> Path:
        return self.target / f"{asset_id}{METADATA_SUFFIX}"

    def project_path(self, name: str) -> Path:
        return self.target / f"{name}.json"

    async def load(self, asset_or_ref):
        if isinstance(asset_or_ref, Asset):
            return await asyncio.to_thread(self._load_metadata, asset_or_ref)
        return await asyncio.to_thread(self._load_project, str(asset_or_ref))

    async def save(self, value):
        if isinstance(value, AssetMetadata):
            path = self.metadata_path(value.asset.id)
        else:
            path = self.project_path(value.name)
        await asyncio.to_thread(self._write_json, path, value.to_dict())
        return value

    async def get_assets(self) -> List[Asset]:
        return await asyncio.to_thread(self._scan_source)

    def list_metadata(self) -> List[AssetMetadata]:
        """Every metadata file in the target folder, sorted by file name."""
        result = []
        for path in sorted(self.target.glob(f"*{METADATA_SUFFIX}")):
            result.append(AssetMetadata.from_dict(self._read_json(path)))
        return result

    def _load_metadata(self, asset: Asset) -> AssetMetadata:
        path = self.metadata_path(asset.id)
        if not path.exists():
            raise NotFound(asset.id)
        return AssetMetadata.from_dict(self._read_json(path))

    def _load_project(self, ref: str) -> Project:
        path = Path(ref)
        if not path.suffix:
            path = self.project_path(ref)
        if not path.exists():
            raise NotFound(str(path))
        return Project.from_dict(self._read_json(path))

    def _scan_source(self) -> List[Asset]:
        if not self.source.is_dir():
            raise OSError(f"Source folder {self.source} does not exist")
        assets = []
        for path in sorted(self.source.iterdir()):
            if path.is_file() and not path.name.endswith(".json"):
                assets.append(asset_from_path(str(path)))
        logger.debug("Found %d files in %s", len(assets), self.source)
        return assets

    @staticmethod
    def _read_json(path: Path) -> dict:
        try:
            with open(path, "r") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceFailure(f"Could not read {path}: {e}") from e

    @staticmethod
    def _write_json(path: Path, data: dict):
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as f:
                json.dump(data, f, indent=4)
        except OSError as e:
            raise PersistenceFailure(f"Could not write {path}: {e}") from e
