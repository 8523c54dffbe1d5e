"""
Asset collection reconciliation.

Merges the assets a project declares with the assets a storage provider
finds at the project's source location, and keeps the video root/frame
relationship out of the navigable list.
"""

import hashlib
import logging
from dataclasses import dataclass, field
from gettext import gettext as _
from pathlib import PurePosixPath
from typing import Dict, List, Optional

from ..annotation.state import Asset, AssetState, AssetType, Project
from ..errors import DiscoveryFailure

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".gif", ".tif", ".tiff"}
VIDEO_EXTENSIONS = {".mp4", ".avi", ".mov", ".mkv", ".webm"}


def asset_id_for(path: str) -> str:
    """Deterministic asset id derived from the source reference."""
    return hashlib.md5(path.encode("utf-8")).hexdigest()


def asset_type_for(path: str) -> AssetType:
    suffix = PurePosixPath(path.split("?")[0]).suffix.lower()
    if suffix in IMAGE_EXTENSIONS:
        return AssetType.IMAGE
    if suffix in VIDEO_EXTENSIONS:
        return AssetType.VIDEO
    return AssetType.UNKNOWN


def asset_from_path(path: str) -> Asset:
    """Create a NotVisited asset for a file path or URL."""
    normalized = path.replace("\\", "/")
    return Asset(
        id=asset_id_for(normalized),
        name=PurePosixPath(normalized).name,
        path=normalized,
        type=asset_type_for(normalized),
    )


def frame_path(root: Asset, timestamp: float) -> str:
    return f"{root.path}#t={timestamp}"


@dataclass
class ReconcileResult:
    visible: List[Asset]
    selected: Optional[Asset]
    warning: Optional[DiscoveryFailure] = None


@dataclass
class AssetCollection:
    """
    Every known asset of a project, root videos and their frames included.

    ``visible`` holds the navigable assets in arrival order. Frame assets
    live only in ``assets`` and are reached through their root.
    """

    assets: Dict[str, Asset] = field(default_factory=dict)
    order: List[str] = field(default_factory=list)

    @property
    def visible(self) -> List[Asset]:
        return [
            self.assets[asset_id]
            for asset_id in self.order
            if not self.assets[asset_id].is_frame
        ]

    def get(self, asset_id: str) -> Optional[Asset]:
        return self.assets.get(asset_id)

    def add(self, asset: Asset):
        if asset.id not in self.assets:
            self.order.append(asset.id)
        self.assets[asset.id] = asset

    def update(self, asset: Asset):
        """Replace the stored copy of a known asset."""
        if asset.id not in self.assets:
            raise KeyError(asset.id)
        self.assets[asset.id] = asset

    def children_of(self, root_id: str) -> List[Asset]:
        return [
            self.assets[asset_id]
            for asset_id in self.order
            if self.assets[asset_id].parent == root_id
        ]

    def frame_asset(self, root: Asset, timestamp: float) -> Asset:
        """Existing frame of ``root`` at ``timestamp``, or a new one."""
        for child in self.children_of(root.id):
            if child.timestamp == timestamp:
                return child
        path = frame_path(root, timestamp)
        frame = Asset(
            id=asset_id_for(path),
            name=f"{root.name}#t={timestamp}",
            path=path,
            type=AssetType.VIDEO_FRAME,
            parent=root.id,
            timestamp=timestamp,
            size=root.size,
        )
        self.add(frame)
        return frame

    def next_of(self, asset_id: str) -> Optional[Asset]:
        return self._offset(asset_id, 1)

    def previous_of(self, asset_id: str) -> Optional[Asset]:
        return self._offset(asset_id, -1)

    def _offset(self, asset_id: str, step: int) -> Optional[Asset]:
        visible = self.visible
        ids = [a.id for a in visible]
        asset = self.assets.get(asset_id)
        # A frame navigates relative to its root
        if asset is not None and asset.is_frame:
            asset_id = asset.parent
        if asset_id not in ids:
            return None
        index = ids.index(asset_id) + step
        if 0 <= index < len(visible):
            return visible[index]
        return None

    async def reconcile(
        self,
        project: Project,
        provider,
        previous_selection: Optional[str] = None,
    ) -> ReconcileResult:
        """
        Merge declared and discovered assets.

        Args:
            project: Project whose declared assets come first
            provider: Object with ``async get_assets()``
            previous_selection: Id of the asset selected before, if any

        Returns:
            Visible assets, default selection and an optional warning
        """
        warning = None
        try:
            discovered = await provider.get_assets()
        except Exception as e:
            warning = DiscoveryFailure(
                _("Asset discovery failed, using project assets only: {error}").format(
                    error=e
                )
            )
            logger.warning(str(warning))
            discovered = []

        self.assets = {}
        self.order = []
        for asset in project.assets.values():
            self.add(asset)
        added = 0
        for asset in discovered:
            if asset.id in self.assets:
                continue
            self.add(asset.with_state(AssetState.NOT_VISITED))
            added += 1
        logger.debug(
            "Reconciled %d declared and %d new assets", len(project.assets), added
        )

        visible = self.visible
        selected = None
        if previous_selection is not None:
            previous = self.assets.get(previous_selection)
            if previous is not None:
                selected = previous
        if selected is None and visible:
            selected = visible[0]
        return ReconcileResult(visible=visible, selected=selected, warning=warning)
