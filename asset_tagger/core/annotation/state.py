"""
State management for tagging sessions.

Contains data classes representing assets, regions, tags, projects and
the volatile state of an editing session.
"""

import copy
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Dict, List, Optional, Tuple

import numpy as np

from ... import __version__
from ..errors import InvalidGeometry


class AssetState(IntEnum):
    """Tagging status of an asset."""

    NOT_VISITED = 0
    VISITED = 1
    TAGGED = 2


class AssetType(Enum):
    """Media kind of an asset."""

    UNKNOWN = "unknown"
    IMAGE = "image"
    VIDEO = "video"
    VIDEO_FRAME = "videoFrame"


class RegionType(Enum):
    """Geometry kind of a region."""

    RECTANGLE = "rectangle"
    POLYGON = "polygon"


class EditorMode(Enum):
    """Interaction mode of the drawing surface."""

    SELECT = "select"
    RECTANGLE = "rectangle"
    POLYGON = "polygon"


class SessionStatus(Enum):
    """Lifecycle of the active asset inside a session."""

    IDLE = "idle"
    LOADING = "loading"
    ACTIVE = "active"


@dataclass
class Asset:
    """A unit of tagging work: an image, a video, or one frame of a video."""

    id: str
    name: str
    path: str
    type: AssetType = AssetType.IMAGE
    state: AssetState = AssetState.NOT_VISITED
    parent: Optional[str] = None
    timestamp: Optional[float] = None
    size: Optional[Tuple[int, int]] = None

    @property
    def is_frame(self) -> bool:
        return self.parent is not None

    def with_state(self, state: AssetState) -> "Asset":
        """Copy of this asset carrying a new state."""
        return replace(self, state=AssetState(state))

    def to_dict(self):
        """Convert to dictionary for serialization."""
        data = {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "type": self.type.value,
            "state": int(self.state),
        }
        if self.parent is not None:
            data["parent"] = self.parent
            data["timestamp"] = self.timestamp
        if self.size is not None:
            data["size"] = {"width": self.size[0], "height": self.size[1]}
        return data

    @classmethod
    def from_dict(cls, data: dict):
        """Create from dictionary."""
        size = data.get("size")
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            path=data["path"],
            type=AssetType(data.get("type", AssetType.IMAGE.value)),
            state=AssetState(data.get("state", AssetState.NOT_VISITED)),
            parent=data.get("parent"),
            timestamp=data.get("timestamp"),
            size=(size["width"], size["height"]) if size else None,
        )


@dataclass
class Point:
    x: float
    y: float

    def to_dict(self):
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict):
        return cls(x=float(data["x"]), y=float(data["y"]))


@dataclass
class BoundingBox:
    left: float
    top: float
    width: float
    height: float

    def to_dict(self):
        return {
            "left": self.left,
            "top": self.top,
            "width": self.width,
            "height": self.height,
        }


@dataclass
class Region:
    """
    A user-drawn shape anchored to one asset.

    The id stays stable across moves and resizes. Tags are names from the
    project vocabulary, each present at most once.
    """

    id: str
    type: RegionType
    points: List[Point] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)

    @property
    def bounding_box(self) -> BoundingBox:
        """Axis-aligned box enclosing all points."""
        if not self.points:
            return BoundingBox(0.0, 0.0, 0.0, 0.0)
        coords = np.array([(p.x, p.y) for p in self.points], dtype=np.float64)
        mins = coords.min(axis=0)
        maxs = coords.max(axis=0)
        return BoundingBox(
            left=float(mins[0]),
            top=float(mins[1]),
            width=float(maxs[0] - mins[0]),
            height=float(maxs[1] - mins[1]),
        )

    def add_tag(self, name: str) -> bool:
        """Add a tag name. Returns False if it was already present."""
        if name in self.tags:
            return False
        self.tags.append(name)
        return True

    def to_dict(self):
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "type": self.type.value,
            "points": [p.to_dict() for p in self.points],
            "bounding_box": self.bounding_box.to_dict(),
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict):
        """Create from dictionary, rejecting malformed geometry."""
        from .utils import validate_region

        tags = []
        for name in data.get("tags", []):
            if name not in tags:
                tags.append(name)
        region = cls(
            id=data["id"],
            type=RegionType(data["type"]),
            points=[Point.from_dict(p) for p in data.get("points", [])],
            tags=tags,
        )
        return validate_region(region)


@dataclass
class AssetMetadata:
    """
    Regions and state for a single asset.

    Fetched and persisted as a unit. Region ids are unique within one
    instance.
    """

    asset: Asset
    regions: List[Region] = field(default_factory=list)
    version: str = __version__

    @classmethod
    def empty(cls, asset: Asset) -> "AssetMetadata":
        """Metadata for an asset that has never been saved."""
        return cls(asset=asset, regions=[])

    def find_region(self, region_id: str) -> Optional[Region]:
        for region in self.regions:
            if region.id == region_id:
                return region
        return None

    def region_ids(self) -> List[str]:
        return [region.id for region in self.regions]

    def is_tagged(self) -> bool:
        """True if at least one region carries at least one tag."""
        return any(region.tags for region in self.regions)

    def tag_names(self) -> List[str]:
        """Distinct tag names in region order."""
        names = []
        for region in self.regions:
            for name in region.tags:
                if name not in names:
                    names.append(name)
        return names

    def copy(self) -> "AssetMetadata":
        return copy.deepcopy(self)

    def to_dict(self):
        """Convert to dictionary for serialization."""
        return {
            "asset": self.asset.to_dict(),
            "regions": [r.to_dict() for r in self.regions],
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict):
        """Create from dictionary."""
        regions = [Region.from_dict(r) for r in data.get("regions", [])]
        ids = [r.id for r in regions]
        if len(ids) != len(set(ids)):
            raise InvalidGeometry(
                f"Duplicate region ids in metadata for {data['asset']['id']}"
            )
        return cls(
            asset=Asset.from_dict(data["asset"]),
            regions=regions,
            version=data.get("version", __version__),
        )


@dataclass
class Tag:
    name: str
    color: str

    def to_dict(self):
        return {"name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, data: dict):
        return cls(name=data["name"], color=data["color"])


@dataclass
class Project:
    """Tag vocabulary and declared asset membership of a project."""

    id: str
    name: str
    tags: List[Tag] = field(default_factory=list)
    assets: Dict[str, Asset] = field(default_factory=dict)
    source_connection: Optional[str] = None
    version: str = __version__

    def tag_names(self) -> List[str]:
        return [tag.name for tag in self.tags]

    def to_dict(self):
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "tags": [t.to_dict() for t in self.tags],
            "assets": {k: a.to_dict() for k, a in self.assets.items()},
            "source_connection": self.source_connection,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict):
        """Create from dictionary."""
        return cls(
            id=data["id"],
            name=data["name"],
            tags=[Tag.from_dict(t) for t in data.get("tags", [])],
            assets={
                k: Asset.from_dict(a) for k, a in data.get("assets", {}).items()
            },
            source_connection=data.get("source_connection"),
            version=data.get("version", __version__),
        )


@dataclass
class SessionState:
    """
    Volatile state of an editing session.

    Owned by the session controller. ``selected_region_ids`` is always a
    subset of the active metadata's region ids.
    """

    metadata: Optional[AssetMetadata] = None
    selected_region_ids: List[str] = field(default_factory=list)
    editor_mode: EditorMode = EditorMode.SELECT
    surface_enabled: bool = False
    status: SessionStatus = SessionStatus.IDLE
    pending_edit: bool = False

    @property
    def asset(self) -> Optional[Asset]:
        return self.metadata.asset if self.metadata is not None else None

    def selected_regions(self) -> List[Region]:
        if self.metadata is None:
            return []
        return [
            r for r in self.metadata.regions if r.id in self.selected_region_ids
        ]

    def to_dict(self):
        """Convert to dictionary for serialization."""
        return {
            "asset_id": self.asset.id if self.asset is not None else None,
            "selected_region_ids": list(self.selected_region_ids),
            "editor_mode": self.editor_mode.value,
            "surface_enabled": self.surface_enabled,
            "status": self.status.value,
            "pending_edit": self.pending_edit,
        }
