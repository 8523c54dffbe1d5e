"""
Core annotation module - UI-agnostic tagging logic.

The data model and event system live here. The session controller is in
:mod:`asset_tagger.core.annotation.session`.
"""

from .events import AnnotationEvent, EventType, EventEmitter
from .state import (
    Asset,
    AssetMetadata,
    AssetState,
    AssetType,
    BoundingBox,
    EditorMode,
    Point,
    Project,
    Region,
    RegionType,
    SessionState,
    SessionStatus,
    Tag,
)

__all__ = [
    "AnnotationEvent",
    "EventType",
    "EventEmitter",
    "Asset",
    "AssetMetadata",
    "AssetState",
    "AssetType",
    "BoundingBox",
    "EditorMode",
    "Point",
    "Project",
    "Region",
    "RegionType",
    "SessionState",
    "SessionStatus",
    "Tag",
]
