"""
Pure utility functions for tagging logic.

These functions have no side effects and can be tested in isolation.
"""

import uuid
from typing import Iterable, List

import numpy as np

from ..errors import InvalidGeometry
from .state import AssetMetadata, AssetState, Point, Region, RegionType

MIN_POINTS = {
    RegionType.RECTANGLE: 4,
    RegionType.POLYGON: 3,
}


def new_region_id() -> str:
    """Generate a region id that is never reused within a process."""
    return uuid.uuid4().hex


def points_to_array(points: Iterable[Point]) -> np.ndarray:
    """
    Convert points to an (N, 2) float array.

    Args:
        points: Sequence of Point

    Returns:
        Array of x, y coordinates
    """
    coords = [(p.x, p.y) for p in points]
    return np.array(coords, dtype=np.float64).reshape(-1, 2)


def array_to_points(coords: np.ndarray) -> List[Point]:
    return [Point(float(x), float(y)) for x, y in coords]


def validate_region(region: Region) -> Region:
    """
    Check region geometry before it enters the model.

    Args:
        region: Region to check

    Returns:
        The same region

    Raises:
        InvalidGeometry: too few points for its type, or non-finite coordinates
    """
    required = MIN_POINTS[region.type]
    if len(region.points) < required:
        raise InvalidGeometry(
            f"{region.type.value} region {region.id} needs at least "
            f"{required} points, got {len(region.points)}"
        )
    if not np.isfinite(points_to_array(region.points)).all():
        raise InvalidGeometry(f"Region {region.id} has non-finite coordinates")
    return region


def regions_equal(a: Region, b: Region) -> bool:
    """Structural equality ignoring tag order."""
    return (
        a.id == b.id
        and a.type == b.type
        and a.points == b.points
        and set(a.tags) == set(b.tags)
    )


def scale_region(region: Region, scale_x: float, scale_y: float) -> Region:
    """
    Scale region coordinates.

    Surface adapters use this to map from display space to the asset's
    native resolution. The input region is left untouched.

    Args:
        region: Region in display coordinates
        scale_x: Horizontal factor
        scale_y: Vertical factor

    Returns:
        New region with scaled points
    """
    coords = points_to_array(region.points) * np.array([scale_x, scale_y])
    return Region(
        id=region.id,
        type=region.type,
        points=array_to_points(coords),
        tags=list(region.tags),
    )


def compute_asset_state(metadata: AssetMetadata) -> AssetState:
    """
    State of an asset that has just been viewed.

    Tagged if any region has a tag, Visited otherwise. An asset never
    goes back to NotVisited.
    """
    if metadata.is_tagged():
        return AssetState.TAGGED
    return AssetState.VISITED


def rolled_up_state(frame_states: Iterable[AssetState]) -> AssetState:
    """State of a video given the states of its frames."""
    if any(state == AssetState.TAGGED for state in frame_states):
        return AssetState.TAGGED
    return AssetState.VISITED
