"""
Tests for pure region and state helpers.
"""

import math

import pytest

from asset_tagger.core.annotation.state import (
    Asset,
    AssetMetadata,
    AssetState,
    Point,
    Region,
    RegionType,
)
from asset_tagger.core.annotation.utils import (
    compute_asset_state,
    new_region_id,
    regions_equal,
    rolled_up_state,
    scale_region,
    validate_region,
)
from asset_tagger.core.errors import InvalidGeometry
from asset_tagger.tests.conftest import create_test_region


class TestValidateRegion:
    def test_rectangle_needs_four_points(self):
        region = create_test_region()
        assert validate_region(region) is region
        region.points = region.points[:3]
        with pytest.raises(InvalidGeometry):
            validate_region(region)

    def test_polygon_needs_three_points(self):
        region = create_test_region(region_type=RegionType.POLYGON)
        validate_region(region)
        region.points = region.points[:2]
        with pytest.raises(InvalidGeometry):
            validate_region(region)

    def test_non_finite_coordinates(self):
        region = create_test_region()
        region.points[0] = Point(math.nan, 0)
        with pytest.raises(InvalidGeometry):
            validate_region(region)


def test_regions_equal_ignores_tag_order():
    a = create_test_region(tags=["x", "y"])
    b = create_test_region(tags=["y", "x"])
    assert regions_equal(a, b)
    b.points[0] = Point(1, 1)
    assert not regions_equal(a, b)


def test_scale_region():
    region = create_test_region(tags=["x"])
    scaled = scale_region(region, 2.0, 0.5)
    assert scaled.points[2] == Point(200.0, 50.0)
    assert scaled.tags == ["x"]
    # Input untouched
    assert region.points[2] == Point(100, 100)


def test_new_region_id_unique():
    ids = {new_region_id() for _ in range(100)}
    assert len(ids) == 100


def test_compute_asset_state():
    asset = Asset(id="a", name="a.jpg", path="/a.jpg")
    assert compute_asset_state(AssetMetadata(asset)) == AssetState.VISITED
    metadata = AssetMetadata(asset, [create_test_region()])
    assert compute_asset_state(metadata) == AssetState.VISITED
    metadata.regions[0].tags.append("dog")
    assert compute_asset_state(metadata) == AssetState.TAGGED


def test_rolled_up_state():
    assert rolled_up_state([]) == AssetState.VISITED
    assert (
        rolled_up_state([AssetState.VISITED, AssetState.NOT_VISITED])
        == AssetState.VISITED
    )
    assert (
        rolled_up_state([AssetState.VISITED, AssetState.TAGGED]) == AssetState.TAGGED
    )
