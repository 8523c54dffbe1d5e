"""
Tests for the data model and its dictionary codec.
"""

import pytest

from asset_tagger.core.annotation.state import (
    Asset,
    AssetMetadata,
    AssetState,
    AssetType,
    Point,
    Project,
    Region,
    RegionType,
    SessionState,
    Tag,
)
from asset_tagger.core.errors import InvalidGeometry
from asset_tagger.tests.conftest import create_test_region


class TestRegion:
    def test_bounding_box(self):
        region = Region(
            id="r1",
            type=RegionType.POLYGON,
            points=[Point(10, 20), Point(50, 5), Point(30, 40)],
        )
        box = region.bounding_box
        assert (box.left, box.top, box.width, box.height) == (10, 5, 40, 35)

    def test_add_tag_is_idempotent(self):
        region = create_test_region()
        assert region.add_tag("car")
        assert not region.add_tag("car")
        assert region.tags == ["car"]

    def test_from_dict_rejects_short_rectangle(self):
        data = create_test_region().to_dict()
        data["points"] = data["points"][:3]
        with pytest.raises(InvalidGeometry):
            Region.from_dict(data)

    def test_from_dict_drops_duplicate_tags(self):
        data = create_test_region(tags=["a", "b", "a"]).to_dict()
        assert Region.from_dict(data).tags == ["a", "b"]

    def test_serialization(self):
        region = create_test_region(tags=["a"])
        data = region.to_dict()
        assert data["type"] == "rectangle"
        assert data["bounding_box"] == {
            "left": 0.0,
            "top": 0.0,
            "width": 100.0,
            "height": 100.0,
        }
        assert Region.from_dict(data) == region


class TestAssetMetadata:
    def test_empty(self):
        asset = Asset(id="a", name="a.jpg", path="/a.jpg")
        metadata = AssetMetadata.empty(asset)
        assert metadata.regions == []
        assert metadata.version
        assert not metadata.is_tagged()

    def test_is_tagged(self):
        asset = Asset(id="a", name="a.jpg", path="/a.jpg")
        metadata = AssetMetadata(asset, [create_test_region("r1")])
        assert not metadata.is_tagged()
        metadata.regions.append(create_test_region("r2", tags=["dog"]))
        assert metadata.is_tagged()

    def test_tag_names_are_distinct(self):
        asset = Asset(id="a", name="a.jpg", path="/a.jpg")
        metadata = AssetMetadata(
            asset,
            [
                create_test_region("r1", tags=["dog", "cat"]),
                create_test_region("r2", tags=["cat", "bird"]),
            ],
        )
        assert metadata.tag_names() == ["dog", "cat", "bird"]

    def test_duplicate_region_ids_rejected(self):
        asset = Asset(id="a", name="a.jpg", path="/a.jpg")
        metadata = AssetMetadata(asset, [create_test_region("r1"), create_test_region("r1")])
        with pytest.raises(InvalidGeometry):
            AssetMetadata.from_dict(metadata.to_dict())

    def test_copy_is_deep(self):
        asset = Asset(id="a", name="a.jpg", path="/a.jpg")
        metadata = AssetMetadata(asset, [create_test_region("r1")])
        clone = metadata.copy()
        clone.regions[0].tags.append("x")
        assert metadata.regions[0].tags == []


class TestAsset:
    def test_frame_round_trip(self):
        frame = Asset(
            id="f",
            name="v.mp4#t=2.0",
            path="/v.mp4#t=2.0",
            type=AssetType.VIDEO_FRAME,
            state=AssetState.TAGGED,
            parent="v",
            timestamp=2.0,
            size=(640, 480),
        )
        restored = Asset.from_dict(frame.to_dict())
        assert restored == frame
        assert restored.is_frame

    def test_with_state_copies(self):
        asset = Asset(id="a", name="a.jpg", path="/a.jpg")
        visited = asset.with_state(AssetState.VISITED)
        assert visited.state == AssetState.VISITED
        assert asset.state == AssetState.NOT_VISITED


def test_project_serialization():
    asset = Asset(id="a", name="a.jpg", path="/a.jpg")
    project = Project(
        id="p", name="P", tags=[Tag("dog", "#ff0000")], assets={"a": asset}
    )
    assert Project.from_dict(project.to_dict()) == project
    assert project.tag_names() == ["dog"]


def test_session_state_selected_regions():
    asset = Asset(id="a", name="a.jpg", path="/a.jpg")
    state = SessionState(
        metadata=AssetMetadata(asset, [create_test_region("r1"), create_test_region("r2")]),
        selected_region_ids=["r2"],
    )
    assert [r.id for r in state.selected_regions()] == ["r2"]
    assert state.to_dict()["asset_id"] == "a"
