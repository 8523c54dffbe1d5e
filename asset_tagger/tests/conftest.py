"""
Test fixtures and utilities for asset_tagger tests.

Provides in-memory collaborators, test assets and a ready session.
"""

import asyncio

import pytest

from asset_tagger.core.annotation.state import (
    Asset,
    AssetMetadata,
    AssetType,
    Point,
    Project,
    Region,
    RegionType,
    Tag,
)
from asset_tagger.core.assets import AssetCollection, asset_from_path
from asset_tagger.core.errors import NotFound, PersistenceFailure
from asset_tagger.interfaces.surface import HeadlessSurface

PALETTE = ["#808000", "#1f77b4", "#ff7f0e", "#2ca02c", "#d62728"]


class DummyMetadataStore:
    """
    Metadata store keeping serialized metadata in a dict.

    ``gates`` and ``save_gates`` hold an asyncio.Event per asset id; loads
    or saves of that asset wait until it is set. Ids in ``fail_saves`` and
    ``fail_loads`` raise.
    """

    def __init__(self):
        self.storage = {}
        self.loaded = []
        self.saved = []
        self.gates = {}
        self.save_gates = {}
        self.fail_saves = set()
        self.fail_loads = set()

    def put(self, metadata: AssetMetadata):
        self.storage[metadata.asset.id] = metadata.to_dict()

    async def load(self, asset: Asset) -> AssetMetadata:
        self.loaded.append(asset.id)
        gate = self.gates.get(asset.id)
        if gate is not None:
            await gate.wait()
        if asset.id in self.fail_loads:
            raise PersistenceFailure("storage offline", asset.id)
        if asset.id not in self.storage:
            raise NotFound(asset.id)
        return AssetMetadata.from_dict(self.storage[asset.id])

    async def save(self, metadata: AssetMetadata) -> AssetMetadata:
        gate = self.save_gates.get(metadata.asset.id)
        if gate is not None:
            await gate.wait()
        if metadata.asset.id in self.fail_saves:
            raise OSError("disk full")
        self.saved.append(metadata.copy())
        self.put(metadata)
        return metadata


class DummyProjectStore:
    def __init__(self):
        self.saved = []

    async def save(self, project: Project) -> Project:
        self.saved.append(Project.from_dict(project.to_dict()))
        return project


class DummyProvider:
    def __init__(self, assets=None, error=None):
        self.assets = list(assets or [])
        self.error = error

    async def get_assets(self):
        if self.error is not None:
            raise self.error
        return [Asset.from_dict(a.to_dict()) for a in self.assets]


def create_test_assets(count, prefix="image"):
    return [asset_from_path(f"/data/{prefix}-{i}.jpg") for i in range(count)]


def create_video_asset(name="video"):
    return asset_from_path(f"/data/{name}.mp4")


def create_test_region(region_id="test-region", tags=None, region_type=RegionType.RECTANGLE):
    points = [Point(0, 0), Point(100, 0), Point(100, 100), Point(0, 100)]
    if region_type == RegionType.POLYGON:
        points = points[:3]
    return Region(id=region_id, type=region_type, points=points, tags=list(tags or []))


def create_test_project(assets=None, tags=None):
    return Project(
        id="project-1",
        name="TestProject",
        tags=[Tag(name, PALETTE[i % len(PALETTE)]) for i, name in enumerate(tags or [])],
        assets={a.id: a for a in (assets or [])},
    )


async def wait_until(condition, attempts=100):
    """Yield to the event loop until ``condition()`` holds."""
    for _ in range(attempts):
        if condition():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


@pytest.fixture
def test_assets():
    return create_test_assets(5)


@pytest.fixture
def metadata_store():
    return DummyMetadataStore()


@pytest.fixture
def project_store():
    return DummyProjectStore()


@pytest.fixture
def surface():
    return HeadlessSurface()


@pytest.fixture
def project():
    return create_test_project(tags=["tag-a", "tag-b", "tag-c"])


@pytest.fixture
def make_session(project, metadata_store, project_store, surface):
    """Build an EditingSession over the shared dummy collaborators."""
    from asset_tagger.core.annotation.session import EditingSession

    def _make(collection=None, **kwargs):
        return EditingSession(
            project,
            collection if collection is not None else AssetCollection(),
            metadata_store,
            project_store,
            surface,
            palette=PALETTE,
            **kwargs,
        )

    return _make


@pytest.fixture
def video_setup():
    """A video with two declared frames."""
    video = create_video_asset()
    frames = [
        Asset(
            id=f"{video.id}-frame-{i}",
            name=f"video.mp4#t={t}",
            path=f"{video.path}#t={t}",
            type=AssetType.VIDEO_FRAME,
            parent=video.id,
            timestamp=t,
        )
        for i, t in enumerate([1.0, 2.5])
    ]
    return video, frames
