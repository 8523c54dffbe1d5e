"""
Editing session management.

Core logic for keeping the active asset's regions, the selection and
editor mode, and the project's asset collection consistent while the
user navigates and edits. UI-agnostic - any drawing surface adapter can
drive it.
"""

import asyncio
import logging
from functools import partial
from typing import Dict, List, Optional

from ..assets.reconciler import AssetCollection, ReconcileResult
from ..errors import NotFound, PersistenceFailure, StaleResponse, TaggerError
from ..tags.vocabulary import TagVocabulary
from ...interfaces.surface import DrawingSurface, SurfaceBinding
from ...interfaces.toolbar import (
    DEFAULT_TOOLBAR,
    ToolbarItem,
    capability_for,
    find_item,
)
from ...utils.config import default_config, palette_from_config
from .events import AnnotationEvent, EventEmitter, EventType
from .state import (
    Asset,
    AssetMetadata,
    AssetState,
    AssetType,
    EditorMode,
    Project,
    Region,
    SessionState,
    SessionStatus,
)
from .utils import (
    compute_asset_state,
    new_region_id,
    rolled_up_state,
    validate_region,
)

logger = logging.getLogger(__name__)


class EditingSession:
    """
    Manages the state and logic of a tagging session.

    This class handles:
    - Asset activation with stale-response suppression
    - Region edits reported by the drawing surface
    - Selection and editor mode
    - Tag application and vocabulary discovery
    - Persistence on deactivation, with video frame roll-up
    - Event emission for UI updates

    Metadata of the active asset belongs to the session until it is
    handed back to the metadata store on deactivation.
    """

    def __init__(
        self,
        project: Project,
        collection: AssetCollection,
        metadata_store,
        project_store,
        surface: DrawingSurface,
        toolbar: Optional[List[ToolbarItem]] = None,
        palette: Optional[List[str]] = None,
        config=None,
    ):
        """
        Initialize editing session.

        Args:
            project: Project being tagged, mutated in place
            collection: Known assets of the project
            metadata_store: Object with ``async load(asset)`` / ``async save(metadata)``
            project_store: Object with ``async save(project)``
            surface: Drawing surface adapter
            toolbar: Editor modes and actions, defaults to DEFAULT_TOOLBAR
            palette: Colors for discovered tags, defaults to the configured palette
            config: Configuration, defaults to ``default_config()``
        """
        self.project = project
        self.collection = collection
        self.metadata_store = metadata_store
        self.project_store = project_store
        self.surface = surface
        self.toolbar = list(toolbar) if toolbar is not None else list(DEFAULT_TOOLBAR)
        self.config = config if config is not None else default_config()

        if palette is None:
            palette = palette_from_config(self.config)
        self.vocabulary = TagVocabulary(project, palette)

        self.state = SessionState(
            editor_mode=EditorMode(self.config.session.default_mode)
        )

        # Event emitter for UI notifications
        self.events = EventEmitter()

        # Incremented on every selection; loads finishing under an older
        # token are stale
        self._selection_token = 0
        self._selected_asset_id: Optional[str] = None
        self._binding: Optional[SurfaceBinding] = None

        # Last queued write per asset id; each write waits for the one before
        self._pending_saves: Dict[str, asyncio.Future] = {}
        # Metadata whose last save failed, restored on re-selection
        self._unsaved: Dict[str, AssetMetadata] = {}

    @property
    def selected_asset_id(self) -> Optional[str]:
        return self._selected_asset_id

    async def start(self, provider, previous_selection: Optional[str] = None):
        """
        Reconcile the asset collection and activate the default asset.

        Args:
            provider: Asset provider with ``async get_assets()``
            previous_selection: Asset to keep selected if it still exists

        Returns:
            ReconcileResult
        """
        result: ReconcileResult = await self.collection.reconcile(
            self.project, provider, previous_selection
        )
        if result.warning is not None:
            self._emit(EventType.DISCOVERY_FAILED, {"message": str(result.warning)})
        if result.selected is not None:
            await self.select_asset(result.selected)
        return result

    # Asset lifecycle

    async def select_asset(self, asset: Asset) -> Optional[AssetMetadata]:
        """
        Make ``asset`` the active asset.

        The previous asset is saved in the background. If another asset is
        selected before this load completes, the result is discarded.

        Args:
            asset: Asset to activate

        Returns:
            The active metadata, or None if a newer selection won

        Raises:
            PersistenceFailure: metadata could not be loaded
        """
        asset = self.collection.get(asset.id) or asset

        previous = self._release_active()
        if previous is not None:
            self._schedule_save(previous)

        self._selection_token += 1
        token = self._selection_token
        self._selected_asset_id = asset.id
        self.state.status = SessionStatus.LOADING
        self._emit(EventType.ASSET_SELECTED, {"asset_id": asset.id})

        try:
            metadata = await self._load(asset)
        except PersistenceFailure as e:
            if self._is_current(token, asset.id):
                self.state.status = SessionStatus.IDLE
                self._emit(
                    EventType.LOAD_FAILED, {"asset_id": asset.id, "error": str(e)}
                )
                raise
            self._drop_stale(asset.id)
            return None

        if not self._is_current(token, asset.id):
            self._drop_stale(asset.id)
            return None

        self._activate(asset, metadata)

        new_tags = self.vocabulary.merge_from(metadata)
        if new_tags:
            self._emit(EventType.TAGS_ADDED, {"tags": [t.name for t in new_tags]})
            try:
                await self.save_project()
            except PersistenceFailure as e:
                logger.error("Could not save discovered tags: %s", e)

        return self.state.metadata

    async def select_next(self) -> Optional[AssetMetadata]:
        return await self._select_relative(1)

    async def select_previous(self) -> Optional[AssetMetadata]:
        return await self._select_relative(-1)

    async def seek_frame(self, timestamp: float) -> Optional[AssetMetadata]:
        """
        Activate the frame of the current video at ``timestamp``.

        Works while a video or one of its frames is active.
        """
        asset = self.state.asset
        if asset is None:
            raise ValueError("No asset loaded")
        if asset.type == AssetType.VIDEO:
            root = asset
        elif asset.is_frame:
            root = self.collection.get(asset.parent)
        else:
            raise ValueError(f"Asset {asset.name} is not a video")
        frame = self.collection.frame_asset(root, timestamp)
        return await self.select_asset(frame)

    async def deactivate(self) -> Optional[AssetMetadata]:
        """
        Persist the active asset and leave the session idle.

        Returns:
            Saved metadata, or None if nothing was active

        Raises:
            PersistenceFailure: the asset or its root video could not be saved
        """
        metadata = self._release_active()
        self._selection_token += 1
        self._selected_asset_id = None
        self.state.status = SessionStatus.IDLE
        if metadata is None:
            return None
        return await self._schedule_save(metadata)

    async def wait_for_saves(self):
        """Wait until every background save has finished."""
        while True:
            pending = [t for t in self._pending_saves.values() if not t.done()]
            if not pending:
                return
            await asyncio.wait(pending)

    async def save_project(self) -> Project:
        try:
            saved = await self.project_store.save(self.project)
        except Exception as e:
            self._emit(
                EventType.SAVE_FAILED, {"project_id": self.project.id, "error": str(e)}
            )
            if isinstance(e, PersistenceFailure):
                raise
            raise PersistenceFailure(
                f"Could not save project {self.project.name}: {e}"
            ) from e
        self._emit(EventType.PROJECT_SAVED, {"project_id": self.project.id})
        return saved

    # Editor

    def set_mode(self, mode: EditorMode):
        """Switch the editor mode. Regions and selection are untouched."""
        mode = EditorMode(mode)
        self.state.editor_mode = mode
        self.surface.set_mode(capability_for(self.toolbar, mode))
        self._emit(EventType.MODE_CHANGED, {"mode": mode.value})

    async def invoke(self, name: str):
        """Run the toolbar item called ``name``."""
        item = find_item(self.toolbar, name)
        if item is None:
            raise KeyError(f"Unknown toolbar item {name}")
        if item.is_state:
            self.set_mode(item.mode)
            return None
        result = getattr(self, item.action)()
        if asyncio.iscoroutine(result):
            result = await result
        return result

    # Surface events

    def on_selection_end(self, raw_region: Region) -> Region:
        """
        Add a freshly drawn region and select it.

        Raises:
            InvalidGeometry: the drawn shape is malformed
        """
        metadata = self._require_active()
        scaled = self.surface.scale_to_source(raw_region)
        region = validate_region(
            Region(id=new_region_id(), type=scaled.type, points=list(scaled.points))
        )
        metadata.regions.append(region)
        self.state.selected_region_ids = [region.id]
        self._regions_changed()
        self._emit_selection()
        return region

    def on_region_move_end(self, region_id: str, raw_region: Region) -> Optional[Region]:
        """Replace a region's geometry, keeping its id and tags."""
        metadata = self._require_active()
        region = metadata.find_region(region_id)
        if region is None:
            logger.warning("Moved region %s is not part of the asset", region_id)
            return None
        scaled = self.surface.scale_to_source(raw_region)
        validate_region(
            Region(id=region.id, type=scaled.type, points=list(scaled.points))
        )
        region.type = scaled.type
        region.points = list(scaled.points)
        self._regions_changed()
        return region

    def on_region_delete(self, region_id: str) -> bool:
        metadata = self._require_active()
        region = metadata.find_region(region_id)
        if region is None:
            return False
        metadata.regions.remove(region)
        self._regions_changed()
        if region_id in self.state.selected_region_ids:
            self.state.selected_region_ids.remove(region_id)
            self._emit_selection()
        return True

    def on_region_selected(self, region_id: str, additive: bool = False):
        """
        Update the selection.

        Single selection replaces the set. Additive selection only ever
        grows it: selecting an already selected region leaves it selected.
        """
        metadata = self._require_active()
        if metadata.find_region(region_id) is None:
            logger.warning("Selected region %s is not part of the asset", region_id)
            return
        if not additive:
            self.state.selected_region_ids = [region_id]
        elif region_id not in self.state.selected_region_ids:
            self.state.selected_region_ids.append(region_id)
        self._emit_selection()

    def selected_regions(self) -> List[Region]:
        return self.state.selected_regions()

    # Tags

    def apply_tag(self, name: str) -> bool:
        """
        Add ``name`` to every selected region that lacks it.

        Unknown names join the project vocabulary.

        Returns:
            True if any region changed
        """
        self._require_active()
        tag = self.vocabulary.add(name)
        if tag is not None:
            self._emit(EventType.TAGS_ADDED, {"tags": [tag.name]})
        changed = False
        for region in self.state.selected_regions():
            changed = region.add_tag(name) or changed
        if changed:
            self._regions_changed()
        return changed

    def apply_tag_at(self, index: int) -> bool:
        """Apply the tag bound to number hotkey ``index``."""
        tag = self.vocabulary.tag_at(index)
        if tag is None:
            return False
        return self.apply_tag(tag.name)

    # Internals

    def _is_current(self, token: int, asset_id: str) -> bool:
        return token == self._selection_token and asset_id == self._selected_asset_id

    def _drop_stale(self, asset_id: str):
        stale = StaleResponse(asset_id, self._selected_asset_id)
        logger.debug("%s", stale)
        self._emit(
            EventType.STALE_RESPONSE_DROPPED, {"asset_id": asset_id, "error": stale}
        )

    def _require_active(self) -> AssetMetadata:
        if self.state.status != SessionStatus.ACTIVE or self.state.metadata is None:
            raise ValueError("No asset loaded")
        return self.state.metadata

    async def _select_relative(self, step: int) -> Optional[AssetMetadata]:
        if self._selected_asset_id is None:
            visible = self.collection.visible
            target = visible[0] if visible else None
        elif step > 0:
            target = self.collection.next_of(self._selected_asset_id)
        else:
            target = self.collection.previous_of(self._selected_asset_id)
        if target is None:
            return None
        return await self.select_asset(target)

    async def _await_pending(self, asset_id: str):
        while True:
            pending = self._pending_saves.get(asset_id)
            if pending is None or pending.done():
                return
            await asyncio.wait([pending])

    async def _load(self, asset: Asset) -> AssetMetadata:
        await self._await_pending(asset.id)
        unsaved = self._unsaved.get(asset.id)
        if unsaved is not None:
            logger.info("Restoring unsaved edits for %s", asset.name)
            metadata = unsaved.copy()
        else:
            metadata = await self._fetch(asset)
        metadata.asset = asset
        return metadata

    async def _fetch(self, asset: Asset) -> AssetMetadata:
        try:
            return await self.metadata_store.load(asset)
        except NotFound:
            return AssetMetadata.empty(asset)
        except PersistenceFailure:
            raise
        except Exception as e:
            raise PersistenceFailure(
                f"Could not load metadata for {asset.name}: {e}", asset.id
            ) from e

    def _activate(self, asset: Asset, metadata: AssetMetadata):
        self.state.metadata = metadata
        self.state.selected_region_ids = []
        self.state.pending_edit = False
        self.state.status = SessionStatus.ACTIVE

        self.surface.render_content_source(asset)
        self._render_regions()
        self.surface.set_mode(capability_for(self.toolbar, self.state.editor_mode))

        self._binding = SurfaceBinding(
            self.surface,
            asset.id,
            on_selection_end=self.on_selection_end,
            on_region_move_end=self.on_region_move_end,
            on_region_delete=self.on_region_delete,
            on_region_selected=self.on_region_selected,
        )
        self._binding.bind()
        self._set_enabled(True)

        self._emit(
            EventType.ASSET_LOADED,
            {"asset_id": asset.id, "num_regions": len(metadata.regions)},
        )

    def _release_active(self) -> Optional[AssetMetadata]:
        """Detach the active metadata from the surface and the session."""
        if self._binding is not None:
            self._binding.unbind()
            self._binding = None
        self._set_enabled(False)
        metadata = None
        if self.state.status == SessionStatus.ACTIVE:
            metadata = self.state.metadata
        self.state.metadata = None
        self.state.selected_region_ids = []
        self.state.pending_edit = False
        return metadata

    def _schedule_save(self, metadata: AssetMetadata) -> asyncio.Future:
        return self._queue_write(metadata.asset.id, partial(self._commit, metadata))

    def _queue_write(self, asset_id: str, write) -> asyncio.Future:
        """
        Run ``write()`` once every earlier write of ``asset_id`` finished.

        Args:
            asset_id: Asset whose stored metadata ``write`` replaces
            write: Coroutine function performing the write

        Returns:
            Task of this write, also the new tail of the asset's queue
        """
        previous = self._pending_saves.get(asset_id)

        async def _run():
            if previous is not None and not previous.done():
                await asyncio.wait([previous])
            return await write()

        task = asyncio.ensure_future(_run())
        self._pending_saves[asset_id] = task

        def _done(t):
            if self._pending_saves.get(asset_id) is t:
                del self._pending_saves[asset_id]
            if not t.cancelled() and t.exception() is not None:
                logger.debug("Queued write of %s failed", asset_id)

        task.add_done_callback(_done)
        return task

    def _state_for(self, metadata: AssetMetadata) -> AssetState:
        state = compute_asset_state(metadata)
        if metadata.asset.type == AssetType.VIDEO:
            children = [c.state for c in self.collection.children_of(metadata.asset.id)]
            state = max(state, rolled_up_state(children))
        return state

    async def _commit(self, metadata: AssetMetadata) -> AssetMetadata:
        asset = metadata.asset
        to_save = metadata.copy()
        to_save.asset = asset.with_state(self._state_for(metadata))
        saved = await self._persist(to_save, keep_on_failure=metadata)
        self._apply_asset(to_save.asset)
        self._emit(
            EventType.ASSET_SAVED,
            {"asset_id": asset.id, "state": int(to_save.asset.state)},
        )
        if to_save.asset.is_frame:
            # Queued behind pending saves of the root so the roll-up reads fresh metadata
            await self._queue_write(
                to_save.asset.parent, partial(self._roll_up, to_save.asset)
            )
        return saved

    async def _roll_up(self, frame: Asset):
        """Recompute and persist the state of a frame's root video."""
        root = self.collection.get(frame.parent)
        if root is None:
            logger.warning("Root asset %s of frame %s is unknown", frame.parent, frame.id)
            return
        root_metadata = await self._fetch(root)
        state = rolled_up_state(c.state for c in self.collection.children_of(root.id))
        root_metadata.asset = root.with_state(max(state, compute_asset_state(root_metadata)))
        await self._persist(root_metadata)
        self._apply_asset(root_metadata.asset)
        self._emit(
            EventType.ROOT_ROLLED_UP,
            {
                "asset_id": root.id,
                "frame_id": frame.id,
                "state": int(root_metadata.asset.state),
            },
        )

    async def _persist(
        self,
        metadata: AssetMetadata,
        keep_on_failure: Optional[AssetMetadata] = None,
    ) -> AssetMetadata:
        asset = metadata.asset
        try:
            saved = await self.metadata_store.save(metadata)
        except Exception as e:
            if keep_on_failure is not None:
                self._unsaved[asset.id] = keep_on_failure
            logger.error("Could not save metadata for %s: %s", asset.name, e)
            self._emit(EventType.SAVE_FAILED, {"asset_id": asset.id, "error": str(e)})
            if isinstance(e, TaggerError):
                raise PersistenceFailure(str(e), asset.id) from e
            raise PersistenceFailure(
                f"Could not save metadata for {asset.name}: {e}", asset.id
            ) from e
        self._unsaved.pop(asset.id, None)
        return saved

    def _apply_asset(self, asset: Asset):
        """Propagate a new asset state to the collection and the project."""
        known = self.collection.get(asset.id)
        if known is None:
            self.collection.add(asset)
        else:
            self.collection.update(asset)
        self.project.assets[asset.id] = asset
        if known is None or known.state != asset.state:
            self._emit(
                EventType.ASSET_STATE_CHANGED,
                {"asset_id": asset.id, "state": int(asset.state)},
            )

    def _render_regions(self):
        self.surface.set_regions(self.state.metadata.copy().regions)

    def _regions_changed(self):
        self.state.pending_edit = True
        self._render_regions()
        self._emit(
            EventType.REGIONS_CHANGED,
            {"num_regions": len(self.state.metadata.regions)},
        )

    def _emit_selection(self):
        self._emit(
            EventType.SELECTION_CHANGED,
            {"selected": list(self.state.selected_region_ids)},
        )

    def _set_enabled(self, enabled: bool):
        self.state.surface_enabled = enabled
        self.surface.set_enabled(enabled)

    def _emit(self, event_type: EventType, data: dict):
        self.events.emit(AnnotationEvent(event_type, data))
