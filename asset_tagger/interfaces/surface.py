"""
Drawing surface boundary.

The drawing surface renders media and regions and turns pointer gestures
into region shapes. It never owns annotation data: the session drives it
with commands and it reports user intent through its event emitter.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..core.annotation.events import AnnotationEvent, EventEmitter
from ..core.annotation.state import Asset, Region
from ..core.annotation.utils import scale_region
from ..core.errors import InvalidGeometry

logger = logging.getLogger(__name__)


class SurfaceEventType(Enum):
    """Events reported by the drawing surface."""

    SELECTION_END = "selection_end"
    REGION_MOVE_END = "region_move_end"
    REGION_DELETE = "region_delete"
    REGION_SELECTED = "region_selected"


class DrawingSurface:
    """
    Base class for drawing surface adapters.

    Subclasses implement the commands. Gesture handlers call the
    ``selection_end`` / ``region_move_end`` / ``region_delete`` /
    ``region_selected`` helpers, which dispatch one event at a time.
    """

    def __init__(self):
        self.events = EventEmitter()

    # Commands

    def render_content_source(self, asset: Asset):
        raise NotImplementedError

    def set_regions(self, regions: List[Region]):
        """Replace every drawn region."""
        raise NotImplementedError

    def set_mode(self, capability: Any):
        """Arm the gesture handler matching an editor mode."""
        raise NotImplementedError

    def set_enabled(self, enabled: bool):
        raise NotImplementedError

    def scale_to_source(self, region: Region) -> Region:
        """Map a region from surface coordinates to the asset's resolution."""
        raise NotImplementedError

    # Events

    def selection_end(self, raw_region: Region):
        self.events.emit(
            AnnotationEvent(SurfaceEventType.SELECTION_END, {"region": raw_region})
        )

    def region_move_end(self, region_id: str, raw_region: Region):
        self.events.emit(
            AnnotationEvent(
                SurfaceEventType.REGION_MOVE_END,
                {"region_id": region_id, "region": raw_region},
            )
        )

    def region_delete(self, region_id: str):
        self.events.emit(
            AnnotationEvent(SurfaceEventType.REGION_DELETE, {"region_id": region_id})
        )

    def region_selected(self, region_id: str, additive: bool = False):
        self.events.emit(
            AnnotationEvent(
                SurfaceEventType.REGION_SELECTED,
                {"region_id": region_id, "additive": additive},
            )
        )


class HeadlessSurface(DrawingSurface):
    """
    Surface without a display.

    Records the last command of each kind and scales regions by a fixed
    factor. Used by the CLI and in tests.
    """

    def __init__(self, scale_x: float = 1.0, scale_y: float = 1.0):
        super().__init__()
        self.scale_x = scale_x
        self.scale_y = scale_y
        self.content_source: Optional[Asset] = None
        self.regions: List[Region] = []
        self.capability: Any = None
        self.enabled = False

    def render_content_source(self, asset: Asset):
        self.content_source = asset

    def set_regions(self, regions: List[Region]):
        self.regions = list(regions)

    def set_mode(self, capability: Any):
        self.capability = capability

    def set_enabled(self, enabled: bool):
        self.enabled = enabled

    def scale_to_source(self, region: Region) -> Region:
        return scale_region(region, self.scale_x, self.scale_y)


class SurfaceBinding:
    """
    Subscription of session handlers to a surface for one asset lifetime.

    Create a new binding on every asset switch and unbind the old one.
    Events that still reach an unbound binding are dropped.

    Args:
        surface: Surface whose events are observed
        asset_id: Asset the handlers operate on
        on_selection_end: ``fn(raw_region)``
        on_region_move_end: ``fn(region_id, raw_region)``
        on_region_delete: ``fn(region_id)``
        on_region_selected: ``fn(region_id, additive)``
    """

    def __init__(
        self,
        surface: DrawingSurface,
        asset_id: str,
        on_selection_end: Callable,
        on_region_move_end: Callable,
        on_region_delete: Callable,
        on_region_selected: Callable,
    ):
        self.surface = surface
        self.asset_id = asset_id
        self.active = False
        self._callbacks: Dict[SurfaceEventType, Callable] = {
            SurfaceEventType.SELECTION_END: lambda d: on_selection_end(d["region"]),
            SurfaceEventType.REGION_MOVE_END: lambda d: on_region_move_end(
                d["region_id"], d["region"]
            ),
            SurfaceEventType.REGION_DELETE: lambda d: on_region_delete(
                d["region_id"]
            ),
            SurfaceEventType.REGION_SELECTED: lambda d: on_region_selected(
                d["region_id"], d.get("additive", False)
            ),
        }

    def bind(self):
        for event_type in self._callbacks:
            self.surface.events.on(event_type, self._dispatch)
        self.active = True

    def unbind(self):
        for event_type in self._callbacks:
            self.surface.events.off(event_type, self._dispatch)
        self.active = False

    def _dispatch(self, event: AnnotationEvent):
        if not self.active:
            logger.debug(
                "Ignoring %s for inactive asset %s", event.event_type, self.asset_id
            )
            return
        try:
            self._callbacks[event.event_type](event.data)
        except InvalidGeometry as e:
            logger.warning("Rejected shape on asset %s: %s", self.asset_id, e)
