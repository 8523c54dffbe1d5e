"""
Toolbar configuration.

An explicit list of toolbar items handed to the session. State items
switch the editor mode and name the surface capability to arm; action
items name a session operation.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from ..core.annotation.state import EditorMode


class ToolbarGroup:
    CANVAS = "canvas"
    NAVIGATION = "navigation"
    PROJECT = "project"


@dataclass(frozen=True)
class ToolbarItem:
    name: str
    group: str
    mode: Optional[EditorMode] = None
    capability: Any = None
    action: Optional[str] = None

    @property
    def is_state(self) -> bool:
        return self.mode is not None


DEFAULT_TOOLBAR: List[ToolbarItem] = [
    ToolbarItem(
        "selectCanvas", ToolbarGroup.CANVAS, mode=EditorMode.SELECT, capability="none"
    ),
    ToolbarItem(
        "drawRectangle",
        ToolbarGroup.CANVAS,
        mode=EditorMode.RECTANGLE,
        capability="rect",
    ),
    ToolbarItem(
        "drawPolygon",
        ToolbarGroup.CANVAS,
        mode=EditorMode.POLYGON,
        capability="polygon",
    ),
    ToolbarItem(
        "navigatePreviousAsset", ToolbarGroup.NAVIGATION, action="select_previous"
    ),
    ToolbarItem("navigateNextAsset", ToolbarGroup.NAVIGATION, action="select_next"),
    ToolbarItem("saveProject", ToolbarGroup.PROJECT, action="save_project"),
]


def find_item(items: List[ToolbarItem], name: str) -> Optional[ToolbarItem]:
    for item in items:
        if item.name == name:
            return item
    return None


def capability_for(items: List[ToolbarItem], mode: EditorMode) -> Any:
    """Surface capability declared for ``mode``; the mode itself if none."""
    for item in items:
        if item.mode == mode:
            return item.capability if item.capability is not None else mode
    return mode
