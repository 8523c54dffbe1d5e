"""
Interfaces module - adapters between the session core and a UI.

Provides the drawing surface boundary and the toolbar configuration.
"""

from .surface import DrawingSurface, HeadlessSurface, SurfaceBinding, SurfaceEventType
from .toolbar import DEFAULT_TOOLBAR, ToolbarItem

__all__ = [
    "DrawingSurface",
    "HeadlessSurface",
    "SurfaceBinding",
    "SurfaceEventType",
    "DEFAULT_TOOLBAR",
    "ToolbarItem",
]
