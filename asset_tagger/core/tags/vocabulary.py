"""
Project tag vocabulary.

Keeps the project's tag list in step with the tag names found in loaded
region data.
"""

import hashlib
import logging
from typing import List, Optional, Sequence

import numpy as np
from matplotlib import colormaps
from matplotlib.colors import to_hex

from ..annotation.state import AssetMetadata, Project, Tag

logger = logging.getLogger(__name__)


def build_palette(
    colormap: str = "tab20",
    colors: Optional[Sequence[str]] = None,
    size: Optional[int] = None,
) -> List[str]:
    """
    Build the list of hex colors new tags are drawn from.

    Args:
        colormap: Matplotlib colormap name, used when ``colors`` is empty
        colors: Explicit hex colors, taken as-is
        size: Number of samples for continuous colormaps

    Returns:
        List of "#rrggbb" strings
    """
    if colors:
        return [to_hex(c) for c in colors]
    cmap = colormaps[colormap]
    if size is None:
        size = min(cmap.N, 20)
    indices = np.linspace(0, cmap.N - 1, size).round().astype(int)
    return [to_hex(cmap(int(i))) for i in indices]


class TagVocabulary:
    """
    Tag list of a project plus the rules for growing it.

    The project is mutated in place: it is owned by the application and
    the caller decides when to persist it.
    """

    def __init__(self, project: Project, palette: Sequence[str]):
        if not palette:
            raise ValueError("Tag palette must not be empty")
        self.project = project
        self.palette = list(palette)

    def names(self) -> List[str]:
        return self.project.tag_names()

    def __contains__(self, name: str) -> bool:
        return name in self.names()

    def color_for(self, name: str) -> str:
        """Deterministic color for a tag name."""
        digest = hashlib.md5(name.encode("utf-8")).hexdigest()
        return self.palette[int(digest, 16) % len(self.palette)]

    def add(self, name: str, color: Optional[str] = None) -> Optional[Tag]:
        """Append a tag. Returns None if the name is already known."""
        name = name.strip()
        if not name or name in self:
            return None
        tag = Tag(name=name, color=color or self.color_for(name))
        self.project.tags.append(tag)
        return tag

    def remove(self, name: str) -> bool:
        before = len(self.project.tags)
        self.project.tags = [t for t in self.project.tags if t.name != name]
        return len(self.project.tags) != before

    def tag_at(self, index: int) -> Optional[Tag]:
        """Tag bound to a number hotkey, counting from 0."""
        if 0 <= index < len(self.project.tags):
            return self.project.tags[index]
        return None

    def merge_from(self, metadata: AssetMetadata) -> List[Tag]:
        """
        Add every tag name used in ``metadata`` that the project lacks.

        Returns:
            The newly added tags, in order of first appearance
        """
        added = []
        for name in metadata.tag_names():
            tag = self.add(name)
            if tag is not None:
                added.append(tag)
        if added:
            logger.info(
                "Discovered %d new tags in %s: %s",
                len(added),
                metadata.asset.name,
                ", ".join(t.name for t in added),
            )
        return added
