"""
Persistence contracts and the local JSON-file implementation.
"""

from .base import AssetMetadataStore, AssetProvider, ProjectStore
from .local import LocalFileStorage

__all__ = [
    "AssetMetadataStore",
    "AssetProvider",
    "ProjectStore",
    "LocalFileStorage",
]
