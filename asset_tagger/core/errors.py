"""
Error taxonomy for the tagging core.

None of these terminate a session: the worst outcome is a disabled
drawing surface until the user re-selects an asset.
"""

from typing import Optional


class TaggerError(Exception):
    """Base class for all tagging errors."""


class NotFound(TaggerError):
    """Nothing has been persisted yet for an asset or project reference."""

    def __init__(self, asset_id: str):
        super().__init__(f"Nothing stored for {asset_id}")
        self.asset_id = asset_id


class InvalidGeometry(TaggerError, ValueError):
    """Region geometry is malformed and must not enter the model."""


class StaleResponse(TaggerError):
    """A load result arrived for an asset that is no longer selected."""

    def __init__(self, asset_id: str, current_id: Optional[str]):
        super().__init__(
            f"Discarding metadata for {asset_id}, current selection is {current_id}"
        )
        self.asset_id = asset_id
        self.current_id = current_id


class PersistenceFailure(TaggerError):
    """Loading or saving metadata or a project failed."""

    def __init__(self, message: str, asset_id: Optional[str] = None):
        super().__init__(message)
        self.asset_id = asset_id


class DiscoveryFailure(TaggerError):
    """The asset provider could not list the source location."""
