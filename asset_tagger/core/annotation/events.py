"""
Event system for the tagging workflow.

Provides a decoupled way for the session core to notify UI components
about state changes without depending on specific UI frameworks.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events that can occur during a tagging session."""

    # Asset events
    ASSET_SELECTED = "asset_selected"
    ASSET_LOADED = "asset_loaded"
    STALE_RESPONSE_DROPPED = "stale_response_dropped"
    ASSET_SAVED = "asset_saved"
    ASSET_STATE_CHANGED = "asset_state_changed"
    ROOT_ROLLED_UP = "root_rolled_up"
    SAVE_FAILED = "save_failed"
    LOAD_FAILED = "load_failed"

    # Region events
    REGIONS_CHANGED = "regions_changed"
    SELECTION_CHANGED = "selection_changed"

    # Editor events
    MODE_CHANGED = "mode_changed"

    # Project events
    TAGS_ADDED = "tags_added"
    PROJECT_SAVED = "project_saved"
    DISCOVERY_FAILED = "discovery_failed"


@dataclass
class AnnotationEvent:
    """Event that occurs during a tagging session."""

    event_type: Enum
    data: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.data is None:
            self.data = {}


class EventEmitter:
    """
    Simple event emitter for pub/sub pattern.

    Allows components to subscribe to events without tight coupling.
    Dispatch is synchronous, one listener at a time.
    """

    def __init__(self):
        self._listeners: Dict[Enum, List[Callable]] = {}

    def on(self, event_type: Enum, callback: Callable[[AnnotationEvent], None]):
        """Subscribe to an event type."""
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        self._listeners[event_type].append(callback)

    def off(self, event_type: Enum, callback: Callable[[AnnotationEvent], None]):
        """Unsubscribe from an event type."""
        if callback in self._listeners.get(event_type, []):
            self._listeners[event_type].remove(callback)

    def listener_count(self, event_type: Enum) -> int:
        return len(self._listeners.get(event_type, []))

    def emit(self, event: AnnotationEvent):
        """Emit an event to all subscribers."""
        # Copy so listeners may unsubscribe while being notified
        for callback in list(self._listeners.get(event.event_type, [])):
            try:
                callback(event)
            except Exception:
                # Log but don't crash on listener errors
                logger.exception(
                    "Error in event listener for %s", event.event_type
                )

    def clear(self):
        """Clear all event listeners."""
        self._listeners.clear()
