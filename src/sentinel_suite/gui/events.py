"""
Event bus for panel communication.
Decoupled pub/sub pattern for cross-panel events.
"""

import logging
from typing import Callable, Any

logger = logging.getLogger(__name__)


class EventBus:
    """Central event system for panel communication."""

    _subscribers: dict[str, list[Callable]] = {}

    @classmethod
    def subscribe(cls, event: str, callback: Callable):
        """Subscribe to an event."""
        cls._subscribers.setdefault(event, []).append(callback)

    @classmethod
    def publish(cls, event: str, data: Any = None):
        """Publish an event to all subscribers.

        A failing subscriber is logged and does not stop the others.
        """
        for cb in list(cls._subscribers.get(event, [])):
            try:
                cb(data)
            except Exception:
                logger.exception(f"EventBus error on '{event}'")

    @classmethod
    def clear(cls):
        """Clear all subscriptions."""
        cls._subscribers.clear()


class Events:
    """Event name constants."""
    # File events
    OPEN_REQUESTED = "file.open_requested"
    SAVE_REQUESTED = "file.save_requested"
    SAVE_AS_REQUESTED = "file.save_as_requested"
    FILE_LOADED = "file.loaded"
    FILE_REJECTED = "file.rejected"
    FILE_SAVED = "file.saved"

    # Document events
    SAVE_MODIFIED = "save.modified"
    SLOT_CHANGED = "save.slot_changed"

    # UI events
    THEME_CHANGED = "ui.theme_changed"
    STATUS_UPDATE = "status.update"
