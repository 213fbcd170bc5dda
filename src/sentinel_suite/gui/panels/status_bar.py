"""
Status Bar Component.
Displays the loaded file, active slot and the latest message.
"""

import dearpygui.dearpygui as dpg

from ..events import EventBus, Events
from ..state import STATE
from ..theme import Colors


class StatusBar:
    """Application status bar."""

    TAG = "status_bar"
    TEXT_TAG = "status_text"
    FILE_TAG = "status_file"

    def __init__(self, width: int = 1200, height: int = 30, y_pos: int = 770):
        self.width = width
        self.height = height
        self.y_pos = y_pos
        self._create_bar()
        self._subscribe_events()

    def _create_bar(self):
        """Create the status bar."""
        with dpg.window(
            tag=self.TAG,
            no_title_bar=True,
            no_resize=True,
            no_move=True,
            no_close=True,
            no_collapse=True,
            no_scrollbar=True,
            pos=(0, self.y_pos),
            width=self.width,
            height=self.height
        ):
            with dpg.group(horizontal=True):
                dpg.add_text("Sentinel", color=Colors.ACCENT_GREEN)
                dpg.add_text(" | ", color=Colors.SEPARATOR)
                dpg.add_text("No file", tag=self.FILE_TAG, color=Colors.TEXT_DIM)
                dpg.add_text(" | ", color=Colors.SEPARATOR)
                dpg.add_text("Ready", tag=self.TEXT_TAG, color=Colors.TEXT_DIM)

    def _subscribe_events(self):
        """Subscribe to status events."""
        EventBus.subscribe(Events.STATUS_UPDATE, self._on_status_update)
        EventBus.subscribe(Events.FILE_LOADED, self._refresh_file)
        EventBus.subscribe(Events.FILE_SAVED, self._refresh_file)
        EventBus.subscribe(Events.SAVE_MODIFIED, self._refresh_file)
        EventBus.subscribe(Events.SLOT_CHANGED, self._refresh_file)
        EventBus.subscribe(Events.FILE_REJECTED, self._on_file_rejected)

    def _on_status_update(self, message: str):
        """Handle status update event."""
        dpg.set_value(self.TEXT_TAG, message)

    def _refresh_file(self, _data=None):
        if not STATE.has_document or STATE.current_file is None:
            dpg.set_value(self.FILE_TAG, "No file")
            return
        marker = " *" if STATE.dirty else ""
        dpg.set_value(
            self.FILE_TAG,
            f"{STATE.current_file.name}{marker}  (slot {STATE.document.active_slot})",
        )

    def _on_file_rejected(self, path):
        dpg.set_value(self.TEXT_TAG, f"Rejected {path.name}: bad magic or checksum")

    @classmethod
    def update(cls, message: str):
        """Directly update the status bar text."""
        if dpg.does_item_exist(cls.TEXT_TAG):
            dpg.set_value(cls.TEXT_TAG, message)
