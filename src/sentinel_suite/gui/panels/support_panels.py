"""
Support panels: preferences and the log window.
"""

import logging
from pathlib import Path

import dearpygui.dearpygui as dpg

from ...config import THEME_DARK, THEME_LIGHT, save_preferences
from ..events import EventBus, Events
from ..state import STATE
from ..theme import Colors

logger = logging.getLogger(__name__)

THEME_LABELS = {THEME_DARK: "Dark", THEME_LIGHT: "Light"}


class PreferencesPanel:
    """Application preferences panel."""

    TAG = "preferences"

    def __init__(self, width: int = 420, height: int = 330, pos: tuple = (400, 150)):
        self.width = width
        self.height = height
        self.pos = pos
        self._create_panel()

    def _create_panel(self):
        """Create the preferences panel."""
        prefs = STATE.preferences
        with dpg.window(
            label="Preferences",
            tag=self.TAG,
            width=self.width,
            height=self.height,
            pos=self.pos,
            show=False,
            on_close=self._on_close
        ):
            dpg.add_text("Settings", color=Colors.ACCENT_BLUE)
            dpg.add_separator()

            dpg.add_text("Theme", color=Colors.ACCENT_RED)
            dpg.add_combo(
                items=list(THEME_LABELS.values()),
                default_value=THEME_LABELS.get(prefs.theme, "Dark"),
                width=200,
                tag="pref_theme",
                callback=self._on_theme_changed
            )

            dpg.add_separator()

            dpg.add_text("Paths", color=Colors.ACCENT_RED)
            dpg.add_text("Icon sheet directory:", color=Colors.TEXT_DIM)
            dpg.add_input_text(default_value=prefs.assets_dir, width=-1, tag="pref_assets_dir")
            dpg.add_text("Item catalog (blank for built-in):", color=Colors.TEXT_DIM)
            dpg.add_input_text(default_value=prefs.item_catalog, width=-1, tag="pref_item_catalog")

            dpg.add_separator()

            dpg.add_checkbox(
                label="Back up the original file on save",
                default_value=prefs.backup_on_save,
                tag="pref_backup"
            )
            dpg.add_checkbox(
                label="Show debug logging",
                default_value=prefs.debug_logging,
                tag="pref_debug"
            )

            dpg.add_separator()

            with dpg.group(horizontal=True):
                dpg.add_button(label="Save", width=100, callback=self._on_save)
                dpg.add_button(label="Cancel", width=100, callback=self._on_close)

    def _on_theme_changed(self, sender, value):
        """Preview the theme immediately."""
        theme = THEME_LIGHT if value == THEME_LABELS[THEME_LIGHT] else THEME_DARK
        EventBus.publish(Events.THEME_CHANGED, theme)

    def _on_save(self):
        """Save preferences."""
        prefs = STATE.preferences
        prefs.theme = THEME_LIGHT if dpg.get_value("pref_theme") == THEME_LABELS[THEME_LIGHT] else THEME_DARK
        prefs.assets_dir = dpg.get_value("pref_assets_dir").strip()
        prefs.item_catalog = dpg.get_value("pref_item_catalog").strip()
        prefs.backup_on_save = dpg.get_value("pref_backup")
        prefs.debug_logging = dpg.get_value("pref_debug")
        logging.getLogger("sentinel_suite").setLevel(
            logging.DEBUG if prefs.debug_logging else logging.INFO
        )
        try:
            path = save_preferences(prefs)
        except OSError as e:
            EventBus.publish(Events.STATUS_UPDATE, f"Could not save preferences: {e}")
            return
        EventBus.publish(Events.STATUS_UPDATE, f"Preferences saved to {path}")
        self._on_close()

    def _on_close(self):
        """Handle panel close."""
        dpg.configure_item(self.TAG, show=False)

    @classmethod
    def show(cls):
        """Show the panel."""
        if dpg.does_item_exist(cls.TAG):
            dpg.configure_item(cls.TAG, show=True)
            dpg.focus_item(cls.TAG)


class LogPanel:
    """Log / diagnostics panel."""

    TAG = "log_panel"
    LOG_OUTPUT_TAG = "log_output"
    MAX_MESSAGES = 500

    _messages = []

    def __init__(self, width: int = 600, height: int = 200, pos: tuple = (300, 560)):
        self.width = width
        self.height = height
        self.pos = pos
        self._create_panel()

    def _create_panel(self):
        """Create the log panel."""
        with dpg.window(
            label="Log",
            tag=self.TAG,
            width=self.width,
            height=self.height,
            pos=self.pos,
            show=False,
            on_close=self._on_close
        ):
            with dpg.group(horizontal=True):
                dpg.add_text("Log Output", color=Colors.ACCENT_BLUE)
                dpg.add_button(label="Clear", width=60, callback=self._on_clear)
                dpg.add_button(label="Export", width=60, callback=self._on_export)

            dpg.add_separator()

            dpg.add_input_text(
                tag=self.LOG_OUTPUT_TAG,
                multiline=True,
                readonly=True,
                width=-1,
                height=-1,
                default_value="\n".join(LogPanel._messages)
            )

    @classmethod
    def log(cls, message: str, level: str = "INFO"):
        """Add a log message."""
        cls._messages.append(f"[{level}] {message}")
        if len(cls._messages) > cls.MAX_MESSAGES:
            cls._messages = cls._messages[-cls.MAX_MESSAGES:]

        if dpg.does_item_exist(cls.LOG_OUTPUT_TAG):
            dpg.set_value(cls.LOG_OUTPUT_TAG, "\n".join(cls._messages))

    def _on_clear(self):
        """Clear log."""
        LogPanel._messages = []
        dpg.set_value(self.LOG_OUTPUT_TAG, "")

    def _on_export(self):
        """Export log next to the loaded save (or the working directory)."""
        directory = STATE.current_file.parent if STATE.current_file else Path.cwd()
        log_file = directory / "sentinel_log.txt"
        try:
            with open(log_file, 'w', encoding='utf-8') as f:
                f.write("\n".join(LogPanel._messages))
        except OSError as e:
            EventBus.publish(Events.STATUS_UPDATE, f"Log export failed: {e}")
            return
        EventBus.publish(Events.STATUS_UPDATE, f"Log exported to {log_file}")

    def _on_close(self):
        """Handle panel close."""
        dpg.configure_item(self.TAG, show=False)

    @classmethod
    def show(cls):
        """Show the panel."""
        if dpg.does_item_exist(cls.TAG):
            dpg.configure_item(cls.TAG, show=True)
            dpg.focus_item(cls.TAG)


class LogPanelHandler(logging.Handler):
    """Forwards log records to the log panel."""

    def emit(self, record: logging.LogRecord):
        try:
            LogPanel.log(self.format(record), record.levelname)
        except Exception:
            self.handleError(record)
