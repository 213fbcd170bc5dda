"""
Sentinel Suite Main Application Frame

DearPyGUI window setup, menu bar, and panel initialization.
"""

import argparse
import logging
from pathlib import Path

import dearpygui.dearpygui as dpg

from . import __version__
from .config import THEME_DARK, THEME_LIGHT, load_preferences
from .gui.events import EventBus, Events
from .gui.icons import IconRegistry
from .gui.panels.save_editor_panel import SaveEditorPanel
from .gui.panels.status_bar import StatusBar
from .gui.panels.support_panels import LogPanel, LogPanelHandler, PreferencesPanel
from .gui.state import STATE
from .gui.theme import setup_theme

logger = logging.getLogger(__name__)

RECENT_MENU_TAG = "menu_recent_files"


class MainApp:
    """Main application frame and window manager."""

    def __init__(self, width: int = 1100, height: int = 820):
        self.width = width
        self.height = height
        self.panels = {}

        STATE.preferences = load_preferences()

        # Setup DearPyGUI
        dpg.create_context()
        self._install_log_handler()
        self.theme = setup_theme(STATE.preferences.theme)

        dpg.create_viewport(
            title="Sentinel Suite - DQIX Save Editor",
            width=width,
            height=height
        )

        self._create_menu_bar()
        self._init_panels()
        self._subscribe_events()

    def _install_log_handler(self):
        """Route package logging into the log panel."""
        package_logger = logging.getLogger("sentinel_suite")
        package_logger.setLevel(logging.DEBUG if STATE.preferences.debug_logging else logging.INFO)
        handler = LogPanelHandler()
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        package_logger.addHandler(handler)
        logger.debug("Log panel handler installed")

    def _create_menu_bar(self):
        """Create the application menu bar."""
        with dpg.viewport_menu_bar():
            # File Menu
            with dpg.menu(label="File"):
                dpg.add_menu_item(label="Open...", callback=lambda: EventBus.publish(Events.OPEN_REQUESTED))
                with dpg.menu(label="Open Recent", tag=RECENT_MENU_TAG):
                    pass
                dpg.add_menu_item(label="Save", callback=lambda: EventBus.publish(Events.SAVE_REQUESTED))
                dpg.add_menu_item(label="Save As...", callback=lambda: EventBus.publish(Events.SAVE_AS_REQUESTED))
                dpg.add_separator()
                dpg.add_menu_item(label="Exit", callback=lambda: dpg.stop_dearpygui())

            # View Menu
            with dpg.menu(label="View"):
                dpg.add_menu_item(label="Save Editor", callback=lambda: self._show_panel("save_editor"))
                dpg.add_menu_item(label="Log", callback=lambda: self._show_panel("log"))
                dpg.add_separator()
                dpg.add_menu_item(label="Preferences", callback=lambda: self._show_panel("preferences"))

            # Theme Menu
            with dpg.menu(label="Theme"):
                dpg.add_menu_item(label="Dark", callback=lambda: EventBus.publish(Events.THEME_CHANGED, THEME_DARK))
                dpg.add_menu_item(label="Light", callback=lambda: EventBus.publish(Events.THEME_CHANGED, THEME_LIGHT))

            # Help Menu
            with dpg.menu(label="Help"):
                dpg.add_menu_item(label="About", callback=self._show_about)

        self._populate_recent()

    def _populate_recent(self):
        dpg.delete_item(RECENT_MENU_TAG, children_only=True)
        recent = STATE.preferences.recent_files
        if not recent:
            dpg.add_menu_item(label="(none)", enabled=False, parent=RECENT_MENU_TAG)
            return
        for path in recent:
            dpg.add_menu_item(
                label=path,
                parent=RECENT_MENU_TAG,
                callback=lambda s, a, u: self.panels["save_editor"].load_file(Path(u)),
                user_data=path
            )

    def _subscribe_events(self):
        EventBus.subscribe(Events.THEME_CHANGED, self._on_theme_changed)
        EventBus.subscribe(Events.FILE_LOADED, lambda _: self._populate_recent())

    def _on_theme_changed(self, theme: str):
        STATE.preferences.theme = theme
        previous = self.theme
        self.theme = setup_theme(theme)
        dpg.delete_item(previous)
        EventBus.publish(Events.STATUS_UPDATE, f"Theme: {theme}")

    def _show_panel(self, panel_name: str):
        """Show a panel by name."""
        panel = self.panels.get(panel_name)
        if panel and hasattr(panel, 'TAG'):
            if dpg.does_item_exist(panel.TAG):
                dpg.configure_item(panel.TAG, show=True)
                dpg.focus_item(panel.TAG)

    def _show_about(self):
        """Show about dialog."""
        with dpg.window(label="About Sentinel Suite", modal=True, width=350, height=200) as about:
            dpg.add_text("Sentinel Suite", color=(0, 212, 255))
            dpg.add_text("Dragon Quest IX save editor")
            dpg.add_separator()
            dpg.add_text(f"Version {__version__}")
            dpg.add_spacer(height=10)
            dpg.add_button(label="Close", callback=lambda: dpg.delete_item(about))

    def _init_panels(self):
        """Initialize all UI panels."""
        icons = IconRegistry(STATE.preferences.assets_dir or None)

        self.panels["save_editor"] = SaveEditorPanel(
            width=self.width - 20,
            height=self.height - 90,
            pos=(10, 30),
            icons=icons
        )

        # Support panels (hidden by default)
        self.panels["preferences"] = PreferencesPanel(
            width=420,
            height=330,
            pos=(300, 150)
        )

        self.panels["log"] = LogPanel(
            width=600,
            height=200,
            pos=(250, self.height - 280)
        )

        self.panels["status_bar"] = StatusBar(
            width=self.width,
            height=30,
            y_pos=self.height - 70
        )

    def open(self, path: Path):
        """Load a save at startup."""
        self.panels["save_editor"].load_file(path)

    def show(self):
        """Show the main window."""
        dpg.setup_dearpygui()
        dpg.show_viewport()

    def run(self):
        """Run the main event loop."""
        while dpg.is_dearpygui_running():
            dpg.render_dearpygui_frame()

    def shutdown(self):
        """Shutdown the application."""
        logger.info("Shutting down")
        EventBus.clear()
        dpg.destroy_context()


def main(argv=None) -> int:
    """Entry point."""
    parser = argparse.ArgumentParser(prog="sentinel-gui", description="Dragon Quest IX save editor")
    parser.add_argument("file", nargs="?", help="Save file to open")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    app = MainApp()
    if args.file:
        app.open(Path(args.file))
    app.show()
    app.run()
    app.shutdown()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
