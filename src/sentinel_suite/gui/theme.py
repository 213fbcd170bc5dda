"""
Theme and color definitions for the Sentinel Suite GUI.
Dark and light palettes, switchable at runtime.
"""

import dearpygui.dearpygui as dpg

from ..config import THEME_DARK, THEME_LIGHT


# =============================================================================
# APPLICATION COLORS (RGBA 0-255)
# =============================================================================
class Colors:
    """Dark palette (default)."""
    BG_PANEL = (28, 28, 35, 255)
    BG_CHILD = (35, 35, 45, 255)
    TITLE_BG = (40, 45, 55, 255)
    TITLE_ACTIVE = (55, 65, 85, 255)
    FRAME_BG = (45, 45, 55, 255)
    FRAME_HOVER = (55, 55, 65, 255)
    FRAME_ACTIVE = (65, 65, 75, 255)
    BUTTON = (55, 75, 100, 255)
    BUTTON_HOVER = (75, 95, 130, 255)
    BUTTON_ACTIVE = (65, 85, 115, 255)
    HEADER = (50, 55, 70, 255)
    TEXT_DIM = (140, 140, 150, 255)
    TEXT_BRIGHT = (220, 220, 230, 255)
    ACCENT_GREEN = (100, 200, 120, 255)
    ACCENT_BLUE = (100, 150, 220, 255)
    ACCENT_YELLOW = (220, 200, 100, 255)
    ACCENT_RED = (220, 100, 100, 255)
    SEPARATOR = (60, 60, 70, 255)
    SCROLLBAR = (50, 50, 60, 255)
    SCROLLBAR_GRAB = (80, 80, 95, 255)


class LightColors(Colors):
    """Light palette. Accents are darkened to stay readable on white."""
    BG_PANEL = (240, 240, 244, 255)
    BG_CHILD = (250, 250, 252, 255)
    TITLE_BG = (215, 218, 226, 255)
    TITLE_ACTIVE = (190, 200, 220, 255)
    FRAME_BG = (225, 226, 232, 255)
    FRAME_HOVER = (210, 212, 222, 255)
    FRAME_ACTIVE = (195, 198, 212, 255)
    BUTTON = (180, 195, 220, 255)
    BUTTON_HOVER = (160, 180, 215, 255)
    BUTTON_ACTIVE = (140, 165, 205, 255)
    HEADER = (205, 210, 225, 255)
    TEXT_DIM = (110, 110, 120, 255)
    TEXT_BRIGHT = (25, 25, 30, 255)
    ACCENT_GREEN = (30, 130, 60, 255)
    ACCENT_BLUE = (40, 90, 170, 255)
    ACCENT_YELLOW = (150, 110, 10, 255)
    ACCENT_RED = (180, 40, 40, 255)
    SEPARATOR = (190, 190, 200, 255)
    SCROLLBAR = (225, 225, 232, 255)
    SCROLLBAR_GRAB = (180, 180, 195, 255)


PALETTES = {
    THEME_DARK: Colors,
    THEME_LIGHT: LightColors,
}


def palette(name: str):
    return PALETTES.get(name, Colors)


def setup_theme(name: str = THEME_DARK):
    """Build and bind the global theme for the named palette."""
    c = palette(name)
    with dpg.theme() as global_theme:
        with dpg.theme_component(dpg.mvAll):
            # Window backgrounds
            dpg.add_theme_color(dpg.mvThemeCol_WindowBg, c.BG_PANEL)
            dpg.add_theme_color(dpg.mvThemeCol_ChildBg, c.BG_CHILD)
            dpg.add_theme_color(dpg.mvThemeCol_PopupBg, c.BG_PANEL)
            dpg.add_theme_color(dpg.mvThemeCol_MenuBarBg, c.TITLE_BG)

            # Title bars
            dpg.add_theme_color(dpg.mvThemeCol_TitleBg, c.TITLE_BG)
            dpg.add_theme_color(dpg.mvThemeCol_TitleBgActive, c.TITLE_ACTIVE)
            dpg.add_theme_color(dpg.mvThemeCol_TitleBgCollapsed, c.TITLE_BG)

            # Frames
            dpg.add_theme_color(dpg.mvThemeCol_FrameBg, c.FRAME_BG)
            dpg.add_theme_color(dpg.mvThemeCol_FrameBgHovered, c.FRAME_HOVER)
            dpg.add_theme_color(dpg.mvThemeCol_FrameBgActive, c.FRAME_ACTIVE)
            dpg.add_theme_color(dpg.mvThemeCol_CheckMark, c.ACCENT_BLUE)

            # Buttons
            dpg.add_theme_color(dpg.mvThemeCol_Button, c.BUTTON)
            dpg.add_theme_color(dpg.mvThemeCol_ButtonHovered, c.BUTTON_HOVER)
            dpg.add_theme_color(dpg.mvThemeCol_ButtonActive, c.BUTTON_ACTIVE)

            # Headers (tree nodes, collapsing headers, selectables)
            dpg.add_theme_color(dpg.mvThemeCol_Header, c.HEADER)
            dpg.add_theme_color(dpg.mvThemeCol_HeaderHovered, c.BUTTON_HOVER)
            dpg.add_theme_color(dpg.mvThemeCol_HeaderActive, c.BUTTON_ACTIVE)

            # Scrollbar
            dpg.add_theme_color(dpg.mvThemeCol_ScrollbarBg, c.SCROLLBAR)
            dpg.add_theme_color(dpg.mvThemeCol_ScrollbarGrab, c.SCROLLBAR_GRAB)

            # Misc
            dpg.add_theme_color(dpg.mvThemeCol_Separator, c.SEPARATOR)
            dpg.add_theme_color(dpg.mvThemeCol_Text, c.TEXT_BRIGHT)
            dpg.add_theme_color(dpg.mvThemeCol_TextDisabled, c.TEXT_DIM)

            # Tabs
            dpg.add_theme_color(dpg.mvThemeCol_Tab, c.TITLE_BG)
            dpg.add_theme_color(dpg.mvThemeCol_TabHovered, c.BUTTON_HOVER)
            dpg.add_theme_color(dpg.mvThemeCol_TabActive, c.TITLE_ACTIVE)

            # Style
            dpg.add_theme_style(dpg.mvStyleVar_FrameRounding, 4)
            dpg.add_theme_style(dpg.mvStyleVar_WindowRounding, 6)
            dpg.add_theme_style(dpg.mvStyleVar_ChildRounding, 4)
            dpg.add_theme_style(dpg.mvStyleVar_FramePadding, 8, 4)
            dpg.add_theme_style(dpg.mvStyleVar_ItemSpacing, 8, 6)
            dpg.add_theme_style(dpg.mvStyleVar_WindowPadding, 10, 10)

    dpg.bind_theme(global_theme)
    return global_theme
