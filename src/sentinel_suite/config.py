"""
Preferences - persisted user settings.

Stored as JSON in ~/.sentinel_suite/preferences.json, or under the directory
named by SENTINEL_SUITE_HOME when that variable is set.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

HOME_ENV = "SENTINEL_SUITE_HOME"
PREFERENCES_FILENAME = "preferences.json"
MAX_RECENT_FILES = 10

THEME_DARK = "dark"
THEME_LIGHT = "light"
THEMES = (THEME_DARK, THEME_LIGHT)


def config_dir() -> Path:
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override)
    return Path.home() / ".sentinel_suite"


@dataclass
class Preferences:
    """User settings shared by the CLI and the editor."""
    theme: str = THEME_DARK
    last_directory: str = ""
    recent_files: List[str] = field(default_factory=list)
    backup_on_save: bool = True
    assets_dir: str = ""
    item_catalog: str = ""
    debug_logging: bool = False

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "Preferences":
        """Create from a dict, ignoring keys this version does not know."""
        prefs = cls()
        for key, value in data.items():
            if hasattr(prefs, key):
                setattr(prefs, key, value)
        if prefs.theme not in THEMES:
            logger.warning(f"Unknown theme '{prefs.theme}', using {THEME_DARK}")
            prefs.theme = THEME_DARK
        prefs.recent_files = list(prefs.recent_files)[:MAX_RECENT_FILES]
        return prefs

    def add_recent(self, path: str):
        """Move path to the front of the recent list."""
        path = str(path)
        if path in self.recent_files:
            self.recent_files.remove(path)
        self.recent_files.insert(0, path)
        del self.recent_files[MAX_RECENT_FILES:]
        self.last_directory = str(Path(path).parent)


def preferences_path(directory: Optional[Path] = None) -> Path:
    return (directory or config_dir()) / PREFERENCES_FILENAME


def load_preferences(path: Optional[Path] = None) -> Preferences:
    """Read preferences, falling back to defaults when missing or unreadable."""
    path = path or preferences_path()
    if not path.exists():
        return Preferences()
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read preferences {path}: {e}")
        return Preferences()
    if not isinstance(data, dict):
        logger.warning(f"Ignoring malformed preferences {path}")
        return Preferences()
    return Preferences.from_dict(data)


def save_preferences(prefs: Preferences, path: Optional[Path] = None) -> Path:
    path = path or preferences_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(prefs.to_dict(), f, indent=2)
    logger.debug(f"Preferences written to {path}")
    return path
