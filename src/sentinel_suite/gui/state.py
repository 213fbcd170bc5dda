"""
Global application state.
Single source of truth for the UI.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..config import Preferences
from ..save_editor.save_manager import SaveDocument


@dataclass
class AppState:
    """Global application state container."""

    # Loaded data
    document: Optional[SaveDocument] = None
    current_file: Optional[Path] = None
    dirty: bool = False

    # Current selection
    current_character: Optional[int] = None

    # Settings
    preferences: Preferences = field(default_factory=Preferences)

    @property
    def has_document(self) -> bool:
        return self.document is not None

    def set_document(self, document: SaveDocument, path: Path):
        """Set current document. Clears downstream state."""
        self.document = document
        self.current_file = path
        self.dirty = False
        self.current_character = None

    def mark_dirty(self):
        self.dirty = True

    def clear(self):
        """Clear all document state."""
        self.document = None
        self.current_file = None
        self.dirty = False
        self.current_character = None


# Singleton instance
STATE = AppState()
