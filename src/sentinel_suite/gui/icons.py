"""
Sprite-sheet icons.

Item icons are 24x24 cells on a 25 px pitch with a 1 px margin, 11 per row.
Vocation icons are 24x24 cells stacked in a single column. Cells are cut with
Pillow and handed to Dear PyGui as flat float32 RGBA arrays.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import dearpygui.dearpygui as dpg
import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

ITEM_SHEET = "itemIcons.png"
VOCATION_SHEET = "vocationIcons.png"


@dataclass(frozen=True)
class SheetGeometry:
    """Where cell ``index`` sits on a sheet."""
    cell: int
    pitch: int
    margin: int = 0
    columns: int = 1

    def box(self, index: int) -> Tuple[int, int, int, int]:
        """(left, top, right, bottom) of a cell, as Image.crop expects."""
        column = index % self.columns
        row = index // self.columns
        left = self.margin + self.pitch * column
        top = self.margin + self.pitch * row
        return (left, top, left + self.cell, top + self.cell)


ITEM_GEOMETRY = SheetGeometry(cell=24, pitch=25, margin=1, columns=11)
VOCATION_GEOMETRY = SheetGeometry(cell=24, pitch=24)


class IconSheet:
    """A sprite sheet loaded once and cut on demand."""

    def __init__(self, image: Image.Image, geometry: SheetGeometry):
        self.image = image.convert("RGBA")
        self.geometry = geometry
        self._cache: Dict[int, Image.Image] = {}

    @classmethod
    def open(cls, path: Union[str, Path], geometry: SheetGeometry) -> 'IconSheet':
        with Image.open(path) as source:
            return cls(source.convert("RGBA"), geometry)

    def __contains__(self, index: int) -> bool:
        if index < 0:
            return False
        _, _, right, bottom = self.geometry.box(index)
        return right <= self.image.width and bottom <= self.image.height

    def icon(self, index: int) -> Image.Image:
        """Cut one cell. Raises IndexError when the cell is off the sheet."""
        if index not in self:
            raise IndexError(f"Icon {index} is outside the {self.image.size} sheet")
        if index not in self._cache:
            self._cache[index] = self.image.crop(self.geometry.box(index))
        return self._cache[index]


def to_texture_data(image: Image.Image) -> np.ndarray:
    """Flat RGBA float32 array in 0..1, the layout dpg textures take."""
    pixels = np.asarray(image.convert("RGBA"), dtype=np.float32) / 255.0
    return pixels.ravel()


class IconRegistry:
    """Registers icon textures with Dear PyGui, keyed by (sheet, index).

    A missing sheet disables that kind of icon; lookups then return None
    and the panels fall back to text.
    """

    TAG = "icon_registry"

    def __init__(self, assets_dir: Optional[Union[str, Path]] = None):
        self.sheets: Dict[str, IconSheet] = {}
        self._textures: Dict[Tuple[str, int], str] = {}
        if assets_dir:
            self._load_sheets(Path(assets_dir))

    def _load_sheets(self, assets_dir: Path):
        for name, filename, geometry in (
            ("item", ITEM_SHEET, ITEM_GEOMETRY),
            ("vocation", VOCATION_SHEET, VOCATION_GEOMETRY),
        ):
            path = assets_dir / filename
            if not path.exists():
                logger.info(f"No {name} icon sheet at {path}, {name} icons disabled")
                continue
            try:
                self.sheets[name] = IconSheet.open(path, geometry)
            except OSError as e:
                logger.warning(f"Could not load {path}: {e}")

    @property
    def enabled(self) -> bool:
        return bool(self.sheets)

    def texture(self, sheet: str, index: int) -> Optional[str]:
        """Texture tag for an icon, registering it on first use."""
        key = (sheet, index)
        if key in self._textures:
            return self._textures[key]
        icons = self.sheets.get(sheet)
        if icons is None or index not in icons:
            return None

        if not dpg.does_item_exist(self.TAG):
            dpg.add_texture_registry(tag=self.TAG)
        image = icons.icon(index)
        tag = f"icon_{sheet}_{index}"
        dpg.add_static_texture(
            width=image.width,
            height=image.height,
            default_value=to_texture_data(image),
            tag=tag,
            parent=self.TAG,
        )
        self._textures[key] = tag
        return tag

    def item_icon(self, icon: int) -> Optional[str]:
        return self.texture("item", icon)

    def vocation_icon(self, vocation_id: int) -> Optional[str]:
        return self.texture("vocation", vocation_id)
