# Save Editor Backend for Dragon Quest IX
# Typed access to the two-slot save image

from .gamedata import ItemCatalog, ItemInfo, SKILLS, VOCATIONS, derive_proficiencies
from .layout import ItemCategory
from .save_manager import DocumentState, InventorySlot, PlayTime, SaveDocument
from .strings import NAME_CODEC, StringCodec

__all__ = [
    'SaveDocument', 'DocumentState', 'InventorySlot', 'PlayTime', 'ItemCategory',
    'ItemCatalog', 'ItemInfo', 'SKILLS', 'VOCATIONS', 'derive_proficiencies',
    'StringCodec', 'NAME_CODEC',
]
