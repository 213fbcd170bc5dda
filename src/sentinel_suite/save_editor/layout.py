"""
Static layout of a DQIX save image.

Offsets are relative to the start of a save slot unless noted otherwise.
Nothing here touches a buffer; the tables are consumed by SaveDocument.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional


# ============================================================================
# File / slot geometry
# ============================================================================

SLOT_SIZE = 32768
SLOT_COUNT = 2
MIN_FILE_SIZE = SLOT_SIZE * SLOT_COUNT

# Absolute, at the start of the file
MAGIC = b"DRAGON QUEST IX"

CHECKSUM_A_OFFSET = 16
CHECKSUM_A_RANGE = (20, 36)
CHECKSUM_B_OFFSET = 132
CHECKSUM_B_RANGE = (136, 28644)

NAME_LENGTH = 10
EMPTY_ITEM = 0xFFFF


# ============================================================================
# Character record (relative to index * CHARACTER_SIZE)
# ============================================================================

CHARACTER_SIZE = 572

CHAR_VOCATION = 216
CHAR_UNALLOCATED_POINTS = 380
CHAR_SKILL_ALLOCATIONS = 383
CHAR_ZOOM = 416
CHAR_PROFICIENCIES = 418
CHAR_EGG_ON = 453
CHAR_NAME = 456
CHAR_EQUIPMENT = 488
CHAR_FACE = 492
CHAR_HAIRSTYLE = 494
CHAR_GENDER_COLORS = 508  # eeeesssg
CHAR_HAIR_COLOR = 509     # xxxxcccc
CHAR_BODY_WIDTH = 512
CHAR_BODY_HEIGHT = 514

MAX_SKILL_ALLOCATION = 100
MAX_UNALLOCATED_POINTS = 9999


# ============================================================================
# Party
# ============================================================================

STANDBY_COUNT = 7572
PARTY_ORDER = 7573
PARTY_COUNT = 7577

HELD_ITEMS = 7578
HELD_ITEM_STRIDE = 18
HELD_ITEM_SLOTS = 8
MAX_PARTY_SIZE = 4


# ============================================================================
# Globals
# ============================================================================

GOLD_ON_HAND = 11448
GOLD_IN_BANK = 11452
MINI_MEDALS = 11460
SPECIAL_GUESTS = 11528
VISITED_LOCATIONS = 11788
PARTY_TRICKS = 12108
UNLOCKED_VOCATIONS = 12276

MAX_GOLD_ON_HAND = 9_999_999
MAX_GOLD_IN_BANK = 1_000_000_000
MAX_MINI_MEDALS = 0xFFFFFFFF

PLAYTIME = (16024, 16026, 16027)
MULTIPLAYER_TIME = (16028, 16030, 16031)
MAX_HOURS = 0xFFFF
MAX_MINUTES_SECONDS = 59

CANVASED_GUESTS = 16200
CANVASED_GUEST_SIZE = 232
CANVASED_GUEST_NAME = 0
CANVASED_GUEST_CAPACITY = 30


# ============================================================================
# Inventory
# ============================================================================

class ItemCategory(IntEnum):
    """Item kinds. 1..ACCESSORY double as the equipment slot index + 1."""
    COMMON = 0
    WEAPON = 1
    SHIELD = 2
    TORSO = 3
    HEAD = 4
    ARM = 5
    FEET = 6
    LEGS = 7
    ACCESSORY = 8
    IMPORTANT = 9

    @property
    def is_equipment(self) -> bool:
        return ItemCategory.WEAPON <= self <= ItemCategory.ACCESSORY

    @property
    def label(self) -> str:
        return self.name.capitalize()


EQUIPMENT_CATEGORIES = tuple(c for c in ItemCategory if c.is_equipment)


@dataclass(frozen=True)
class InventoryArray:
    """Two parallel arrays: u16 ids and u8 counts, addressed in lock-step."""
    id_offset: int
    count_offset: int
    length: int
    packed: bool = False

    def id_at(self, index: int) -> int:
        return self.id_offset + 2 * index

    def count_at(self, index: int) -> int:
        return self.count_offset + index


# Lengths come from the distance to the next array in the slot.
INVENTORY: Dict[ItemCategory, InventoryArray] = {
    ItemCategory.COMMON:    InventoryArray(7664, 7968, 152, packed=True),
    ItemCategory.IMPORTANT: InventoryArray(11164, 11352, 94, packed=True),
    ItemCategory.WEAPON:    InventoryArray(8120, 10136, 272),
    ItemCategory.SHIELD:    InventoryArray(8664, 10408, 48),
    ItemCategory.TORSO:     InventoryArray(8760, 10456, 192),
    ItemCategory.HEAD:      InventoryArray(9336, 10744, 144),
    ItemCategory.ARM:       InventoryArray(9624, 10888, 80),
    ItemCategory.FEET:      InventoryArray(9784, 10968, 112),
    ItemCategory.LEGS:      InventoryArray(9144, 10648, 96),
    ItemCategory.ACCESSORY: InventoryArray(10008, 11080, 64),
}


# ============================================================================
# Packed flag fields
# ============================================================================

@dataclass(frozen=True)
class BitFlag:
    """An array of single-bit flags inside one little-endian integer.

    Flag ``first + i`` lives at bit ``bit_base + i``. The containing integer
    is always read and written unsigned; for the i32 masks the bit pattern is
    what matters, not the sign.
    """
    name: str
    offset: int
    width: int
    bit_base: int = 0
    first: int = 0
    count: Optional[int] = None

    @property
    def capacity(self) -> int:
        if self.count is not None:
            return self.count
        return self.width * 8 - self.bit_base

    def in_range(self, index: int) -> bool:
        return self.first <= index < self.first + self.capacity

    def mask(self, index: int) -> int:
        return 1 << (self.bit_base + index - self.first)


PARTY_TRICK_FLAGS = BitFlag("party_tricks", PARTY_TRICKS, 4, bit_base=2, count=15)
SPECIAL_GUEST_FLAGS = BitFlag("special_guests", SPECIAL_GUESTS, 4, bit_base=1)
VISITED_LOCATION_FLAGS = BitFlag("visited_locations", VISITED_LOCATIONS, 4)
VOCATION_FLAGS = BitFlag("unlocked_vocations", UNLOCKED_VOCATIONS, 2, first=1)


@dataclass(frozen=True)
class MaskedField:
    """A sub-byte field of a character record, selected by mask."""
    offset: int
    mask: int

    @property
    def shift(self) -> int:
        return (self.mask & -self.mask).bit_length() - 1

    @property
    def max_value(self) -> int:
        return self.mask >> self.shift

    def extract(self, raw: int) -> int:
        return (raw & self.mask) >> self.shift

    def insert(self, raw: int, value: int) -> int:
        """Return raw with this field replaced, every other bit untouched."""
        return (raw & ~self.mask & 0xFF) | ((value << self.shift) & self.mask)


GENDER = MaskedField(CHAR_GENDER_COLORS, 0x01)
SKIN_COLOR = MaskedField(CHAR_GENDER_COLORS, 0x0E)
EYE_COLOR = MaskedField(CHAR_GENDER_COLORS, 0xF0)
HAIR_COLOR = MaskedField(CHAR_HAIR_COLOR, 0x0F)
KNOWS_ZOOM = MaskedField(CHAR_ZOOM, 0x10)
KNOWS_EGG_ON = MaskedField(CHAR_EGG_ON, 0x40)
