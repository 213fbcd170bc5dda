"""
Save Editor Backend for Dragon Quest IX

Provides a high-level API over a raw save image:
- Validation (magic + per-slot checksums)
- Character records (name, appearance, vocation, skills, spells, equipment)
- Inventory (sparse id/count arrays, packed for common/important items)
- Gold, medals, playtime, party tricks, vocations, locations, guests

The buffer is the single source of truth: nothing is cached, every getter
re-reads the active slot.
"""

import logging
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, NamedTuple, Optional, Tuple, Union

from ..utils.binary import ByteView, BytesLike
from . import checksum, layout
from .gamedata import ItemCatalog, SKILLS, default_catalog, derive_proficiencies
from .layout import BitFlag, ItemCategory, InventoryArray, MaskedField
from .strings import NAME_CODEC

logger = logging.getLogger(__name__)


# ============================================================================
# Value types
# ============================================================================

class DocumentState(Enum):
    EMPTY = "empty"
    LOADED = "loaded"


class PlayTime(NamedTuple):
    hours: int
    minutes: int
    seconds: int

    def __str__(self) -> str:
        return f"{self.hours}:{self.minutes:02d}:{self.seconds:02d}"


@dataclass(frozen=True)
class InventorySlot:
    """One position of an inventory array."""
    index: int
    item_id: int
    count: int

    @property
    def occupied(self) -> bool:
        return self.item_id != layout.EMPTY_ITEM


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(int(value), high))


# ============================================================================
# Save Document
# ============================================================================

class SaveDocument:
    """Typed access to a two-slot save image.

    A document is built around a complete byte buffer (or nothing). Call
    ``validate()`` before trusting any field: a buffer that fails validation
    may still be read, but the values are meaningless.

    Character indices are positions in the character table; indices below
    ``standby_count`` are in reserve, the hero sits at ``standby_count`` and
    the party follows. Passing an index outside the table is a caller error;
    an access that would leave the slot raises OutOfRangeError.
    """

    def __init__(self, buffer: Optional[BytesLike] = None,
                 catalog: Optional[ItemCatalog] = None):
        self.catalog = catalog or default_catalog()
        self.path: Optional[Path] = None
        self._view: Optional[ByteView] = None
        self._slots: List[ByteView] = []
        self._slot_index = 0
        if buffer is not None:
            self.load(buffer)

    @classmethod
    def from_file(cls, filepath: Union[str, Path],
                  catalog: Optional[ItemCatalog] = None) -> 'SaveDocument':
        """Read a save file from disk. OSError propagates."""
        path = Path(filepath)
        with open(path, 'rb') as f:
            data = f.read()
        doc = cls(data, catalog)
        doc.path = path
        logger.info(f"Loaded {path} ({len(data)} bytes)")
        return doc

    # ------------------------------------------------------------------
    # Buffer lifecycle
    # ------------------------------------------------------------------

    def load(self, buffer: BytesLike):
        """Take a private copy of buffer and make slot 0 active."""
        self._view = ByteView.from_bytes(buffer)
        self._slot_index = 0
        self._slots = []
        if len(self._view) >= layout.MIN_FILE_SIZE:
            self._slots = [
                self._view.slice(i * layout.SLOT_SIZE, (i + 1) * layout.SLOT_SIZE)
                for i in range(layout.SLOT_COUNT)
            ]

    @property
    def state(self) -> DocumentState:
        return DocumentState.EMPTY if self._view is None else DocumentState.LOADED

    @property
    def is_loaded(self) -> bool:
        return self._view is not None

    def __len__(self) -> int:
        return len(self._view) if self._view is not None else 0

    @property
    def active_slot(self) -> int:
        return self._slot_index

    @active_slot.setter
    def active_slot(self, index: int):
        if index not in range(layout.SLOT_COUNT):
            raise ValueError(f"Slot index must be 0 or 1, got {index}")
        self._slot_index = index

    @property
    def slot(self) -> ByteView:
        """View over the active slot."""
        if not self._slots:
            raise RuntimeError("No complete save image loaded")
        return self._slots[self._slot_index]

    def slot_view(self, index: int) -> ByteView:
        if not self._slots:
            raise RuntimeError("No complete save image loaded")
        return self._slots[index]

    # ------------------------------------------------------------------
    # Validation / checksums
    # ------------------------------------------------------------------

    def validate(self) -> bool:
        """True only for a complete image with magic and four good checksums."""
        if self._view is None:
            logger.info("Validation failed: no buffer")
            return False
        if len(self._view) < layout.MIN_FILE_SIZE:
            logger.info(f"Validation failed: {len(self._view)} bytes is too short")
            return False
        if self._view.read_bytes(0, len(layout.MAGIC)) != layout.MAGIC:
            logger.info("Validation failed: bad magic")
            return False
        for index, slot in enumerate(self._slots):
            if not checksum.validate_slot(slot):
                logger.info(f"Validation failed: slot {index} checksum")
                return False
        return True

    def has_magic(self) -> bool:
        if self._view is None or len(self._view) < len(layout.MAGIC):
            return False
        return self._view.read_bytes(0, len(layout.MAGIC)) == layout.MAGIC

    def slot_is_valid(self, index: int) -> bool:
        return checksum.validate_slot(self.slot_view(index))

    def stored_checksums(self, index: int) -> Tuple[int, int]:
        return checksum.stored_checksums(self.slot_view(index))

    def computed_checksums(self, index: int) -> Tuple[int, int]:
        return checksum.computed_checksums(self.slot_view(index))

    def refresh_slot(self, index: int) -> Tuple[int, int]:
        return checksum.refresh_slot(self.slot_view(index))

    def refresh_checksums(self):
        for index in range(len(self._slots)):
            self.refresh_slot(index)

    def export(self) -> bytes:
        """Refresh both slots' checksums and return the whole image."""
        if self._view is None:
            raise RuntimeError("Nothing to export")
        self.refresh_checksums()
        return self._view.tobytes()

    def save(self, filepath: Optional[Union[str, Path]] = None, backup: bool = True) -> Path:
        """Export to disk, copying any existing file to <name>.bak first."""
        path = Path(filepath) if filepath else self.path
        if path is None:
            raise ValueError("No output path given and document was not loaded from a file")

        data = self.export()
        if backup and path.exists():
            backup_path = path.with_name(path.name + '.bak')
            shutil.copy2(path, backup_path)
            logger.info(f"Backup saved to {backup_path}")

        with open(path, 'wb') as f:
            f.write(data)
        self.path = path
        logger.info(f"Saved {path}")
        return path

    # ------------------------------------------------------------------
    # Field helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _char(n: int, field: int) -> int:
        return n * layout.CHARACTER_SIZE + field

    def _get_masked(self, n: int, spec: MaskedField) -> int:
        return spec.extract(self.slot.read_u8(self._char(n, spec.offset)))

    def _set_masked(self, n: int, spec: MaskedField, value: int):
        offset = self._char(n, spec.offset)
        self.slot.write_u8(offset, spec.insert(self.slot.read_u8(offset), int(value)))

    def _read_mask(self, flags: BitFlag) -> int:
        if flags.width == 2:
            return self.slot.read_u16(flags.offset)
        return self.slot.read_u32(flags.offset)

    def _write_mask(self, flags: BitFlag, raw: int):
        if flags.width == 2:
            self.slot.write_u16(flags.offset, raw)
        else:
            self.slot.write_u32(flags.offset, raw)

    def _get_flag(self, flags: BitFlag, index: int) -> Optional[bool]:
        if not flags.in_range(index):
            return None
        return bool(self._read_mask(flags) & flags.mask(index))

    def _set_flag(self, flags: BitFlag, index: int, on: bool) -> bool:
        if not flags.in_range(index):
            logger.warning(f"{flags.name}: index {index} out of range")
            return False
        raw = self._read_mask(flags)
        mask = flags.mask(index)
        self._write_mask(flags, (raw | mask) if on else (raw & ~mask))
        return True

    def _read_name(self, offset: int) -> str:
        return NAME_CODEC.decode(self.slot.read_bytes(offset, layout.NAME_LENGTH))

    def _write_name(self, offset: int, name: str):
        self.slot.write_bytes(offset, NAME_CODEC.encode(name))

    # ========================================================================
    # Party
    # ========================================================================

    @property
    def standby_count(self) -> int:
        return self.slot.read_u8(layout.STANDBY_COUNT)

    @property
    def party_count(self) -> int:
        return self.slot.read_u8(layout.PARTY_COUNT)

    @property
    def character_count(self) -> int:
        return self.standby_count + self.party_count

    def party_order(self) -> List[int]:
        return list(self.slot.read_bytes(layout.PARTY_ORDER, self.party_count))

    def in_party(self, n: int) -> bool:
        return n >= self.standby_count

    def is_hero(self, n: int) -> bool:
        return n == self.standby_count

    # ========================================================================
    # Character identity and appearance
    # ========================================================================

    def character_name(self, n: int) -> str:
        return self._read_name(self._char(n, layout.CHAR_NAME))

    def set_character_name(self, n: int, name: str):
        """Write a name; unknown characters become '?', long names are cut."""
        self._write_name(self._char(n, layout.CHAR_NAME), name)
        logger.debug(f"Character {n} renamed to {name!r}")

    def character_gender(self, n: int) -> int:
        return self._get_masked(n, layout.GENDER)

    def set_character_gender(self, n: int, gender: int):
        self._set_masked(n, layout.GENDER, gender)

    def character_skin_color(self, n: int) -> int:
        return self._get_masked(n, layout.SKIN_COLOR)

    def set_character_skin_color(self, n: int, color: int):
        self._set_masked(n, layout.SKIN_COLOR, color)

    def character_eye_color(self, n: int) -> int:
        return self._get_masked(n, layout.EYE_COLOR)

    def set_character_eye_color(self, n: int, color: int):
        self._set_masked(n, layout.EYE_COLOR, color)

    def character_hair_color(self, n: int) -> int:
        return self._get_masked(n, layout.HAIR_COLOR)

    def set_character_hair_color(self, n: int, color: int):
        self._set_masked(n, layout.HAIR_COLOR, color)

    def character_face(self, n: int) -> int:
        return self.slot.read_u8(self._char(n, layout.CHAR_FACE))

    def set_character_face(self, n: int, face: int):
        self.slot.write_u8(self._char(n, layout.CHAR_FACE), face)

    def character_hairstyle(self, n: int) -> int:
        return self.slot.read_u8(self._char(n, layout.CHAR_HAIRSTYLE))

    def set_character_hairstyle(self, n: int, style: int):
        self.slot.write_u8(self._char(n, layout.CHAR_HAIRSTYLE), style)

    def character_body_width(self, n: int) -> int:
        return self.slot.read_u16(self._char(n, layout.CHAR_BODY_WIDTH))

    def set_character_body_width(self, n: int, value: int):
        self.slot.write_u16(self._char(n, layout.CHAR_BODY_WIDTH), value)

    def character_body_height(self, n: int) -> int:
        return self.slot.read_u16(self._char(n, layout.CHAR_BODY_HEIGHT))

    def set_character_body_height(self, n: int, value: int):
        self.slot.write_u16(self._char(n, layout.CHAR_BODY_HEIGHT), value)

    # ========================================================================
    # Vocation, skills, spells
    # ========================================================================

    def character_vocation(self, n: int) -> int:
        return self.slot.read_u8(self._char(n, layout.CHAR_VOCATION))

    def set_character_vocation(self, n: int, vocation: int):
        self.slot.write_u8(self._char(n, layout.CHAR_VOCATION), vocation)

    def character_skill_allocation(self, n: int, skill: int) -> int:
        return self.slot.read_u8(self._char(n, layout.CHAR_SKILL_ALLOCATIONS + skill))

    def set_character_skill_allocation_raw(self, n: int, skill: int, value: int):
        """Write the allocation byte only; proficiencies are left alone."""
        self.slot.write_u8(self._char(n, layout.CHAR_SKILL_ALLOCATIONS + skill), value)

    def set_character_skill_allocation(self, n: int, skill: int, value: int) -> int:
        """Clamp to 0..100, write, and bring the skill's proficiencies in line.

        Returns the value written.
        """
        value = _clamp(value, 0, layout.MAX_SKILL_ALLOCATION)
        self.set_character_skill_allocation_raw(n, skill, value)
        for prof_id, unlocked in derive_proficiencies(SKILLS[skill], value):
            self.set_character_proficiency(n, prof_id, unlocked)
        logger.debug(f"Character {n}: {SKILLS[skill].name} = {value}")
        return value

    def character_proficiency(self, n: int, prof_id: int) -> bool:
        byte = self.slot.read_u8(self._char(n, layout.CHAR_PROFICIENCIES + prof_id // 8))
        return bool(byte & (1 << (prof_id % 8)))

    def set_character_proficiency(self, n: int, prof_id: int, unlocked: bool):
        offset = self._char(n, layout.CHAR_PROFICIENCIES + prof_id // 8)
        mask = 1 << (prof_id % 8)
        byte = self.slot.read_u8(offset)
        self.slot.write_u8(offset, (byte | mask) if unlocked else (byte & ~mask & 0xFF))

    def unallocated_skill_points(self, n: int) -> int:
        return self.slot.read_u16(self._char(n, layout.CHAR_UNALLOCATED_POINTS))

    def set_unallocated_skill_points(self, n: int, points: int) -> int:
        points = _clamp(points, 0, layout.MAX_UNALLOCATED_POINTS)
        self.slot.write_u16(self._char(n, layout.CHAR_UNALLOCATED_POINTS), points)
        return points

    def knows_zoom(self, n: int) -> bool:
        return bool(self._get_masked(n, layout.KNOWS_ZOOM))

    def set_knows_zoom(self, n: int, knows: bool):
        self._set_masked(n, layout.KNOWS_ZOOM, 1 if knows else 0)

    def knows_egg_on(self, n: int) -> bool:
        return bool(self._get_masked(n, layout.KNOWS_EGG_ON))

    def set_knows_egg_on(self, n: int, knows: bool):
        self._set_masked(n, layout.KNOWS_EGG_ON, 1 if knows else 0)

    # ========================================================================
    # Equipment and held items
    # ========================================================================

    def _equipment_offset(self, n: int, category: int) -> Optional[int]:
        if not (ItemCategory.WEAPON <= category <= ItemCategory.ACCESSORY):
            return None
        return self._char(n, layout.CHAR_EQUIPMENT + (category - 1) * 2)

    def character_equipment(self, n: int, category: int) -> Optional[int]:
        """Equipped item id for an equipment category, None for other kinds."""
        offset = self._equipment_offset(n, category)
        if offset is None:
            return None
        return self.slot.read_u16(offset)

    def set_character_equipment(self, n: int, category: int, item_id: int) -> bool:
        offset = self._equipment_offset(n, category)
        if offset is None:
            logger.warning(f"Category {category} has no equipment slot")
            return False
        self.slot.write_u16(offset, item_id)
        return True

    def _held_item_offset(self, n: int, i: int) -> Optional[int]:
        position = n - self.standby_count
        if not (0 <= position < layout.MAX_PARTY_SIZE) or not (0 <= i < layout.HELD_ITEM_SLOTS):
            return None
        return layout.HELD_ITEMS + layout.HELD_ITEM_STRIDE * position + 2 * i

    def held_item(self, n: int, i: int) -> Optional[int]:
        """Item id in held slot i of character n, None if n is not in the party."""
        offset = self._held_item_offset(n, i)
        if offset is None:
            return None
        return self.slot.read_u16(offset)

    def set_held_item(self, n: int, i: int, item_id: int) -> bool:
        offset = self._held_item_offset(n, i)
        if offset is None:
            logger.warning(f"Held item ({n}, {i}) is outside the party")
            return False
        self.slot.write_u16(offset, item_id)
        return True

    # ========================================================================
    # Inventory
    # ========================================================================

    def _read_slot(self, array: InventoryArray, index: int) -> InventorySlot:
        return InventorySlot(
            index,
            self.slot.read_u16(array.id_at(index)),
            self.slot.read_u8(array.count_at(index)),
        )

    def _write_slot(self, array: InventoryArray, index: int, item_id: int, count: int):
        self.slot.write_u16(array.id_at(index), item_id)
        self.slot.write_u8(array.count_at(index), count)

    def item_slots(self, category: ItemCategory) -> List[InventorySlot]:
        """Every position of a category's arrays, empty ones included."""
        array = layout.INVENTORY[category]
        return [self._read_slot(array, i) for i in range(array.length)]

    def items(self, category: ItemCategory) -> List[InventorySlot]:
        """Occupied positions only."""
        return [s for s in self.item_slots(category) if s.occupied]

    def _find_item(self, array: InventoryArray, item_id: int) -> Optional[int]:
        for i in range(array.length):
            if self.slot.read_u16(array.id_at(i)) == item_id:
                return i
        return None

    def item_count(self, item_id: int) -> int:
        """How many of an item the bag holds; 0 when absent."""
        array = layout.INVENTORY[self.catalog.category_of(item_id)]
        index = self._find_item(array, item_id)
        if index is None:
            return 0
        return self.slot.read_u8(array.count_at(index))

    def set_item_count(self, item_id: int, count: int) -> bool:
        """Set the bag count of an item, reusing its slot or the first free one.

        A count of 0 frees the slot. Returns False when the item is absent and
        its category has no free slot. Raises KeyError for unknown item ids and
        ValueError for counts that do not fit the count byte; neither touches
        the bag.
        """
        category = self.catalog.category_of(item_id)
        array = layout.INVENTORY[category]
        if not 0 <= count <= 0xFF:
            raise ValueError(f"Item count {count} out of range 0..255")

        index = None
        free = None
        for i in range(array.length):
            current = self.slot.read_u16(array.id_at(i))
            if current == item_id:
                index = i
                break
            if free is None and current == layout.EMPTY_ITEM:
                free = i
        if index is None:
            index = free

        if index is None:
            if count == 0:
                return True
            logger.warning(f"No free {category.label} slot for item {item_id}")
            return False

        if count == 0:
            self._write_slot(array, index, layout.EMPTY_ITEM, 0)
        else:
            self._write_slot(array, index, item_id, count)
        logger.debug(f"{category.label}[{index}] = item {item_id} x{count}")

        if array.packed:
            self.pack_items(category)
        return True

    def pack_items(self, category: ItemCategory):
        """Slide occupied slots left so no hole precedes an occupied slot."""
        array = layout.INVENTORY[category]
        for hole in range(array.length):
            if self.slot.read_u16(array.id_at(hole)) != layout.EMPTY_ITEM:
                continue
            source = None
            for j in range(hole + 1, array.length):
                if self.slot.read_u16(array.id_at(j)) != layout.EMPTY_ITEM:
                    source = j
                    break
            if source is None:
                break
            moved = self._read_slot(array, source)
            self._write_slot(array, hole, moved.item_id, moved.count)
            self._write_slot(array, source, layout.EMPTY_ITEM, 0)

    # ========================================================================
    # Money
    # ========================================================================

    @property
    def gold_on_hand(self) -> int:
        return self.slot.read_u32(layout.GOLD_ON_HAND)

    def set_gold_on_hand(self, gold: int) -> int:
        gold = _clamp(gold, 0, layout.MAX_GOLD_ON_HAND)
        self.slot.write_u32(layout.GOLD_ON_HAND, gold)
        return gold

    @property
    def gold_in_bank(self) -> int:
        return self.slot.read_u32(layout.GOLD_IN_BANK)

    def set_gold_in_bank(self, gold: int) -> int:
        gold = _clamp(gold, 0, layout.MAX_GOLD_IN_BANK)
        self.slot.write_u32(layout.GOLD_IN_BANK, gold)
        return gold

    @property
    def mini_medals(self) -> int:
        return self.slot.read_u32(layout.MINI_MEDALS)

    def set_mini_medals(self, medals: int) -> int:
        medals = _clamp(medals, 0, layout.MAX_MINI_MEDALS)
        self.slot.write_u32(layout.MINI_MEDALS, medals)
        return medals

    # ========================================================================
    # Time
    # ========================================================================

    def _read_time(self, offsets: Tuple[int, int, int]) -> PlayTime:
        hours, minutes, seconds = offsets
        return PlayTime(
            self.slot.read_u16(hours),
            self.slot.read_u8(minutes),
            self.slot.read_u8(seconds),
        )

    def _write_time(self, offsets: Tuple[int, int, int],
                    hours: int, minutes: int, seconds: int) -> PlayTime:
        value = PlayTime(
            _clamp(hours, 0, layout.MAX_HOURS),
            _clamp(minutes, 0, layout.MAX_MINUTES_SECONDS),
            _clamp(seconds, 0, layout.MAX_MINUTES_SECONDS),
        )
        self.slot.write_u16(offsets[0], value.hours)
        self.slot.write_u8(offsets[1], value.minutes)
        self.slot.write_u8(offsets[2], value.seconds)
        return value

    def playtime(self) -> PlayTime:
        return self._read_time(layout.PLAYTIME)

    def set_playtime(self, hours: int, minutes: int, seconds: int) -> PlayTime:
        return self._write_time(layout.PLAYTIME, hours, minutes, seconds)

    def multiplayer_time(self) -> PlayTime:
        return self._read_time(layout.MULTIPLAYER_TIME)

    def set_multiplayer_time(self, hours: int, minutes: int, seconds: int) -> PlayTime:
        return self._write_time(layout.MULTIPLAYER_TIME, hours, minutes, seconds)

    # ========================================================================
    # World flags
    # ========================================================================

    def party_trick_learned(self, i: int) -> Optional[bool]:
        """None outside 0..14."""
        return self._get_flag(layout.PARTY_TRICK_FLAGS, i)

    def set_party_trick_learned(self, i: int, learned: bool) -> bool:
        return self._set_flag(layout.PARTY_TRICK_FLAGS, i, learned)

    def vocation_unlocked(self, vocation_id: int) -> bool:
        return bool(self._get_flag(layout.VOCATION_FLAGS, vocation_id))

    def set_vocation_unlocked(self, vocation_id: int, unlocked: bool) -> bool:
        return self._set_flag(layout.VOCATION_FLAGS, vocation_id, unlocked)

    def visited_location(self, i: int) -> bool:
        return bool(self._get_flag(layout.VISITED_LOCATION_FLAGS, i))

    def set_visited_location(self, i: int, visited: bool) -> bool:
        return self._set_flag(layout.VISITED_LOCATION_FLAGS, i, visited)

    def special_guest_visiting(self, i: int) -> bool:
        return bool(self._get_flag(layout.SPECIAL_GUEST_FLAGS, i))

    def set_special_guest_visiting(self, i: int, visiting: bool) -> bool:
        return self._set_flag(layout.SPECIAL_GUEST_FLAGS, i, visiting)

    # ========================================================================
    # Canvased guests
    # ========================================================================

    @staticmethod
    def _guest(n: int) -> int:
        return layout.CANVASED_GUESTS + n * layout.CANVASED_GUEST_SIZE + layout.CANVASED_GUEST_NAME

    def canvased_guest_name(self, n: int) -> str:
        return self._read_name(self._guest(n))

    def set_canvased_guest_name(self, n: int, name: str):
        self._write_name(self._guest(n), name)

    def canvased_guests(self) -> List[Tuple[int, str]]:
        """(index, name) for every guest record with a non-empty name."""
        guests = []
        for n in range(layout.CANVASED_GUEST_CAPACITY):
            name = self.canvased_guest_name(n)
            if name:
                guests.append((n, name))
        return guests
