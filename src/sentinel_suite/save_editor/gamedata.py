"""
Static game tables: vocations, skills and their proficiencies, and the item
catalog used to route an item id to its inventory category.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .layout import ItemCategory, MAX_SKILL_ALLOCATION

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "data" / "items.json"


# ============================================================================
# Vocations
# ============================================================================

@dataclass(frozen=True)
class Vocation:
    id: int
    name: str
    unlockable: bool = False


VOCATIONS: Tuple[Vocation, ...] = (
    Vocation(1, "Warrior"),
    Vocation(2, "Priest"),
    Vocation(3, "Mage"),
    Vocation(4, "Martial Artist"),
    Vocation(5, "Thief"),
    Vocation(6, "Minstrel"),
    Vocation(7, "Gladiator", unlockable=True),
    Vocation(8, "Paladin", unlockable=True),
    Vocation(9, "Armamentalist", unlockable=True),
    Vocation(10, "Ranger", unlockable=True),
    Vocation(11, "Sage", unlockable=True),
    Vocation(12, "Luminary", unlockable=True),
)

VOCATIONS_BY_ID: Dict[int, Vocation] = {v.id: v for v in VOCATIONS}


def vocation_name(vocation_id: int) -> str:
    vocation = VOCATIONS_BY_ID.get(vocation_id)
    return vocation.name if vocation else f"Vocation {vocation_id}"


# ============================================================================
# Skills and proficiencies
# ============================================================================

PROFICIENCIES_PER_SKILL = 10
PROFICIENCY_STEP = MAX_SKILL_ALLOCATION // PROFICIENCIES_PER_SKILL


@dataclass(frozen=True)
class Proficiency:
    id: int
    points: int


@dataclass(frozen=True)
class Skill:
    index: int
    name: str
    proficiencies: Tuple[Proficiency, ...] = field(default_factory=tuple)


SKILL_NAMES = (
    # Vocation skills
    "Courage", "Faith", "Spellcraft", "Focus", "Acquisitiveness", "Ebullience",
    "Guts", "Virtue", "Enlightenment", "Nature", "Mysticism", "Flair",
    # Weapon and shield skills
    "Swords", "Spears", "Knives", "Wands", "Whips", "Claws", "Staves",
    "Axes", "Bows", "Boomerangs", "Fans", "Hammers", "Fisticuffs", "Shields",
)


def _build_skills() -> Tuple[Skill, ...]:
    skills = []
    for index, name in enumerate(SKILL_NAMES):
        profs = tuple(
            Proficiency(index * PROFICIENCIES_PER_SKILL + k, (k + 1) * PROFICIENCY_STEP)
            for k in range(PROFICIENCIES_PER_SKILL)
        )
        skills.append(Skill(index, name, profs))
    return tuple(skills)


SKILLS: Tuple[Skill, ...] = _build_skills()


def derive_proficiencies(skill: Union[int, Skill], points: int) -> List[Tuple[int, bool]]:
    """Proficiency states implied by an allocation.

    Returns (proficiency id, unlocked) for every proficiency of the skill; a
    proficiency is unlocked when its threshold is at or below ``points``.
    """
    if not isinstance(skill, Skill):
        skill = SKILLS[skill]
    return [(p.id, p.points <= points) for p in skill.proficiencies]


# ============================================================================
# World tables
# ============================================================================

PARTY_TRICKS = (
    "Jolly Jig", "Juggling", "Sword Swallowing", "Fire Breathing",
    "Ventriloquism", "Shadow Puppetry", "Knife Throwing", "Sleight of Hand",
    "Moonwalk", "Pantomime", "Tightrope Walk", "Acrobatics", "Stilt Walking",
    "Plate Spinning", "Balloon Animals",
)

LOCATIONS = (
    "Angel Falls", "Stornway", "Coffinwell", "Zere", "Bloomingdale",
    "Porth Llaffan", "Swinedimples Academy", "Alltrades Abbey", "Gleeba",
    "Dourbridge", "Batsureg", "Wormwood Creek", "Upover", "Brigadoom",
    "Slurry Quarry", "Pinnacle of the Observatory", "Gittingham Palace",
    "Quarantomb", "Magmaroo", "Snowberia", "Khaalag Coast", "Hermit's Haven",
    "Mount Ohmygosh", "Fort Bowhole", "Bastion of the Fallen", "Heliodor Gate",
)

SPECIAL_GUESTS = (
    "Alena", "Angelo", "Bianca", "Carver", "Jessica", "Kiryl", "Maya",
    "Meena", "Nera", "Terry", "Yangus", "Patty", "Dhoulmagus",
)


def location_name(index: int) -> str:
    return LOCATIONS[index] if 0 <= index < len(LOCATIONS) else f"Location {index}"


# ============================================================================
# Item catalog
# ============================================================================

@dataclass(frozen=True)
class ItemInfo:
    id: int
    name: str
    category: ItemCategory
    icon: int = 0


class ItemCatalog:
    """Item id -> (name, category) lookup loaded from a JSON file.

    The file maps a lowercase category name to a block::

        {"common": {"first_id": 1, "items": ["Medicinal herb", ...]}, ...}

    Ids are assigned sequentially from ``first_id``. Icon indices follow the
    order the items appear in the file.
    """

    def __init__(self, items: Iterable[ItemInfo] = ()):
        self._by_id: Dict[int, ItemInfo] = {}
        self._by_category: Dict[ItemCategory, List[ItemInfo]] = {c: [] for c in ItemCategory}
        for item in items:
            self.add(item)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> 'ItemCatalog':
        """Load a catalog file (defaults to the bundled one)."""
        path = Path(path) if path else DEFAULT_CATALOG_PATH
        with open(path, 'r', encoding='utf-8') as f:
            raw = json.load(f)

        catalog = cls()
        icon = 0
        for key, block in raw.items():
            try:
                category = ItemCategory[key.upper()]
            except KeyError:
                logger.warning(f"Unknown item category '{key}' in {path}, skipped")
                continue
            first_id = int(block.get("first_id", 0))
            for offset, name in enumerate(block.get("items", [])):
                catalog.add(ItemInfo(first_id + offset, name, category, icon))
                icon += 1

        logger.debug(f"Loaded {len(catalog)} items from {path}")
        return catalog

    def add(self, item: ItemInfo):
        if item.id in self._by_id:
            raise ValueError(f"Duplicate item id {item.id} ({item.name})")
        self._by_id[item.id] = item
        self._by_category[item.category].append(item)

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, item_id: int) -> bool:
        return item_id in self._by_id

    def __getitem__(self, item_id: int) -> ItemInfo:
        """Raises KeyError for an id the catalog does not know."""
        return self._by_id[item_id]

    def get(self, item_id: int) -> Optional[ItemInfo]:
        return self._by_id.get(item_id)

    def category_of(self, item_id: int) -> ItemCategory:
        return self[item_id].category

    def in_category(self, category: ItemCategory) -> List[ItemInfo]:
        return list(self._by_category[category])

    def find(self, text: str) -> List[ItemInfo]:
        """Case-insensitive name search."""
        needle = text.lower()
        return [item for item in self._by_id.values() if needle in item.name.lower()]

    def name_of(self, item_id: int) -> str:
        item = self._by_id.get(item_id)
        return item.name if item else f"Item {item_id}"


_default_catalog: Optional[ItemCatalog] = None


def default_catalog() -> ItemCatalog:
    """The bundled catalog, loaded once."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = ItemCatalog.load()
    return _default_catalog
