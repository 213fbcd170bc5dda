"""
Sentinel Suite - inventory tests

Sparse id/count arrays, packing of common/important items, full bags.

Can be run standalone: python test_inventory.py
Or via main runner: python tests.py
"""

import random

import pytest

from save_fixtures import new_document
from sentinel_suite.save_editor import layout
from sentinel_suite.save_editor.gamedata import ItemCatalog, ItemInfo
from sentinel_suite.save_editor.layout import ItemCategory

HERB = 1
STRONG_MEDICINE = 2
HOLY_WATER = 8
COPPER_SWORD = 1025
IRON_LANCE = 1028
DAGGER = 1029


def test_empty_bag():
    doc = new_document()
    for category in ItemCategory:
        assert doc.items(category) == []
        assert len(doc.item_slots(category)) == layout.INVENTORY[category].length
    assert doc.item_count(HERB) == 0


def test_add_and_update_count():
    doc = new_document()
    assert doc.set_item_count(HERB, 5)
    assert doc.item_count(HERB) == 5
    assert doc.set_item_count(HERB, 12)
    assert doc.item_count(HERB) == 12
    assert len(doc.items(ItemCategory.COMMON)) == 1


def test_item_lands_in_its_category_arrays():
    doc = new_document()
    doc.set_item_count(COPPER_SWORD, 1)
    array = layout.INVENTORY[ItemCategory.WEAPON]
    assert doc.slot.read_u16(array.id_at(0)) == COPPER_SWORD
    assert doc.slot.read_u8(array.count_at(0)) == 1
    assert doc.items(ItemCategory.COMMON) == []


def test_sparkly_stone_add_then_remove():
    doc = new_document()
    array = layout.INVENTORY[ItemCategory.COMMON]
    doc.set_item_count(42, 5)
    assert doc.slot.read_u16(array.id_at(0)) == 42
    assert doc.slot.read_u8(array.count_at(0)) == 5

    doc.set_item_count(42, 0)
    assert doc.slot.read_u16(array.id_at(0)) == layout.EMPTY_ITEM
    assert doc.slot.read_u8(array.count_at(0)) == 0
    assert doc.items(ItemCategory.COMMON) == []


def test_packed_categories_never_have_interior_holes():
    doc = new_document()
    rng = random.Random(9)
    common = [item.id for item in doc.catalog.in_category(ItemCategory.COMMON)]
    important = [item.id for item in doc.catalog.in_category(ItemCategory.IMPORTANT)]
    for _ in range(300):
        item_id = rng.choice(common + important)
        doc.set_item_count(item_id, rng.choice((0, 0, 1, 5, 99)))
        for category in (ItemCategory.COMMON, ItemCategory.IMPORTANT):
            flags = [s.occupied for s in doc.item_slots(category)]
            assert flags == sorted(flags, reverse=True), f"hole in {category.label}"


def test_removing_from_packed_category_closes_the_gap():
    doc = new_document()
    for item_id in (HERB, STRONG_MEDICINE, HOLY_WATER):
        doc.set_item_count(item_id, 3)
    doc.set_item_count(STRONG_MEDICINE, 0)

    slots = doc.item_slots(ItemCategory.COMMON)
    assert [s.item_id for s in slots[:2]] == [HERB, HOLY_WATER]
    assert not slots[2].occupied
    assert slots[1].count == 3


def test_removing_from_sparse_category_leaves_a_hole():
    doc = new_document()
    for item_id in (COPPER_SWORD, IRON_LANCE, DAGGER):
        doc.set_item_count(item_id, 1)
    doc.set_item_count(IRON_LANCE, 0)

    slots = doc.item_slots(ItemCategory.WEAPON)
    assert slots[0].item_id == COPPER_SWORD
    assert not slots[1].occupied
    assert slots[1].count == 0
    assert slots[2].item_id == DAGGER

    # A new item reuses the first hole
    doc.set_item_count(IRON_LANCE, 2)
    assert doc.item_slots(ItemCategory.WEAPON)[1].item_id == IRON_LANCE


def test_zero_count_for_absent_item_is_a_no_op():
    doc = new_document()
    before = doc.export()
    assert doc.set_item_count(HERB, 0)
    assert doc.export() == before


def test_unknown_item_raises():
    doc = new_document()
    with pytest.raises(KeyError):
        doc.set_item_count(60000, 1)
    with pytest.raises(KeyError):
        doc.item_count(60000)


def test_count_outside_byte_range_leaves_bag_untouched():
    doc = new_document()
    doc.set_item_count(HERB, 3)
    doc.set_item_count(STRONG_MEDICINE, 4)
    before = doc.item_slots(ItemCategory.COMMON)

    with pytest.raises(ValueError):
        doc.set_item_count(HOLY_WATER, 300)
    with pytest.raises(ValueError):
        doc.set_item_count(HERB, -1)

    assert doc.item_slots(ItemCategory.COMMON) == before
    assert doc.item_count(HERB) == 3
    assert doc.item_count(HOLY_WATER) == 0


def test_full_category_refuses_new_items():
    length = layout.INVENTORY[ItemCategory.SHIELD].length
    catalog = ItemCatalog(
        ItemInfo(1536 + i, f"Shield {i}", ItemCategory.SHIELD) for i in range(length + 1)
    )
    doc = new_document(catalog=catalog)
    for i in range(length):
        assert doc.set_item_count(1536 + i, 1)

    assert not doc.set_item_count(1536 + length, 1)
    assert doc.item_count(1536 + length) == 0
    # Existing items can still be changed
    assert doc.set_item_count(1536, 9)
    assert doc.item_count(1536) == 9


def test_pack_items_preserves_order():
    doc = new_document()
    array = layout.INVENTORY[ItemCategory.IMPORTANT]
    doc.slot.write_u16(array.id_at(2), 8192)
    doc.slot.write_u8(array.count_at(2), 1)
    doc.slot.write_u16(array.id_at(5), 8193)
    doc.slot.write_u8(array.count_at(5), 4)

    doc.pack_items(ItemCategory.IMPORTANT)
    slots = doc.item_slots(ItemCategory.IMPORTANT)
    assert [(s.item_id, s.count) for s in slots[:2]] == [(8192, 1), (8193, 4)]
    assert all(not s.occupied for s in slots[2:])


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))
