"""
Sentinel Suite - SaveDocument tests

Validation, slots, export/save, character fields, world flags.

Can be run standalone: python test_save_document.py
Or via main runner: python tests.py
"""

import tempfile
from pathlib import Path

import pytest

from save_fixtures import new_document
from sentinel_suite.save_editor import layout
from sentinel_suite.save_editor.gamedata import SKILLS
from sentinel_suite.save_editor.layout import ItemCategory
from sentinel_suite.save_editor.save_manager import DocumentState, PlayTime, SaveDocument


# ═══════════════════════════════════════════════════════════════════════════════
# VALIDATION
# ═══════════════════════════════════════════════════════════════════════════════

def test_fresh_document_validates():
    doc = new_document()
    assert doc.state == DocumentState.LOADED
    assert doc.has_magic()
    assert doc.validate()


def test_empty_document_is_invalid():
    doc = SaveDocument()
    assert doc.state == DocumentState.EMPTY
    assert not doc.is_loaded
    assert not doc.validate()
    with pytest.raises(RuntimeError):
        doc.export()


def test_short_buffer_is_invalid():
    data = new_document().export()[:layout.MIN_FILE_SIZE - 1]
    doc = SaveDocument(data)
    assert not doc.validate()
    with pytest.raises(RuntimeError):
        doc.slot


def test_thousand_byte_buffer_is_invalid():
    doc = SaveDocument(bytes(1000))
    assert doc.state == DocumentState.LOADED
    assert len(doc) == 1000
    assert not doc.validate()
    assert not doc.has_magic()


def test_bad_magic_is_invalid():
    data = bytearray(new_document().export())
    data[0:3] = b"XXX"
    assert not SaveDocument(data).validate()


def test_either_slot_mismatch_is_invalid():
    for index in range(layout.SLOT_COUNT):
        data = bytearray(new_document().export())
        data[index * layout.SLOT_SIZE + 5000] ^= 0xFF
        doc = SaveDocument(data)
        assert not doc.validate()
        assert not doc.slot_is_valid(index)
        assert doc.slot_is_valid(1 - index)


def test_load_copies_buffer():
    data = bytearray(new_document().export())
    doc = SaveDocument(data)
    doc.set_gold_on_hand(1234)
    assert SaveDocument(data).gold_on_hand == 0


def test_longer_files_are_accepted():
    data = new_document().export() + b"\x00" * 100
    doc = SaveDocument(data)
    assert doc.validate()
    assert len(doc.export()) == len(data)


# ═══════════════════════════════════════════════════════════════════════════════
# SLOTS / EXPORT / SAVE
# ═══════════════════════════════════════════════════════════════════════════════

def test_active_slot_selection():
    doc = new_document()
    assert doc.active_slot == 0
    doc.active_slot = 1
    doc.set_gold_on_hand(500)
    doc.active_slot = 0
    assert doc.gold_on_hand == 0
    doc.active_slot = 1
    assert doc.gold_on_hand == 500
    with pytest.raises(ValueError):
        doc.active_slot = 2


def test_edits_invalidate_until_export():
    doc = new_document()
    doc.set_gold_on_hand(777)
    assert not doc.validate()
    data = doc.export()
    assert doc.validate()
    reloaded = SaveDocument(data)
    assert reloaded.validate()
    assert reloaded.gold_on_hand == 777


def test_save_writes_backup():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "game.sav"
        original = new_document().export()
        path.write_bytes(original)

        doc = SaveDocument.from_file(path)
        assert doc.path == path
        doc.set_mini_medals(42)
        written = doc.save()

        assert written == path
        assert (Path(tmp) / "game.sav.bak").read_bytes() == original
        assert SaveDocument.from_file(path).mini_medals == 42


def test_save_without_backup_or_path():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "game.sav"
        path.write_bytes(new_document().export())
        doc = SaveDocument.from_file(path)
        doc.save(backup=False)
        assert not (Path(tmp) / "game.sav.bak").exists()

    with pytest.raises(ValueError):
        new_document().save()


def test_missing_file_raises_oserror():
    with pytest.raises(OSError):
        SaveDocument.from_file("/nonexistent/dir/none.sav")


# ═══════════════════════════════════════════════════════════════════════════════
# PARTY / CHARACTERS
# ═══════════════════════════════════════════════════════════════════════════════

def test_party_layout():
    doc = new_document(standby=2, party=3, names=("A", "B", "Hero", "C", "D"))
    assert doc.character_count == 5
    assert doc.party_order() == [2, 3, 4]
    assert not doc.in_party(1)
    assert doc.in_party(2)
    assert doc.is_hero(2)
    assert doc.character_name(2) == "Hero"


def test_character_name():
    doc = new_document()
    doc.set_character_name(1, "Celestrian")
    assert doc.character_name(1) == "Celestrian"
    doc.set_character_name(1, "Al")
    assert doc.character_name(1) == "Al"


def test_masked_fields_share_a_byte():
    doc = new_document()
    doc.set_character_gender(1, 1)
    doc.set_character_skin_color(1, 5)
    doc.set_character_eye_color(1, 9)
    assert doc.character_gender(1) == 1
    assert doc.character_skin_color(1) == 5
    assert doc.character_eye_color(1) == 9
    raw = doc.slot.read_u8(layout.CHARACTER_SIZE + layout.CHAR_GENDER_COLORS)
    assert raw == 0x9B
    doc.set_character_gender(1, 0)
    assert doc.character_skin_color(1) == 5
    assert doc.character_eye_color(1) == 9


def test_hair_color_keeps_high_nibble():
    doc = new_document()
    offset = layout.CHAR_HAIR_COLOR
    doc.slot.write_u8(offset, 0xA0)
    doc.set_character_hair_color(0, 7)
    assert doc.character_hair_color(0) == 7
    assert doc.slot.read_u8(offset) == 0xA7


def test_zoom_and_egg_on_keep_other_bits():
    doc = new_document()
    doc.slot.write_u8(layout.CHAR_ZOOM, 0x0F)
    doc.slot.write_u8(layout.CHAR_EGG_ON, 0x81)
    doc.set_knows_zoom(0, True)
    doc.set_knows_egg_on(0, True)
    assert doc.knows_zoom(0) and doc.knows_egg_on(0)
    assert doc.slot.read_u8(layout.CHAR_ZOOM) == 0x1F
    assert doc.slot.read_u8(layout.CHAR_EGG_ON) == 0xC1
    doc.set_knows_zoom(0, False)
    assert doc.slot.read_u8(layout.CHAR_ZOOM) == 0x0F


def test_appearance_scalars():
    doc = new_document()
    doc.set_character_face(2, 11)
    doc.set_character_hairstyle(2, 4)
    doc.set_character_body_width(2, 300)
    doc.set_character_body_height(2, 65535)
    assert doc.character_face(2) == 11
    assert doc.character_hairstyle(2) == 4
    assert doc.character_body_width(2) == 300
    assert doc.character_body_height(2) == 65535


def test_skill_allocation_clamps_and_derives_proficiencies():
    doc = new_document()
    skill = SKILLS[12]
    ids = [p.id for p in skill.proficiencies]

    assert doc.set_character_skill_allocation(1, skill.index, 45) == 45
    assert [doc.character_proficiency(1, i) for i in ids] == [True] * 4 + [False] * 6

    assert doc.set_character_skill_allocation(1, skill.index, 150) == 100
    assert all(doc.character_proficiency(1, i) for i in ids)

    assert doc.set_character_skill_allocation(1, skill.index, 15) == 15
    assert [doc.character_proficiency(1, i) for i in ids] == [True] + [False] * 9

    assert doc.set_character_skill_allocation(1, skill.index, -5) == 0
    assert not any(doc.character_proficiency(1, i) for i in ids)


def test_skill_allocation_leaves_other_skills_alone():
    doc = new_document()
    doc.set_character_skill_allocation(1, 0, 100)
    doc.set_character_skill_allocation(1, 1, 0)
    assert all(doc.character_proficiency(1, p.id) for p in SKILLS[0].proficiencies)


def test_raw_allocation_does_not_touch_proficiencies():
    doc = new_document()
    doc.set_character_skill_allocation_raw(1, 3, 80)
    assert doc.character_skill_allocation(1, 3) == 80
    assert not any(doc.character_proficiency(1, p.id) for p in SKILLS[3].proficiencies)


def test_unallocated_points_clamp():
    doc = new_document()
    assert doc.set_unallocated_skill_points(1, 20000) == 9999
    assert doc.unallocated_skill_points(1) == 9999
    assert doc.set_unallocated_skill_points(1, -1) == 0


def test_vocation():
    doc = new_document()
    doc.set_character_vocation(1, 11)
    assert doc.character_vocation(1) == 11


# ═══════════════════════════════════════════════════════════════════════════════
# EQUIPMENT / HELD ITEMS
# ═══════════════════════════════════════════════════════════════════════════════

def test_equipment_slots():
    doc = new_document()
    assert doc.set_character_equipment(1, ItemCategory.WEAPON, 1025)
    assert doc.set_character_equipment(1, ItemCategory.ACCESSORY, 4608)
    assert doc.character_equipment(1, ItemCategory.WEAPON) == 1025
    assert doc.character_equipment(1, ItemCategory.ACCESSORY) == 4608
    assert doc.character_equipment(1, ItemCategory.SHIELD) == layout.EMPTY_ITEM


def test_equipment_rejects_non_equipment_categories():
    doc = new_document()
    assert doc.character_equipment(1, ItemCategory.COMMON) is None
    assert doc.character_equipment(1, ItemCategory.IMPORTANT) is None
    assert not doc.set_character_equipment(1, ItemCategory.COMMON, 1)


def test_torso_and_head_words_overlap_face_and_hairstyle():
    # Torso sits at +492/+493 and head at +494/+495: face and hairstyle
    # are the low bytes of those two words.
    doc = new_document()
    doc.set_character_equipment(1, ItemCategory.TORSO, 0x0807)
    doc.set_character_equipment(1, ItemCategory.HEAD, 0x0A05)
    assert doc.character_face(1) == 0x07
    assert doc.character_hairstyle(1) == 0x05

    doc.set_character_face(1, 0x02)
    doc.set_character_hairstyle(1, 0x03)
    assert doc.character_equipment(1, ItemCategory.TORSO) == 0x0802
    assert doc.character_equipment(1, ItemCategory.HEAD) == 0x0A03
    assert doc.character_equipment(1, ItemCategory.WEAPON) == layout.EMPTY_ITEM


def test_held_items_only_for_party():
    doc = new_document(standby=1, party=3)
    assert doc.held_item(0, 0) is None
    assert not doc.set_held_item(0, 0, 1)
    assert doc.set_held_item(3, 7, 12)
    assert doc.held_item(3, 7) == 12
    assert doc.held_item(1, 7) == layout.EMPTY_ITEM
    assert doc.held_item(3, 8) is None
    offset = layout.HELD_ITEMS + layout.HELD_ITEM_STRIDE * 2 + 2 * 7
    assert doc.slot.read_u16(offset) == 12


# ═══════════════════════════════════════════════════════════════════════════════
# MONEY / TIME
# ═══════════════════════════════════════════════════════════════════════════════

def test_money_clamps():
    doc = new_document()
    doc.set_gold_on_hand(20_000_000)
    assert doc.gold_on_hand == 9_999_999
    assert doc.set_gold_on_hand(-5) == 0
    assert doc.gold_on_hand == 0
    assert doc.set_gold_in_bank(5 * 10**9) == 1_000_000_000
    assert doc.set_gold_in_bank(-3) == 0
    assert doc.set_mini_medals(77) == 77
    assert doc.mini_medals == 77


def test_playtime():
    doc = new_document()
    assert doc.set_playtime(123, 75, 30) == PlayTime(123, 59, 30)
    assert doc.playtime() == PlayTime(123, 59, 30)
    assert str(doc.playtime()) == "123:59:30"
    doc.set_multiplayer_time(1, 2, 3)
    assert doc.multiplayer_time() == PlayTime(1, 2, 3)
    assert doc.playtime().hours == 123


# ═══════════════════════════════════════════════════════════════════════════════
# WORLD FLAGS
# ═══════════════════════════════════════════════════════════════════════════════

def test_party_tricks():
    doc = new_document()
    assert doc.set_party_trick_learned(0, True)
    assert doc.slot.read_u32(layout.PARTY_TRICKS) == 1 << 2
    assert doc.set_party_trick_learned(14, True)
    assert doc.party_trick_learned(14)
    assert doc.party_trick_learned(15) is None
    assert not doc.set_party_trick_learned(15, True)
    doc.set_party_trick_learned(0, False)
    assert doc.slot.read_u32(layout.PARTY_TRICKS) == 1 << 16


def test_vocation_unlocks():
    doc = new_document()
    assert doc.set_vocation_unlocked(7, True)
    assert doc.slot.read_u16(layout.UNLOCKED_VOCATIONS) == 1 << 6
    assert doc.vocation_unlocked(7)
    assert not doc.vocation_unlocked(8)
    assert not doc.set_vocation_unlocked(0, True)
    assert not doc.vocation_unlocked(0)


def test_visited_locations_use_the_high_bit():
    doc = new_document()
    assert doc.set_visited_location(31, True)
    assert doc.slot.read_u32(layout.VISITED_LOCATIONS) == 0x80000000
    assert doc.visited_location(31)
    doc.set_visited_location(31, False)
    assert doc.slot.read_u32(layout.VISITED_LOCATIONS) == 0


def test_visited_location_toggle_keeps_other_bits():
    doc = new_document()
    doc.slot.write_u32(layout.VISITED_LOCATIONS, 0xA5A5A5A0)
    doc.set_visited_location(3, True)
    assert doc.visited_location(3)
    assert doc.slot.read_u32(layout.VISITED_LOCATIONS) == 0xA5A5A5A8
    doc.set_visited_location(3, False)
    assert not doc.visited_location(3)
    assert doc.slot.read_u32(layout.VISITED_LOCATIONS) == 0xA5A5A5A0


def test_special_guests():
    doc = new_document()
    assert doc.set_special_guest_visiting(0, True)
    assert doc.slot.read_u32(layout.SPECIAL_GUESTS) == 0b10
    assert doc.special_guest_visiting(0)
    assert not doc.special_guest_visiting(1)


def test_canvased_guests():
    doc = new_document()
    assert doc.canvased_guests() == []
    doc.set_canvased_guest_name(3, "Wanderer")
    assert doc.canvased_guest_name(3) == "Wanderer"
    assert doc.canvased_guests() == [(3, "Wanderer")]


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))
