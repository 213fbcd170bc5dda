"""
Sentinel Suite - checksum tests

Can be run standalone: python test_checksum.py
Or via main runner: python tests.py
"""

import pytest

from save_fixtures import new_document
from sentinel_suite.save_editor import checksum, layout


def test_crc_check_value():
    # Standard CRC-32 check value
    assert checksum.compute(b"123456789") == 0xCBF43926
    assert checksum.compute(b"") == 0


def test_refresh_then_validate():
    doc = new_document()
    slot = doc.slot_view(1)
    slot.write_u32(layout.CHECKSUM_A_OFFSET, 0)
    assert not checksum.validate_slot(slot)
    a, b = checksum.refresh_slot(slot)
    assert checksum.stored_checksums(slot) == (a, b)
    assert checksum.validate_slot(slot)


def test_each_range_is_covered():
    doc = new_document()
    slot = doc.slot_view(0)
    a_start, _ = layout.CHECKSUM_A_RANGE
    b_start, b_end = layout.CHECKSUM_B_RANGE

    slot.write_u8(a_start, slot.read_u8(a_start) ^ 0xFF)
    assert not checksum.validate_slot(slot)
    checksum.refresh_slot(slot)

    slot.write_u8(b_end - 1, slot.read_u8(b_end - 1) ^ 0x01)
    assert not checksum.validate_slot(slot)
    checksum.refresh_slot(slot)
    assert checksum.validate_slot(slot)


def test_bytes_outside_ranges_do_not_matter():
    doc = new_document()
    slot = doc.slot_view(0)
    _, b_end = layout.CHECKSUM_B_RANGE
    slot.write_u8(b_end, 0x55)
    slot.write_u8(layout.SLOT_SIZE - 1, 0xAA)
    assert checksum.validate_slot(slot)


def test_range_boundaries():
    a_start, a_end = layout.CHECKSUM_A_RANGE
    b_start, b_end = layout.CHECKSUM_B_RANGE
    inside = (a_start, a_end - 1, b_start, b_end - 1)
    outside = (a_end, layout.CHECKSUM_B_OFFSET - 1, b_end, layout.SLOT_SIZE - 1)
    for index in range(layout.SLOT_COUNT):
        for offset in inside:
            doc = new_document()
            slot = doc.slot_view(index)
            slot.write_u8(offset, slot.read_u8(offset) ^ 0x01)
            assert not doc.validate(), f"slot {index} offset {offset}"
        for offset in outside:
            doc = new_document()
            slot = doc.slot_view(index)
            slot.write_u8(offset, slot.read_u8(offset) ^ 0x01)
            assert doc.validate(), f"slot {index} offset {offset}"


def test_high_bit_values_compare_unsigned():
    doc = new_document()
    slot = doc.slot_view(0)
    # Find a byte for range A that gives a checksum with the top bit set
    for value in range(256):
        slot.write_u8(20, value)
        a, _ = checksum.refresh_slot(slot)
        if a & 0x80000000:
            break
    assert a & 0x80000000
    assert slot.read_i32(layout.CHECKSUM_A_OFFSET) < 0
    assert checksum.validate_slot(slot)


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))
