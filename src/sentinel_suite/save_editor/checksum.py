"""
Slot checksums.

Each slot carries two CRC-32 values stored as little-endian 32-bit fields.
The game writes them as signed integers; here both sides of every comparison
are unsigned bit patterns so the sign never matters.
"""

import logging
import zlib
from typing import Tuple

from ..utils.binary import ByteView
from . import layout

logger = logging.getLogger(__name__)


def compute(region: bytes) -> int:
    """CRC-32 (reflected 0xEDB88320, seed 0) as an unsigned 32-bit value."""
    return zlib.crc32(region, 0) & 0xFFFFFFFF


def computed_checksums(slot: ByteView) -> Tuple[int, int]:
    """Fresh checksum A and B for a slot view."""
    a_start, a_end = layout.CHECKSUM_A_RANGE
    b_start, b_end = layout.CHECKSUM_B_RANGE
    return (
        compute(slot.read_bytes(a_start, a_end - a_start)),
        compute(slot.read_bytes(b_start, b_end - b_start)),
    )


def stored_checksums(slot: ByteView) -> Tuple[int, int]:
    """Checksum A and B as currently written in the slot."""
    return (
        slot.read_u32(layout.CHECKSUM_A_OFFSET),
        slot.read_u32(layout.CHECKSUM_B_OFFSET),
    )


def validate_slot(slot: ByteView) -> bool:
    """True when both stored checksums match the slot contents."""
    stored = stored_checksums(slot)
    computed = computed_checksums(slot)
    if stored != computed:
        logger.info(
            f"Checksum mismatch: stored A=0x{stored[0]:08X} B=0x{stored[1]:08X}, "
            f"computed A=0x{computed[0]:08X} B=0x{computed[1]:08X}"
        )
        return False
    return True


def refresh_slot(slot: ByteView) -> Tuple[int, int]:
    """Recompute both checksums and write them into the slot."""
    a, b = computed_checksums(slot)
    slot.write_u32(layout.CHECKSUM_A_OFFSET, a)
    slot.write_u32(layout.CHECKSUM_B_OFFSET, b)
    logger.debug(f"Refreshed checksums A=0x{a:08X} B=0x{b:08X}")
    return a, b
