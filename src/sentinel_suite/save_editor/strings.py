"""
Fixed-width name codec.

Names are stored as one byte per character through a lookup table, padded
with 0x00 to the field width. The table holds the Latin characters offered
by the name entry screen; anything else is written as '?'.

The table is a reconstruction, not the retail cartridge encoding. Names read
from real saves can decode partly or wholly to '?', and writing such a name
back stores the '?' code.
"""

from typing import Dict

from .layout import NAME_LENGTH

PAD = 0x00
UNKNOWN_CHAR = "?"

# Byte value -> character. 0x00 is padding and never maps to text.
_DIGITS = "0123456789"
_UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_LOWER = "abcdefghijklmnopqrstuvwxyz"
_PUNCTUATION = " !?.,'-&/:;\"()+*#%~"
_ACCENTED = "ÀÁÂÄÇÈÉÊËÌÍÎÏÑÒÓÔÖÙÚÛÜßàáâäçèéêëìíîïñòóôöùúûü"

CHARACTER_TABLE: Dict[int, str] = {
    code: char
    for code, char in enumerate(_DIGITS + _UPPER + _LOWER + _PUNCTUATION + _ACCENTED, start=1)
}

_ENCODE_TABLE: Dict[str, int] = {char: code for code, char in CHARACTER_TABLE.items()}


class StringCodec:
    """Encode/decode fixed-width names."""

    def __init__(self, width: int = NAME_LENGTH):
        self.width = width

    def decode(self, data: bytes) -> str:
        """Decode bytes up to the first pad byte; unmapped bytes become '?'."""
        chars = []
        for code in data:
            if code == PAD:
                break
            chars.append(CHARACTER_TABLE.get(code, UNKNOWN_CHAR))
        return "".join(chars)

    def encode(self, text: str) -> bytes:
        """Encode, truncate to the field width and right-pad with 0x00."""
        unknown = _ENCODE_TABLE[UNKNOWN_CHAR]
        encoded = bytes(_ENCODE_TABLE.get(char, unknown) for char in text[:self.width])
        return encoded.ljust(self.width, bytes([PAD]))

    @staticmethod
    def is_encodable(text: str) -> bool:
        """True when every character round-trips."""
        return all(char in _ENCODE_TABLE for char in text)


NAME_CODEC = StringCodec()
