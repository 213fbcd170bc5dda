"""Shared low-level helpers."""

from .binary import ByteOrder, ByteView, OutOfRangeError

__all__ = ['ByteOrder', 'ByteView', 'OutOfRangeError']
