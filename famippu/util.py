"""Small bit-twiddling helpers shared by the PPU and memory code."""

from __future__ import annotations


def get_bit(byte: int, bit: int) -> bool:
    """Return whether ``bit`` (0 = least significant) is set in an 8-bit value."""
    return (byte & (1 << bit) & 0xFF) != 0


def get_bit_u16(value: int, bit: int) -> bool:
    """Return whether ``bit`` is set in a 16-bit value."""
    return (value & (1 << bit) & 0xFFFF) != 0


def concat_u8(msb: int, lsb: int) -> int:
    """Join two bytes into a 16-bit word, ``msb`` in the high byte."""
    return (((msb & 0xFF) << 8) + (lsb & 0xFF)) & 0xFFFF


def is_neg(val: int) -> bool:
    """Return whether a byte is negative when read as two's complement."""
    return (val & 0xFF) > 0x7F


def flip_byte(val: int) -> int:
    """Reverse the order of the bits in a byte."""
    val &= 0xFF
    result = 0
    for bit in range(8):
        if val & (1 << bit):
            result |= 1 << (7 - bit)
    return result


def to_mask(flag: bool) -> int:
    """Return 0xFF for a true flag and 0x00 for a false one."""
    # (flag - 1) is 0 for true and 0xFF (wrapped) for false; inverting gives the mask.
    wrapped = (int(bool(flag)) - 1) & 0xFF
    return ~wrapped & 0xFF