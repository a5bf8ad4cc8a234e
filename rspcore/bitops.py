"""Bit-twiddling helpers for fixed-width integer arithmetic."""

from __future__ import annotations

_U64 = (1 << 64) - 1


def _check_bits(bits: int) -> None:
    if not 1 <= bits <= 64:
        raise ValueError(f"bit width must be between 1 and 64, got {bits}")


def uclamp(bits: int, x: int) -> int:
    """Saturate ``x`` into the unsigned range of ``bits`` bits."""
    _check_bits(bits)
    top = (1 << bits) - 1
    return max(0, min(x, top))


def uclip(bits: int, x: int) -> int:
    """Keep only the low ``bits`` bits of ``x``."""
    _check_bits(bits)
    return x & ((1 << bits) - 1)


def sclamp(bits: int, x: int) -> int:
    """Saturate ``x`` into the signed range of ``bits`` bits."""
    _check_bits(bits)
    half = 1 << (bits - 1)
    return max(-half, min(x, half - 1))


def sclip(bits: int, x: int) -> int:
    """Wrap ``x`` to ``bits`` bits and sign-extend the result."""
    _check_bits(bits)
    sign = 1 << (bits - 1)
    return ((x & ((1 << bits) - 1)) ^ sign) - sign


def _scan_pattern(pattern: str, digit_value: bool) -> int:
    total = 0
    for char in pattern:
        if char in " _":
            continue
        if char in "01":
            total = (total << 1) | (int(char) if digit_value else 1)
        else:
            total <<= 1
    return total & _U64


def pattern_mask(pattern: str) -> int:
    """Mask with a set bit for every fixed ('0' or '1') position of a pattern.

    Spaces and underscores are separators; any other character is a
    wildcard position.
    """
    return _scan_pattern(pattern, digit_value=False)


def pattern_test(pattern: str) -> int:
    """Value of the fixed positions of a pattern; wildcards read as zero."""
    return _scan_pattern(pattern, digit_value=True)


def lowest(x: int) -> int:
    """Isolate the lowest set bit."""
    x &= _U64
    return x & -x & _U64


def clear_lowest(x: int) -> int:
    """Clear the lowest set bit."""
    x &= _U64
    return x & (x - 1) & _U64


def set_lowest(x: int) -> int:
    """Set the lowest clear bit."""
    x &= _U64
    return (x | (x + 1)) & _U64


def count(x: int) -> int:
    """Number of set bits in the low 64 bits of ``x``."""
    return bin(x & _U64).count("1")


def first(x: int) -> int:
    """Index of the lowest set bit, or zero when no bit is set."""
    x &= _U64
    return (x & -x).bit_length() - 1 if x else 0


def last(x: int) -> int:
    """Index of the highest set bit, or zero when no bit is set."""
    x &= _U64
    return x.bit_length() - 1 if x else 0


def round_pow2(x: int) -> int:
    """Round up to the next power of two (wrapping at 64 bits)."""
    x &= _U64
    if x & (x - 1) == 0:
        return x
    return (1 << x.bit_length()) & _U64


def reverse(x: int, width: int) -> int:
    """Reverse the order of the low ``width`` bits (8, 16, 32 or 64)."""
    if width not in (8, 16, 32, 64):
        raise ValueError(f"unsupported width {width}; expected 8, 16, 32 or 64")
    value = x & ((1 << width) - 1)
    return int(f"{value:0{width}b}"[::-1], 2)