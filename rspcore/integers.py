"""Fixed-width unsigned and signed integer value types."""

from __future__ import annotations

from typing import Optional, Union


def _check_bits(bits: int) -> None:
    if not 1 <= bits <= 64:
        raise ValueError(f"bit width must be between 1 and 64, got {bits}")


def wrap_unsigned(bits: int, value: int) -> int:
    """Reduce ``value`` modulo 2**bits."""
    _check_bits(bits)
    return value & ((1 << bits) - 1)


def wrap_signed(bits: int, value: int) -> int:
    """Reduce ``value`` to the two's-complement range of ``bits`` bits."""
    _check_bits(bits)
    sign = 1 << (bits - 1)
    return ((value & ((1 << bits) - 1)) ^ sign) - sign


_Operand = Union[int, "_FixedWidth"]


class _FixedWidth:
    """Shared behaviour of the fixed-width value types."""

    __slots__ = ("_bits", "_value")

    def __init__(self, bits: int, value: _Operand = 0) -> None:
        _check_bits(bits)
        self._bits = bits
        self._value = self._wrap(bits, int(value))

    @staticmethod
    def _wrap(bits: int, value: int) -> int:
        return value

    @property
    def bits(self) -> int:
        return self._bits

    def _new(self, value: int):
        return type(self)(self._bits, value)

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._bits}, {self._value})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (int, _FixedWidth)):
            return self._value == int(other)
        return NotImplemented

    def _field(self, lo: int, hi: Optional[int]) -> tuple[int, int]:
        if hi is None:
            hi = lo
        if lo < 0:
            lo += self._bits
        if hi < 0:
            hi += self._bits
        if lo > hi:
            lo, hi = hi, lo
        if lo < 0 or hi >= self._bits:
            raise ValueError(f"bit range {lo}..{hi} outside a {self._bits}-bit value")
        return lo, ((1 << (hi - lo + 1)) - 1) << lo

    def bit(self, lo: int, hi: Optional[int] = None) -> int:
        """Unsigned value of bits ``lo``..``hi`` (a single bit if ``hi`` is omitted).

        Negative indices count from the top; the ends may be given in either order.
        """
        shift, field = self._field(lo, hi)
        return (self._value & field) >> shift

    def byte(self, index: int) -> int:
        """Unsigned value of byte ``index`` (0 is the least significant)."""
        return self.bit(index * 8, index * 8 + 7)

    def replace_bits(self, lo: int, hi: Optional[int], value: int):
        """Return a copy with bits ``lo``..``hi`` set to ``value``."""
        shift, field = self._field(lo, hi)
        merged = (self._value & ~field) | ((int(value) << shift) & field)
        return self._new(merged)

    def mask(self, lo: int, hi: Optional[int] = None) -> int:
        """Keep bits ``lo``..``hi`` in place and clear the others."""
        if hi is None:
            return self._value & (1 << lo)
        return self._value & (((1 << (hi - lo + 1)) - 1) << lo)


class Natural(_FixedWidth):
    """Unsigned integer of 1 to 64 bits; arithmetic wraps modulo 2**bits."""

    __slots__ = ()

    def __init__(self, bits: int, value: _Operand = 0) -> None:
        super().__init__(bits, value)

    @staticmethod
    def _wrap(bits: int, value: int) -> int:
        return wrap_unsigned(bits, value)

    def __int__(self) -> int:
        return self._value

    def __eq__(self, other: object) -> bool:
        return super().__eq__(other)

    __hash__ = _FixedWidth.__hash__

    def __add__(self, other: _Operand) -> "Natural":
        return self._new(self._value + int(other))

    def __sub__(self, other: _Operand) -> "Natural":
        return self._new(self._value - int(other))

    def __mul__(self, other: _Operand) -> "Natural":
        return self._new(self._value * int(other))

    def __and__(self, other: _Operand) -> "Natural":
        return self._new(self._value & int(other))

    def __or__(self, other: _Operand) -> "Natural":
        return self._new(self._value | int(other))

    def __xor__(self, other: _Operand) -> "Natural":
        return self._new(self._value ^ int(other))

    def __lshift__(self, other: _Operand) -> "Natural":
        return self._new(self._value << int(other))

    def __rshift__(self, other: _Operand) -> "Natural":
        return self._new(self._value >> int(other))

    def bit(self, lo: int, hi: Optional[int] = None) -> int:
        """Unsigned value of bits ``lo``..``hi`` (a single bit if ``hi`` is omitted)."""
        return super().bit(lo, hi)

    def byte(self, index: int) -> int:
        """Unsigned value of byte ``index`` (0 is the least significant)."""
        return super().byte(index)

    def replace_bits(self, lo: int, hi: Optional[int], value: int) -> "Natural":
        """Return a copy with bits ``lo``..``hi`` set to ``value``."""
        return super().replace_bits(lo, hi, value)

    def mask(self, lo: int, hi: Optional[int] = None) -> int:
        """Keep bits ``lo``..``hi`` in place and clear the others."""
        return super().mask(lo, hi)

    def clip(self, bits: int) -> int:
        """Low ``bits`` bits of the value."""
        _check_bits(bits)
        return self._value & ((1 << bits) - 1)

    @staticmethod
    def clamp(bits: int, value: int) -> int:
        """Saturate ``value`` to the largest ``bits``-bit unsigned number."""
        _check_bits(bits)
        top = (1 << bits) - 1
        return value if value < top else top


class Integer(_FixedWidth):
    """Two's-complement signed integer of 1 to 64 bits."""

    __slots__ = ()

    def __init__(self, bits: int, value: _Operand = 0) -> None:
        super().__init__(bits, value)

    @staticmethod
    def _wrap(bits: int, value: int) -> int:
        return wrap_signed(bits, value)

    def __int__(self) -> int:
        return self._value

    def __eq__(self, other: object) -> bool:
        return super().__eq__(other)

    __hash__ = _FixedWidth.__hash__

    def __add__(self, other: _Operand) -> "Integer":
        return self._new(self._value + int(other))

    def __sub__(self, other: _Operand) -> "Integer":
        return self._new(self._value - int(other))

    def __mul__(self, other: _Operand) -> "Integer":
        return self._new(self._value * int(other))

    def __and__(self, other: _Operand) -> "Integer":
        return self._new(self._value & int(other))

    def __or__(self, other: _Operand) -> "Integer":
        return self._new(self._value | int(other))

    def __xor__(self, other: _Operand) -> "Integer":
        return self._new(self._value ^ int(other))

    def __lshift__(self, other: _Operand) -> "Integer":
        return self._new(self._value << int(other))

    def __rshift__(self, other: _Operand) -> "Integer":
        return self._new(self._value >> int(other))

    def bit(self, lo: int, hi: Optional[int] = None) -> int:
        """Unsigned value of bits ``lo``..``hi`` (a single bit if ``hi`` is omitted)."""
        return super().bit(lo, hi)

    def byte(self, index: int) -> int:
        """Unsigned value of byte ``index`` (0 is the least significant)."""
        return super().byte(index)

    def replace_bits(self, lo: int, hi: Optional[int], value: int) -> "Integer":
        """Return a copy with bits ``lo``..``hi`` set to ``value``."""
        return super().replace_bits(lo, hi, value)

    def mask(self, lo: int, hi: Optional[int] = None) -> int:
        """Keep bits ``lo``..``hi`` in place and clear the others."""
        return super().mask(lo, hi)

    def clip(self, bits: int) -> int:
        """Low ``bits`` bits of the value, sign-extended."""
        _check_bits(bits)
        sign = 1 << (bits - 1)
        return ((self._value & ((1 << bits) - 1)) ^ sign) - sign

    @staticmethod
    def clamp(bits: int, value: int) -> int:
        """Saturate ``value`` into the signed ``bits``-bit range."""
        _check_bits(bits)
        half = 1 << (bits - 1)
        return max(-half, min(value, half - 1))

    def natural(self) -> Natural:
        """The same bit pattern read as unsigned."""
        return Natural(self._bits, self._value)