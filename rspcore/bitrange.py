"""Mutable registers with writable views onto bit fields."""

from __future__ import annotations

from typing import Optional, Union

from rspcore.integers import wrap_unsigned

_Operand = Union[int, "BitRange", "Register"]


class Register:
    """A mutable unsigned value of 1 to 64 bits; stores wrap to the width."""

    __slots__ = ("_bits", "_value")

    def __init__(self, bits: int, value: int = 0) -> None:
        self._bits = bits
        self._value = wrap_unsigned(bits, int(value))

    @property
    def bits(self) -> int:
        return self._bits

    def _store(self, value: int) -> None:
        self._value = wrap_unsigned(self._bits, value)

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (int, Register, BitRange)):
            return self._value == int(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Register({self._bits}, {self._value:#x})"

    def bit(self, lo: int, hi: Optional[int] = None) -> "BitRange":
        """View of bits ``lo``..``hi`` (a single bit if ``hi`` is omitted)."""
        return BitRange(self, lo, hi)

    def byte(self, index: int) -> "BitRange":
        """View of byte ``index`` (0 is the least significant)."""
        return BitRange(self, index * 8, index * 8 + 7)


class BitRange:
    """A live view of a contiguous bit field inside a :class:`Register`.

    Reading gives the field's unsigned value; every update rewrites only the
    field's bits, wrapping the result to the field's width.
    """

    __slots__ = ("_register", "_shift", "_mask", "_width")

    def __init__(self, register: Register, lo: int, hi: Optional[int] = None) -> None:
        bits = register.bits
        if hi is None:
            hi = lo
        if lo < 0:
            lo += bits
        if hi < 0:
            hi += bits
        if lo > hi:
            lo, hi = hi, lo
        if lo < 0 or hi >= bits:
            raise ValueError(f"bit range {lo}..{hi} outside a {bits}-bit register")
        self._register = register
        self._shift = lo
        self._width = hi - lo + 1
        self._mask = ((1 << self._width) - 1) << lo

    @property
    def width(self) -> int:
        return self._width

    @property
    def _field(self) -> int:
        return (self._register._value & self._mask) >> self._shift

    def _merge(self, value: int) -> None:
        target = self._register._value
        self._register._store((target & ~self._mask) | ((value << self._shift) & self._mask))

    def __int__(self) -> int:
        return self._field

    def __index__(self) -> int:
        return self._field

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (int, Register, BitRange)):
            return self._field == int(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        hi = self._shift + self._width - 1
        return f"BitRange({self._shift}..{hi}, {self._field:#x})"

    def set(self, value: _Operand) -> "BitRange":
        """Store ``value`` into the field, keeping its low bits."""
        self._merge(int(value))
        return self

    def increment(self) -> int:
        """Add one to the field, wrapping within it; return the old value."""
        old = self._field
        self._merge(old + 1)
        return old

    def decrement(self) -> int:
        """Subtract one from the field, wrapping within it; return the old value."""
        old = self._field
        self._merge(old - 1)
        return old

    def __iadd__(self, other: _Operand) -> "BitRange":
        self._merge(self._field + int(other))
        return self

    def __isub__(self, other: _Operand) -> "BitRange":
        self._merge(self._field - int(other))
        return self

    def __imul__(self, other: _Operand) -> "BitRange":
        self._merge(self._field * int(other))
        return self

    def __ifloordiv__(self, other: _Operand) -> "BitRange":
        self._merge(self._field // int(other))
        return self

    def __imod__(self, other: _Operand) -> "BitRange":
        self._merge(self._field % int(other))
        return self

    def __ilshift__(self, other: _Operand) -> "BitRange":
        self._merge(self._field << int(other))
        return self

    def __irshift__(self, other: _Operand) -> "BitRange":
        self._merge(self._field >> int(other))
        return self

    def __iand__(self, other: _Operand) -> "BitRange":
        target = self._register._value
        kept = ~self._mask | ((int(other) << self._shift) & self._mask)
        self._register._store(target & kept)
        return self

    def __ior__(self, other: _Operand) -> "BitRange":
        target = self._register._value
        self._register._store(target | ((int(other) << self._shift) & self._mask))
        return self

    def __ixor__(self, other: _Operand) -> "BitRange":
        target = self._register._value
        self._register._store(target ^ ((int(other) << self._shift) & self._mask))
        return self

    def copy_from(self, other: "BitRange") -> "BitRange":
        """Copy the value of another field into this one."""
        self._merge(int(other))
        return self