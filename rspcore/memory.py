"""Word-addressed memory banks with a big-endian view."""

from __future__ import annotations

from enum import IntEnum
from typing import BinaryIO, Optional

from rspcore.bitops import round_pow2

_U32 = 0xFFFFFFFF
FILL_DEFAULT = _U32


class AccessSize(IntEnum):
    """Width of a memory access in bytes."""

    BYTE = 1
    HALF = 2
    WORD = 4
    DUAL = 8


_UNALIGNED_SIZES = (AccessSize.HALF, AccessSize.WORD, AccessSize.DUAL)


def _unaligned_size(size: int) -> AccessSize:
    size = AccessSize(size)
    if size not in _UNALIGNED_SIZES:
        raise ValueError(f"unaligned access must be half, word or dual, not {size.name}")
    return size


def _truncate(size: AccessSize, value: int) -> int:
    return int(value) & ((1 << (8 * size)) - 1)


class _Bank:
    """Geometry and byte-wise access shared by the memory banks."""

    def __init__(self) -> None:
        self.size = 0
        self._clear_masks()

    def _clear_masks(self) -> None:
        self.size = 0
        self._mask_byte = 0
        self._mask_half = 0
        self._mask_word = 0
        self._mask_dual = 0

    @staticmethod
    def _geometry(capacity: int) -> tuple[int, int]:
        size = int(capacity) & ~7
        if size <= 0:
            raise ValueError(f"capacity must be at least 8 bytes, got {capacity}")
        return size, round_pow2(size) - 1

    def _apply(self, size: int, mask: int) -> None:
        self.size = size
        self._mask_byte = mask
        self._mask_half = mask & ~1
        self._mask_word = mask & ~3
        self._mask_dual = mask & ~7

    def _buffer(self) -> bytearray:
        raise RuntimeError("memory bank has no storage")

    def _mask_for(self, size: AccessSize) -> int:
        return {
            AccessSize.BYTE: self._mask_byte,
            AccessSize.HALF: self._mask_half,
            AccessSize.WORD: self._mask_word,
            AccessSize.DUAL: self._mask_dual,
        }[size]

    def _load(self, position: int, length: int) -> int:
        return int.from_bytes(self._buffer()[position:position + length], "big")

    def _store(self, position: int, length: int, value: int) -> None:
        self._buffer()[position:position + length] = value.to_bytes(length, "big")

    def _fill(self, value: int) -> None:
        buffer = self._buffer()
        buffer[:self.size] = (int(value) & _U32).to_bytes(4, "big") * (self.size // 4)

    def _read_unaligned(self, size: int, address: int) -> int:
        size = _unaligned_size(size)
        buffer = self._buffer()
        address &= _U32
        chunk = bytes(buffer[(address + offset) & self._mask_byte] for offset in range(size))
        return int.from_bytes(chunk, "big")

    def _write_unaligned(self, size: int, address: int, value: int) -> None:
        size = _unaligned_size(size)
        buffer = self._buffer()
        address &= _U32
        for offset, byte in enumerate(_truncate(size, value).to_bytes(size, "big")):
            buffer[(address + offset) & self._mask_byte] = byte


class Writable(_Bank):
    """A read/write bank of at most 4 KiB.

    Accesses are aligned to their size and wrap at the bank's power-of-two
    extent; a dual-word access is two word accesses at ``address`` and
    ``address + 4``.
    """

    STORAGE = 4 * 1024

    def __init__(self, capacity: int = 0, fill_with: int = FILL_DEFAULT) -> None:
        super().__init__()
        self._data = bytearray(self.STORAGE)
        if capacity:
            self.allocate(capacity, fill_with)

    def _buffer(self) -> bytearray:
        return self._data

    def __bool__(self) -> bool:
        return self.size > 0

    def reset(self) -> None:
        """Forget the bank's geometry; the storage itself is kept."""
        self._clear_masks()

    def allocate(self, capacity: int, fill_with: int = FILL_DEFAULT) -> None:
        """Size the bank to ``capacity`` (rounded down to 8 bytes) and fill it."""
        size, mask = self._geometry(capacity)
        if mask + 1 > len(self._data):
            raise ValueError(f"capacity {capacity} exceeds {len(self._data)} bytes of storage")
        self.reset()
        self._apply(size, mask)
        self.fill(fill_with)

    def fill(self, value: int = 0) -> None:
        """Set every word of the bank to ``value``."""
        self._fill(value)

    def read(self, size: int, address: int) -> int:
        size = AccessSize(size)
        address &= _U32
        if size is AccessSize.DUAL:
            upper = self._load(address & self._mask_word, 4)
            lower = self._load((address + 4) & self._mask_word, 4)
            return upper << 32 | lower
        return self._load(address & self._mask_for(size), size)

    def write(self, size: int, address: int, value: int) -> None:
        size = AccessSize(size)
        address &= _U32
        value = _truncate(size, value)
        if size is AccessSize.DUAL:
            self._store(address & self._mask_word, 4, value >> 32)
            self._store((address + 4) & self._mask_word, 4, value & _U32)
            return
        self._store(address & self._mask_for(size), size, value)

    def read_unaligned(self, size: int, address: int) -> int:
        """Read 2, 4 or 8 bytes starting at any byte address, most significant first."""
        return self._read_unaligned(size, address)

    def write_unaligned(self, size: int, address: int, value: int) -> None:
        """Write 2, 4 or 8 bytes starting at any byte address, most significant first."""
        self._write_unaligned(size, address, value)


class Readable(Writable):
    """A bank whose contents are set only by filling; writes are ignored."""

    def write(self, size: int, address: int, value: int) -> None:
        AccessSize(size)

    def write_unaligned(self, size: int, address: int, value: int) -> None:
        _unaligned_size(size)


class Writable16(Writable):
    """A bank reached over a 16-bit bus: wide accesses split into half-words."""

    def read(self, size: int, address: int) -> int:
        size = AccessSize(size)
        if size is AccessSize.DUAL:
            return self.read(AccessSize.WORD, address) << 32 | self.read(AccessSize.WORD, address + 4)
        if size is AccessSize.WORD:
            return self.read(AccessSize.HALF, address) << 16 | self.read(AccessSize.HALF, address + 2)
        return Writable.read(self, size, address)

    def write(self, size: int, address: int, value: int) -> None:
        size = AccessSize(size)
        value = _truncate(size, value)
        if size is AccessSize.DUAL:
            self.write(AccessSize.WORD, address, value >> 32)
            self.write(AccessSize.WORD, address + 4, value)
            return
        if size is AccessSize.WORD:
            self.write(AccessSize.HALF, address, value >> 16)
            self.write(AccessSize.HALF, address + 2, value)
            return
        Writable.write(self, size, address, value)


class Readable16(Readable):
    """A read-only bank reached over a 16-bit bus."""

    def read(self, size: int, address: int) -> int:
        size = AccessSize(size)
        if size is AccessSize.DUAL:
            return self.read(AccessSize.WORD, address) << 32 | self.read(AccessSize.WORD, address + 4)
        if size is AccessSize.WORD:
            return self.read(AccessSize.HALF, address) << 16 | self.read(AccessSize.HALF, address + 2)
        return Writable.read(self, size, address)


class MsbWritable(_Bank):
    """A read/write bank of any size with natively aligned accesses.

    Unlike :class:`Writable`, a dual-word access is aligned to 8 bytes. The
    bank holds no storage until it is allocated.
    """

    def __init__(self, capacity: int = 0, fill_with: int = FILL_DEFAULT) -> None:
        super().__init__()
        self._data: Optional[bytearray] = None
        if capacity:
            self.allocate(capacity, fill_with)

    def _buffer(self) -> bytearray:
        if self._data is None:
            raise RuntimeError("memory bank is not allocated")
        return self._data

    def __bool__(self) -> bool:
        return self.size > 0

    def reset(self) -> None:
        """Release the storage and forget the geometry."""
        self._data = None
        self._clear_masks()

    def allocate(self, capacity: int, fill_with: int = FILL_DEFAULT) -> None:
        """Size the bank to ``capacity`` (rounded down to 8 bytes) and fill it."""
        size, mask = self._geometry(capacity)
        self.reset()
        self._apply(size, mask)
        self._data = bytearray(mask + 1)
        self.fill(fill_with)

    def fill(self, value: int = 0) -> None:
        """Set every word of the bank to ``value``."""
        self._fill(value)

    def load(self, stream: BinaryIO) -> None:
        """Copy words from a binary stream; allocate to its size if needed."""
        content = stream.read()
        if not self.size:
            self.allocate(len(content))
        buffer = self._buffer()
        for address in range(0, min(self.size, len(content)), 4):
            position = address & self._mask_word
            buffer[position:position + 4] = content[address:address + 4].ljust(4, b"\0")

    def save(self, stream: BinaryIO) -> None:
        """Write the bank's contents to a binary stream."""
        stream.write(bytes(self._buffer()[:self.size]))

    def read(self, size: int, address: int) -> int:
        size = AccessSize(size)
        return self._load((address & _U32) & self._mask_for(size), size)

    def write(self, size: int, address: int, value: int) -> None:
        size = AccessSize(size)
        self._store((address & _U32) & self._mask_for(size), size, _truncate(size, value))

    def read_unaligned(self, size: int, address: int) -> int:
        """Read 2, 4 or 8 bytes starting at any byte address, most significant first."""
        return self._read_unaligned(size, address)

    def write_unaligned(self, size: int, address: int, value: int) -> None:
        """Write 2, 4 or 8 bytes starting at any byte address, most significant first."""
        self._write_unaligned(size, address, value)


class MsbReadable(MsbWritable):
    """A natively aligned bank filled by loading; writes are ignored."""

    def write(self, size: int, address: int, value: int) -> None:
        AccessSize(size)

    def write_unaligned(self, size: int, address: int, value: int) -> None:
        _unaligned_size(size)