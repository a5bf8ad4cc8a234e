"""Clocked threads and the register-window devices of the signal processor's bus."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rspcore.memory import AccessSize

_U32 = 0xFFFFFFFF


class Thread:
    """A unit of emulated hardware that keeps its own clock count."""

    def __init__(self) -> None:
        self.clock = 0

    def reset(self) -> None:
        """Set the clock back to zero."""
        self.clock = 0

    def step(self, clocks: int) -> None:
        """Advance the clock by ``clocks`` cycles."""
        self.clock += clocks


class RcpDevice(ABC):
    """A device inside the coprocessor, reached through 32-bit register reads and writes.

    Narrow accesses are routed to the word holding them: a byte or half-word
    read returns the word shifted so the addressed lane is lowest (the upper
    bits are left for the caller to drop), and a narrow write passes the
    value shifted into its lane. A dual-word write stores only the upper word.
    """

    DEFAULT_READ_CYCLES = 20
    DEFAULT_WRITE_CYCLES = 0

    @abstractmethod
    def read_word(self, address: int, thread: Thread) -> int:
        """Read the 32-bit register at ``address``."""

    @abstractmethod
    def write_word(self, address: int, data: int, thread: Thread) -> None:
        """Write the 32-bit register at ``address``."""

    def read(self, size: int, address: int, thread: Thread) -> int:
        size = AccessSize(size)
        thread.step(self.DEFAULT_READ_CYCLES * 2)
        if size is AccessSize.BYTE:
            data = self.read_word(address, thread)
            return data >> (8 * (3 - (address & 3)))
        if size is AccessSize.HALF:
            data = self.read_word(address, thread)
            return data >> (0 if address & 2 else 16)
        if size is AccessSize.WORD:
            return self.read_word(address, thread)
        upper = self.read_word(address, thread)
        return upper << 32 | self.read_word((address + 4) & _U32, thread)

    def write(self, size: int, address: int, data: int, thread: Thread) -> None:
        size = AccessSize(size)
        thread.step(self.DEFAULT_WRITE_CYCLES * 2)
        data = int(data)
        if size is AccessSize.BYTE:
            shifted = data << (8 * (3 - (address & 3)))
        elif size is AccessSize.HALF:
            shifted = data << (0 if address & 2 else 16)
        elif size is AccessSize.WORD:
            shifted = data
        else:
            shifted = data >> 32
        self.write_word(address, shifted & _U32, thread)


class PiDevice(ABC):
    """A device behind the parallel interface, which carries 16- and 32-bit accesses only."""

    @abstractmethod
    def read_half(self, address: int) -> int:
        """Read 16 bits at ``address``."""

    @abstractmethod
    def read_word(self, address: int) -> int:
        """Read 32 bits at ``address``."""

    @abstractmethod
    def write_half(self, address: int, data: int) -> None:
        """Write 16 bits at ``address``."""

    @abstractmethod
    def write_word(self, address: int, data: int) -> None:
        """Write 32 bits at ``address``."""

    @staticmethod
    def _checked(size: int) -> AccessSize:
        size = AccessSize(size)
        if size not in (AccessSize.HALF, AccessSize.WORD):
            raise ValueError(f"the parallel interface carries half or word accesses, not {size.name}")
        return size

    def read(self, size: int, address: int) -> int:
        if self._checked(size) is AccessSize.HALF:
            return self.read_half(address)
        return self.read_word(address)

    def write(self, size: int, address: int, data: int) -> None:
        if self._checked(size) is AccessSize.HALF:
            self.write_half(address, data)
        else:
            self.write_word(address, data)


class SiDevice(ABC):
    """A device behind the serial interface, which carries 32-bit accesses only."""

    @abstractmethod
    def read_word(self, address: int) -> int:
        """Read 32 bits at ``address``."""

    @abstractmethod
    def write_word(self, address: int, data: int) -> None:
        """Write 32 bits at ``address``."""

    @staticmethod
    def _check(size: int) -> None:
        size = AccessSize(size)
        if size is not AccessSize.WORD:
            raise ValueError(f"the serial interface carries word accesses only, not {size.name}")

    def read(self, size: int, address: int) -> int:
        self._check(size)
        return self.read_word(address)

    def write(self, size: int, address: int, data: int) -> None:
        self._check(size)
        self.write_word(address, data)