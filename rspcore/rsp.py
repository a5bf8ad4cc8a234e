"""The signal processor's machine state: registers, memories and issue bookkeeping."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from math import isqrt
from typing import Sequence

from rspcore.memory import Writable
from rspcore.pipeline import Branch, BranchState, Pipeline
from rspcore.rcp import Thread

_U16 = 0xFFFF
_U32 = 0xFFFFFFFF
_U64 = (1 << 64) - 1
_U128 = (1 << 128) - 1

MEMORY_SIZE = 4 * 1024
ADDR_TABLE = 0x1E8

RSPQ_COMMANDS: tuple[str, ...] = (
    "INVALID",
    "NOOP",
    "JUMP",
    "CALL",
    "RET",
    "DMA",
    "WRITE_STATUS",
    "SWAP_BUFFERS",
    "TEST_WRITE_STATUS",
    "RDP_WAIT_IDLE",
    "RDP_SET_BUFFER",
    "RDP_APPEND_BUFFER",
    "??",
    "??",
    "??",
    "??",
)

T3D_COMMANDS: tuple[str, ...] = (
    "TRI_DRAW",
    "SCREEN_SIZE",
    "MATRIX_STACK",
    "SET_WORD",
    "VERT_LOAD",
    "LIGHT_SET",
    "DRAWFLAGS",
    "PROJ_SET",
    "FOG_RANGE",
    "FOG_STATE",
    "TRI_SYNC",
    "TRI_STRIP",
    "??",
    "??",
    "??",
    "??",
)


def command_name(table: Sequence[str], index: int) -> str:
    """Name of command ``index`` in a command table."""
    if not 0 <= index < len(table):
        raise ValueError(f"command index {index} outside a table of {len(table)} entries")
    return table[index]


class Vector128:
    """A 128-bit vector register, addressed as 16 bytes or 8 half-word lanes.

    Lane 0 is the most significant byte or half-word.
    """

    __slots__ = ("_value",)

    def __init__(self, hi: int = 0, lo: int = 0) -> None:
        self._value = ((int(hi) & _U64) << 64) | (int(lo) & _U64)

    @property
    def hi(self) -> int:
        return self._value >> 64

    @property
    def lo(self) -> int:
        return self._value & _U64

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Vector128):
            return self._value == other._value
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Vector128({self.hi:#018x}, {self.lo:#018x})"

    @staticmethod
    def _check(index: int, lanes: int) -> None:
        if not 0 <= index < lanes:
            raise IndexError(f"lane {index} outside 0..{lanes - 1}")

    def byte(self, index: int) -> int:
        """Unsigned byte ``index`` (0 is the most significant)."""
        self._check(index, 16)
        return (self._value >> (8 * (15 - index))) & 0xFF

    def set_byte(self, index: int, value: int) -> None:
        self._check(index, 16)
        shift = 8 * (15 - index)
        self._value = (self._value & ~(0xFF << shift) & _U128) | ((int(value) & 0xFF) << shift)

    def element(self, index: int) -> int:
        """Unsigned half-word lane ``index`` (0 is the most significant)."""
        self._check(index, 8)
        return (self._value >> (16 * (7 - index))) & _U16

    def set_element(self, index: int, value: int) -> None:
        self._check(index, 8)
        shift = 16 * (7 - index)
        self._value = (self._value & ~(_U16 << shift) & _U128) | ((int(value) & _U16) << shift)

    def s16(self, index: int) -> int:
        """Half-word lane ``index`` read as signed."""
        value = self.element(index)
        return value - 0x10000 if value & 0x8000 else value

    def get(self, index: int) -> bool:
        """Flag value of lane ``index``: true when the lane is non-zero."""
        return self.element(index) != 0

    def set(self, index: int, value: bool) -> bool:
        """Set lane ``index`` to all ones or all zeros; return the flag."""
        flag = bool(value)
        self.set_element(index, _U16 if flag else 0)
        return flag

    def copy(self) -> "Vector128":
        return Vector128(self.hi, self.lo)

    @staticmethod
    def zero() -> "Vector128":
        return Vector128(0, 0)

    @staticmethod
    def invert() -> "Vector128":
        return Vector128(_U64, _U64)


@dataclass
class IPU:
    """Scalar unit: 32 general registers and a program counter."""

    r: list[int] = field(default_factory=lambda: [0] * 32)
    pc: int = 0


@dataclass
class VPU:
    """Vector unit: 32 vector registers, accumulators and control flags."""

    r: list[Vector128] = field(default_factory=lambda: [Vector128.zero() for _ in range(32)])
    acch: Vector128 = field(default_factory=Vector128.zero)
    accm: Vector128 = field(default_factory=Vector128.zero)
    accl: Vector128 = field(default_factory=Vector128.zero)
    vcoh: Vector128 = field(default_factory=Vector128.zero)
    vcol: Vector128 = field(default_factory=Vector128.zero)
    vcch: Vector128 = field(default_factory=Vector128.zero)
    vccl: Vector128 = field(default_factory=Vector128.zero)
    vce: Vector128 = field(default_factory=Vector128.zero)
    divin: int = 0
    divout: int = 0
    divdp: bool = False


_DMA_WIDTHS = {
    "pbus_region": 1,
    "pbus_address": 12,
    "dram_address": 24,
    "length": 12,
    "skip": 12,
    "count": 8,
}


@dataclass
class DmaRegs:
    """A DMA transfer description; each field wraps to its hardware width."""

    pbus_region: int = 0
    pbus_address: int = 0
    dram_address: int = 0
    length: int = 0
    skip: int = 0
    count: int = 0

    def __setattr__(self, name: str, value: int) -> None:
        width = _DMA_WIDTHS.get(name)
        if width is not None:
            value = int(value) & ((1 << width) - 1)
        super().__setattr__(name, value)


@dataclass
class DmaStatus:
    read: bool = False
    write: bool = False

    def any(self) -> bool:
        return bool(self.read or self.write)


@dataclass
class DMA:
    pending: DmaRegs = field(default_factory=DmaRegs)
    current: DmaRegs = field(default_factory=DmaRegs)
    busy: DmaStatus = field(default_factory=DmaStatus)
    full: DmaStatus = field(default_factory=DmaStatus)
    clock: int = 0


@dataclass
class Status:
    semaphore: bool = False
    halted: bool = True
    broken: bool = False
    full: bool = False
    single_step: bool = False
    interrupt_on_break: bool = False
    signal: list[bool] = field(default_factory=lambda: [False] * 8)


@lru_cache(maxsize=None)
def _reciprocals() -> tuple[int, ...]:
    table = [_U16]
    for index in range(1, 512):
        quotient = (1 << 34) // (index + 512)
        table.append(((quotient + 1) >> 8) & _U16)
    return tuple(table)


@lru_cache(maxsize=None)
def _inverse_square_roots() -> tuple[int, ...]:
    limit = 1 << 44
    table = []
    for index in range(512):
        a = (index + 512) >> (index % 2)
        # smallest c with a * c * c >= limit; b is the largest value below it
        needed = -(-limit // a)
        c = isqrt(needed - 1) + 1
        b = max(c - 1, 1 << 17)
        table.append((b >> 1) & _U16)
    return tuple(table)


def build_reciprocals() -> list[int]:
    """The 512-entry reciprocal table used by the vector divide instructions."""
    return list(_reciprocals())


def build_inverse_square_roots() -> list[int]:
    """The 512-entry inverse square root table used by the vector divide instructions."""
    return list(_inverse_square_roots())


class RSP(Thread):
    """State of the signal processor: memories, register files, DMA and issue tracking."""

    def __init__(self) -> None:
        super().__init__()
        self.dmem = Writable()
        self.imem = Writable()
        self.pipeline = Pipeline()
        self.dma = DMA()
        self.status = Status()
        self.ipu = IPU()
        self.branch = Branch()
        self.vpu = VPU()
        self.reciprocals = [0] * 512
        self.inverse_square_roots = [0] * 512

    def load(self) -> None:
        """Allocate the data and instruction memories and clear the register files."""
        self.dmem.allocate(MEMORY_SIZE, 0)
        self.imem.allocate(MEMORY_SIZE, 0)
        self.ipu = IPU()
        self.vpu = VPU()

    def unload(self) -> None:
        self.dmem.reset()
        self.imem.reset()

    def power(self, reset: bool = False) -> None:
        """Bring the processor to its power-on state: halted, cleared and idle."""
        Thread.reset(self)
        self.dmem.fill()
        self.imem.fill()
        self.pipeline = Pipeline()
        self.dma = DMA()
        self.status = Status()
        self.ipu = IPU()
        self.branch = Branch()
        self.vpu = VPU()
        self.reciprocals = build_reciprocals()
        self.inverse_square_roots = build_inverse_square_roots()

    def instruction_prologue(self, instruction: int) -> None:
        """Record the instruction about to execute and its address."""
        self.pipeline.address = self.ipu.pc
        self.pipeline.instruction = instruction & _U32

    def instruction_epilogue(self, clocks: int = 0, recompiled: bool = False) -> int:
        """Advance the program counter after an instruction.

        Returns non-zero when execution should leave the current block: the
        processor is halted or a branch has just been taken.
        """
        if recompiled:
            self.step(clocks)
        else:
            self.ipu.r[0] = 0

        state = self.branch.state
        if state is BranchState.STEP:
            self.ipu.pc = (self.ipu.pc + 4) & _U16
            return int(self.status.halted)
        if state is BranchState.TAKE:
            self.ipu.pc = (self.ipu.pc + 4) & _U16
            self.branch.delay_slot()
            return int(self.status.halted)
        self.ipu.pc = self.branch.pc
        self.branch.reset()
        self.pipeline.stall()
        if self.branch.pc & 4:
            self.pipeline.single_issue = True
        return 1