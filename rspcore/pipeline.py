"""Instruction issue model: dual-issue rules, pipeline hazards and branch state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntFlag

_U32 = 0xFFFFFFFF


class OpFlags(IntFlag):
    """Properties of a decoded instruction that matter to issue timing."""

    NONE = 0
    LOAD = 1 << 0
    STORE = 1 << 1
    BRANCH = 1 << 2
    VECTOR = 1 << 3
    VNOP_GROUP = 1 << 4  # dual issue conflicts with VNOP
    BYPASS = 1 << 5


@dataclass
class OpInfo:
    """Register usage of one decoded instruction, as 32-bit register masks.

    ``vfake`` holds vector registers an instruction appears to read through
    misinterpreted fields; it affects only dual-issue decisions.
    """

    flags: OpFlags = OpFlags.NONE
    vfake: int = 0
    r_use: int = 0
    r_def: int = 0
    v_use: int = 0
    v_def: int = 0
    vc_use: int = 0
    vc_def: int = 0

    def load(self) -> bool:
        return bool(self.flags & OpFlags.LOAD)

    def store(self) -> bool:
        return bool(self.flags & OpFlags.STORE)

    def branch(self) -> bool:
        return bool(self.flags & OpFlags.BRANCH)

    def vector(self) -> bool:
        return bool(self.flags & OpFlags.VECTOR)

    def bypass(self) -> bool:
        return bool(self.flags & OpFlags.BYPASS)


def can_dual_issue(op0: OpInfo, op1: OpInfo) -> bool:
    """Whether ``op1`` may issue in the same cycle as ``op0``."""
    if op0.vector() == op1.vector():
        return False  # must be one scalar and one vector op
    if op0.v_def & (op1.v_use | op1.v_def):
        return False
    if op0.vc_def & (op1.vc_use | op1.vc_def):
        return False
    # false conflicts from misread fields only hit VNOP after MTC2 or LTV
    vnop_sensitive = (op0.flags & OpFlags.VNOP_GROUP) or not (op1.flags & OpFlags.VNOP_GROUP)
    return not (vnop_sensitive and op0.v_def & op1.vfake)


@dataclass
class Stage:
    """What an instruction slot left in flight: a load and the registers it writes."""

    load: bool = False
    r_write: int = 0
    v_write: int = 0


@dataclass
class _CurrentStage(Stage):
    store: bool = False
    branch: bool = False
    r_read: int = 0
    v_read: int = 0

    def retire(self) -> Stage:
        return Stage(self.load, self.r_write, self.v_write)


class Pipeline:
    """Counts the clocks an issue cycle takes, including hazard stalls."""

    STAGE_CLOCKS = 3

    def __init__(self) -> None:
        self.address = 0
        self.instruction = 0
        self.clocks = 0
        self.single_issue = False
        self.previous: list[Stage] = [Stage() for _ in range(3)]
        self.current = _CurrentStage()

    def begin(self) -> None:
        """Start a new issue cycle."""
        self.clocks = 0

    def _advance(self, stage: Stage) -> None:
        self.previous = [stage, self.previous[0], self.previous[1]]
        self.clocks += self.STAGE_CLOCKS

    def end(self) -> None:
        """Resolve hazards for what was issued and move it down the pipeline."""
        self._read_gpr(self.current.r_read)
        self._read_vr(self.current.v_read)
        if self.current.store:
            self._wait_for_load()
        self.single_issue = self.current.branch
        self._advance(self.current.retire())
        self.current = _CurrentStage()

    def stall(self) -> None:
        """Insert an empty stage."""
        self._advance(Stage())

    def issue(self, op: OpInfo) -> None:
        """Add an instruction to the current issue cycle."""
        current = self.current
        current.r_read |= op.r_use
        if not op.bypass():
            current.r_write |= op.r_def & ~1 & _U32  # r0 is never written
        current.v_read |= op.v_use
        current.v_write |= op.v_def
        current.load |= op.load()
        current.store |= op.store()
        current.branch |= op.branch()

    def _stalls(self, count: int) -> None:
        for _ in range(count):
            self.stall()

    def _read_gpr(self, mask: int) -> None:
        if mask & self.previous[0].r_write:
            self._stalls(2)
        elif mask & self.previous[1].r_write:
            self._stalls(1)

    def _read_vr(self, mask: int) -> None:
        if mask & self.previous[0].v_write:
            self._stalls(3)
        elif mask & self.previous[1].v_write:
            self._stalls(2)
        elif mask & self.previous[2].v_write:
            self._stalls(1)

    def _wait_for_load(self) -> None:
        while self.previous[1].load:
            self.stall()


class BranchState(Enum):
    STEP = 0
    TAKE = 1
    DELAY_SLOT = 2


@dataclass
class Branch:
    """Pending control transfer; the target is a 12-bit instruction address."""

    pc: int = 0
    state: BranchState = field(default=BranchState.STEP)

    def in_delay_slot(self) -> bool:
        return self.state is BranchState.DELAY_SLOT

    def reset(self) -> None:
        self.state = BranchState.STEP

    def take(self, address: int) -> None:
        self.state = BranchState.TAKE
        self.pc = address & 0xFFF

    def delay_slot(self) -> None:
        self.state = BranchState.DELAY_SLOT