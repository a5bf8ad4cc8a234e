# rspcore

Building blocks for emulating the Reality Signal Processor: fixed-width
integer arithmetic, live bit fields inside registers, word-addressed memory
banks, register-window bus devices, the dual-issue pipeline timing model and
the processor's machine state.

## Install

```
pip install .
pip install ".[test]"   # with test dependencies
```

## Modules

- `rspcore.bitops`: bit helpers on plain integers: `uclamp`, `uclip`,
  `sclamp`, `sclip`, `pattern_mask`, `pattern_test`, `lowest`,
  `clear_lowest`, `set_lowest`, `count`, `first`, `last`, `round_pow2` and
  `reverse`.
- `rspcore.integers`: `Natural` and `Integer`, immutable unsigned and
  two's-complement values of 1 to 64 bits whose arithmetic wraps to the
  width, with `bit`, `byte`, `replace_bits`, `mask`, `clip` and `clamp`;
  plus `wrap_unsigned` and `wrap_signed`.
- `rspcore.bitrange`: `Register`, a mutable fixed-width value, and
  `BitRange`, a view of a slice of it that supports `set`, `increment`,
  `decrement`, `copy_from` and in-place operators (`+=`, `&=`, `<<=` ...),
  each touching only the slice's bits.
- `rspcore.memory`: memory banks addressed with `AccessSize`
  (`BYTE`, `HALF`, `WORD`, `DUAL`):
  - `Writable` (up to 4 KiB) and its write-ignoring `Readable`;
  - `Writable16` and `Readable16`, which split word and dual accesses into
    half-words;
  - `MsbWritable` and `MsbReadable`, allocated to any size, with 8-byte
    aligned dual accesses and `load`/`save` from binary streams.
  All banks offer `read`, `write`, `read_unaligned`, `write_unaligned`,
  `fill`, `allocate` and `reset`.
- `rspcore.rcp`: `Thread`, a clock counter, and the abstract bus adapters
  `RcpDevice`, `PiDevice` and `SiDevice`. Subclasses supply `read_word` /
  `write_word` (and `read_half` / `write_half` for `PiDevice`); the base
  classes route sized `read` and `write` calls to them and reject sizes the
  bus does not carry with `ValueError`.
- `rspcore.pipeline`: `OpFlags`, `OpInfo`, `can_dual_issue`, `Pipeline`
  (hazard stalls counted in `clocks`), `Stage`, `Branch` and `BranchState`.
- `rspcore.rsp`: `Vector128` registers, the `IPU`, `VPU`, `DMA`,
  `DmaRegs`, `DmaStatus` and `Status` state records, the `RSP` with
  `load`, `unload`, `power`, `instruction_prologue` and
  `instruction_epilogue`, the table builders `build_reciprocals` and
  `build_inverse_square_roots`, and `command_name` for looking up the
  `RSPQ_COMMANDS` and `T3D_COMMANDS` name tables.

## Example

```python
from rspcore.memory import AccessSize, Writable
from rspcore.integers import Natural
from rspcore.pipeline import OpFlags, OpInfo, can_dual_issue
from rspcore.rsp import RSP

mem = Writable(4096, 0)
mem.write(AccessSize.WORD, 0x10, 0x11223344)
assert mem.read(AccessSize.BYTE, 0x10) == 0x11

assert int(Natural(8, 250) + 10) == 4

scalar = OpInfo(r_def=1 << 2)
vector = OpInfo(flags=OpFlags.VECTOR, v_def=1 << 3)
assert can_dual_issue(scalar, vector)

rsp = RSP()
rsp.load()
rsp.power(False)
assert rsp.status.halted
assert rsp.reciprocals[0] == 0xFFFF
```

## What this package does not do

It holds the processor's state and its timing bookkeeping, but it does not
decode or execute instructions: there is no scalar or vector instruction
set, no fetch loop, no DMA transfers between memories and no memory-mapped
register handling for the processor itself. The bus adapters in
`rspcore.rcp` are abstract and no concrete devices or address map are
provided. There is no command-line program.

## Tests

```
pytest
```