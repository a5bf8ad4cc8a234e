import pytest
from hypothesis import given, strategies as st

from rspcore.memory import AccessSize
from rspcore.rcp import PiDevice, RcpDevice, SiDevice, Thread


class WordRegisters(RcpDevice):
    def __init__(self):
        self.words = {}
        self.writes = []

    def read_word(self, address, thread):
        return self.words.get(address & ~3, 0)

    def write_word(self, address, data, thread):
        self.writes.append((address, data))
        self.words[address & ~3] = data


class PiRegisters(PiDevice):
    def __init__(self):
        self.calls = []

    def read_half(self, address):
        self.calls.append(("read_half", address))
        return 0x1111

    def read_word(self, address):
        self.calls.append(("read_word", address))
        return 0x22222222

    def write_half(self, address, data):
        self.calls.append(("write_half", address, data))

    def write_word(self, address, data):
        self.calls.append(("write_word", address, data))


class SiRegisters(SiDevice):
    def __init__(self):
        self.words = {}

    def read_word(self, address):
        return self.words.get(address, 0)

    def write_word(self, address, data):
        self.words[address] = data


def test_thread_steps_accumulate_and_reset():
    thread = Thread()
    thread.step(5)
    thread.step(7)
    assert thread.clock == 12
    thread.reset()
    assert thread.clock == 0


def test_word_read_returns_register_and_costs_read_cycles():
    device = WordRegisters()
    device.words[0x10] = 0xCAFEBABE
    thread = Thread()
    assert device.read(AccessSize.WORD, 0x10, thread) == 0xCAFEBABE
    assert thread.clock == RcpDevice.DEFAULT_READ_CYCLES * 2


def test_dual_read_reads_two_words():
    device = WordRegisters()
    device.words[0x20] = 0x01234567
    device.words[0x24] = 0x89ABCDEF
    thread = Thread()
    assert device.read(AccessSize.DUAL, 0x20, thread) == 0x0123456789ABCDEF
    assert thread.clock == RcpDevice.DEFAULT_READ_CYCLES * 2


def test_byte_write_at_lane_zero_goes_to_top_byte():
    device = WordRegisters()
    device.write(AccessSize.BYTE, 0x40, 0xAB, Thread())
    assert device.writes == [(0x40, 0xAB000000)]


@given(lane=st.integers(0, 3), value=st.integers(0, 0xFF))
def test_byte_write_then_read_round_trips(lane, value):
    device = WordRegisters()
    thread = Thread()
    device.write(AccessSize.BYTE, 0x80 + lane, value, thread)
    assert device.read(AccessSize.BYTE, 0x80 + lane, thread) & 0xFF == value


@given(lane=st.sampled_from([0, 2]), value=st.integers(0, 0xFFFF))
def test_half_write_then_read_round_trips(lane, value):
    device = WordRegisters()
    thread = Thread()
    device.write(AccessSize.HALF, 0x90 + lane, value, thread)
    assert device.read(AccessSize.HALF, 0x90 + lane, thread) & 0xFFFF == value


def test_narrow_reads_of_lowest_lane_return_whole_word():
    device = WordRegisters()
    device.words[0x50] = 0xDEADBEEF
    thread = Thread()
    assert device.read(AccessSize.BYTE, 0x53, thread) == 0xDEADBEEF
    assert device.read(AccessSize.HALF, 0x52, thread) == 0xDEADBEEF


def test_dual_write_stores_only_upper_word():
    device = WordRegisters()
    device.write(AccessSize.DUAL, 0x60, 0x1122334455667788, Thread())
    assert device.writes == [(0x60, 0x11223344)]


def test_write_costs_write_cycles():
    device = WordRegisters()
    thread = Thread()
    device.write(AccessSize.WORD, 0, 1, thread)
    assert thread.clock == RcpDevice.DEFAULT_WRITE_CYCLES * 2


def test_word_write_truncates_to_32_bits():
    device = WordRegisters()
    device.write(AccessSize.WORD, 0, (1 << 32) | 5, Thread())
    assert device.words[0] == 5


def test_invalid_size_is_rejected():
    with pytest.raises(ValueError):
        WordRegisters().read(3, 0, Thread())


def test_pi_dispatches_by_size():
    device = PiRegisters()
    assert PiDevice.read(device, AccessSize.HALF, 4) == 0x1111
    assert PiDevice.read(device, AccessSize.WORD, 8) == 0x22222222
    PiDevice.write(device, AccessSize.HALF, 12, 7)
    PiDevice.write(device, AccessSize.WORD, 16, 9)
    assert device.calls == [
        ("read_half", 4),
        ("read_word", 8),
        ("write_half", 12, 7),
        ("write_word", 16, 9),
    ]


@pytest.mark.parametrize("size", [AccessSize.BYTE, AccessSize.DUAL])
def test_pi_rejects_other_sizes(size):
    device = PiRegisters()
    with pytest.raises(ValueError):
        device.read(size, 0)
    with pytest.raises(ValueError):
        device.write(size, 0, 0)
    assert device.calls == []


def test_si_word_round_trip():
    device = SiRegisters()
    SiDevice.write(device, AccessSize.WORD, 0x1C, 0x0BADF00D)
    assert SiDevice.read(device, AccessSize.WORD, 0x1C) == 0x0BADF00D
    assert device.words == {0x1C: 0x0BADF00D}


@pytest.mark.parametrize("size", [AccessSize.BYTE, AccessSize.HALF, AccessSize.DUAL])
def test_si_rejects_other_sizes(size):
    device = SiRegisters()
    with pytest.raises(ValueError):
        device.read(size, 0)
    with pytest.raises(ValueError):
        device.write(size, 0, 1)
    assert device.words == {}