"""Reality Signal Processor core: fixed-width integers, bit fields, memory banks, bus devices, pipeline and machine state."""

__version__ = "0.1.0"
__all__ = ["bitops", "integers", "bitrange", "memory", "rcp", "pipeline", "rsp"]