"""
SBNZ Emulator
=============

Software model of the one-instruction SBNZ computer.

- **Memory**: flat 64KB, big-endian 16-bit cells, shared by code and data
- **Computer**: fetch/decode/execute loop for the single instruction
- **Dumps**: hex memory dumps and instruction listings

Quick Start
-----------

    >>> from sbnz_sdk.emulator import Computer
    >>> computer = Computer()
    >>> computer.load_memory(image)
    >>> computer.run(max_steps=100_000)
    >>> computer.halted
    True

Module Structure
----------------

- `cpu.py`: Computer class and CPUState
- `memory.py`: Memory
- `dump.py`: Text formatting of memory and programs

Copyright (c) 2025 SBNZ SDK Contributors
"""

from sbnz_sdk.emulator.memory import Memory
from sbnz_sdk.emulator.cpu import Computer, CPUState
from sbnz_sdk.emulator.dump import format_memory, format_state, format_listing

__all__ = [
    "Memory",
    "Computer",
    "CPUState",
    "format_memory",
    "format_state",
    "format_listing",
]
