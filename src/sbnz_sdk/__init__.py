"""
SBNZ SDK - Assembler and Emulator for a One-Instruction Computer
================================================================

This package provides a software model of a one-instruction-set computer
whose only instruction is SBNZ, "subtract and branch if not zero", and an
in-memory assembler that builds programs for it.

Main Components
---------------
- **emulator**: Memory model and execution engine
    Loads a flat binary image and runs it until it reaches HALT ($FFFF)

- **assembler**: In-memory assembler
    Labels with forward references, data directives, arithmetic and
    control macros, and a push/pop stack protocol built from
    self-modifying code

- **cpu**: Instruction set definitions shared by both

Quick Start
-----------
    >>> from sbnz_sdk import Assembler, Computer
    >>> asm = Assembler()
    >>> asm.add("A", "B", "SUM")
    >>> asm.hlt()
    >>> asm.label("A"); asm.dw(2)
    >>> asm.label("B"); asm.dw(3)
    >>> asm.label("SUM"); asm.dw(0)
    >>> computer = Computer()
    >>> computer.load_memory(asm.assemble())
    >>> steps = computer.run(max_steps=1000)
    >>> computer.peek(asm.address_of("SUM"))
    5

Or use the command-line tool:
    $ sbnz demo 7 6
    $ sbnz run program.bin --dump 64

Version History
---------------
1.0.0 - Initial release with emulator, assembler and stack protocol

Copyright (c) 2025 SBNZ SDK Contributors
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from sbnz_sdk.assembler import Assembler, Label, RuntimeSupport
from sbnz_sdk.emulator import Computer, Memory
from sbnz_sdk.cpu import HALT, INSTRUCTION_SIZE, MEMORY_SIZE, Instruction
from sbnz_sdk.errors import (
    SbnzError,
    AssemblerError,
    UndefinedSymbolError,
    DuplicateSymbolError,
    AddressRangeError,
    ProgramSizeError,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "Label",
    "RuntimeSupport",
    # Emulator
    "Computer",
    "Memory",
    # Instruction set
    "HALT",
    "INSTRUCTION_SIZE",
    "MEMORY_SIZE",
    "Instruction",
    # Exception hierarchy
    "SbnzError",
    "AssemblerError",
    "UndefinedSymbolError",
    "DuplicateSymbolError",
    "AddressRangeError",
    "ProgramSizeError",
]
