"""
SBNZ SDK CPU Package
====================

This package contains the instruction set definitions shared by the
assembler (which encodes instructions) and the emulator (which decodes
and executes them).

Modules:
    sbnz: Word sizes, the HALT sentinel, word encoding helpers and the
          Instruction record.

Usage:
    from sbnz_sdk.cpu import HALT, INSTRUCTION_SIZE, Instruction

Copyright (c) 2025 SBNZ SDK Contributors
"""

# =============================================================================
# Public API Exports
# =============================================================================

from sbnz_sdk.cpu.sbnz import (
    # Machine geometry
    ADDRESS_MASK,
    MAX_ADDRESS,
    MEMORY_SIZE,
    HALT,
    WORD_SIZE,
    INSTRUCTION_SIZE,
    # Word helpers
    to_signed,
    to_unsigned,
    pack_word,
    unpack_word,
    # Instruction record
    Instruction,
)

__all__ = [
    "ADDRESS_MASK",
    "MAX_ADDRESS",
    "MEMORY_SIZE",
    "HALT",
    "WORD_SIZE",
    "INSTRUCTION_SIZE",
    "to_signed",
    "to_unsigned",
    "pack_word",
    "unpack_word",
    "Instruction",
]
