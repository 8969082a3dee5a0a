"""
SBNZ Instruction Set Definitions
================================

The machine has exactly one instruction: SBNZ, "subtract and branch if
not zero". Every instruction is eight bytes, four big-endian 16-bit
address fields:

    +--------+--------+--------+--------+
    |   A    |   B    |   C    |   D    |
    +--------+--------+--------+--------+

Execution:
    r = mem[A] - mem[B]          (signed 16-bit, wraps)
    mem[C] = r
    if r != 0:  IP = D           (D is used literally, not dereferenced)
    else:       IP = IP + 8

Code and data share one flat 64KB address space. Address $FFFF is the
HALT sentinel: jumping there stops the machine.

Copyright (c) 2025 SBNZ SDK Contributors
"""

import struct
from dataclasses import dataclass


# =============================================================================
# Machine Geometry
# =============================================================================

ADDRESS_MASK = 0xFFFF
MAX_ADDRESS = ADDRESS_MASK
MEMORY_SIZE = MAX_ADDRESS + 1

# Control reaching this address halts the machine
HALT = MAX_ADDRESS

# Bytes per address field and per operand cell
WORD_SIZE = 2

# A, B, C and D fields
INSTRUCTION_SIZE = 4 * WORD_SIZE


# =============================================================================
# Word Helpers
# =============================================================================

def to_signed(value: int) -> int:
    """Interpret the low 16 bits of value as a two's complement number."""
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def to_unsigned(value: int) -> int:
    """Reduce value modulo 2^16."""
    return value & 0xFFFF


def pack_word(value: int) -> bytes:
    """Encode a 16-bit value (signed or unsigned) as two big-endian bytes."""
    return struct.pack(">H", value & 0xFFFF)


def unpack_word(data: bytes, offset: int = 0) -> int:
    """Decode an unsigned big-endian 16-bit value."""
    return struct.unpack_from(">H", data, offset)[0]


# =============================================================================
# Instruction Record
# =============================================================================

@dataclass(frozen=True)
class Instruction:
    """
    A decoded SBNZ instruction.

    Attributes:
        a: Address of the minuend
        b: Address of the subtrahend
        c: Address the difference is stored at
        d: Branch target taken when the difference is not zero
    """
    a: int
    b: int
    c: int
    d: int

    @classmethod
    def decode(cls, data: bytes, address: int = 0) -> "Instruction":
        """
        Decode the eight bytes at address.

        Reads wrap around the end of the address space, so an instruction
        straddling $FFFF continues at $0000.
        """
        size = len(data)
        raw = bytes(data[(address + i) % size] for i in range(INSTRUCTION_SIZE))
        return cls(*struct.unpack(">4H", raw))

    def encode(self) -> bytes:
        return struct.pack(">4H", self.a, self.b, self.c, self.d)

    def __str__(self) -> str:
        return f"SBNZ ${self.a:04X}, ${self.b:04X}, ${self.c:04X}, ${self.d:04X}"
