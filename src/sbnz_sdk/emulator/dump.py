"""
Human-readable dumps of SBNZ memory and programs.

These helpers only read memory; they never change machine state.

Copyright (c) 2025 SBNZ SDK Contributors
"""

from typing import Mapping, Optional, Union

from sbnz_sdk.cpu import HALT, INSTRUCTION_SIZE, Instruction
from sbnz_sdk.emulator.cpu import Computer
from sbnz_sdk.emulator.memory import Memory

BYTES_PER_ROW = 16


def _as_bytes(source: Union[bytes, bytearray, Memory]) -> bytes:
    if isinstance(source, Memory):
        return source.snapshot()
    return bytes(source)


def format_memory(
    source: Union[bytes, bytearray, Memory],
    start: int = 0,
    length: int = 64,
) -> str:
    """
    Format a region as hex rows of 16 bytes.

    Example:
        $0000: 00 08 00 0A 00 0C 00 2E 00 01 00 00 00 00 00 00
    """
    data = _as_bytes(source)
    end = min(start + length, len(data))
    lines = []
    for row in range(start, end, BYTES_PER_ROW):
        chunk = data[row:min(row + BYTES_PER_ROW, end)]
        lines.append(f"${row:04X}: " + " ".join(f"{b:02X}" for b in chunk))
    return "\n".join(lines)


def format_state(computer: Computer, length: int = 64) -> str:
    """Format IP, step count and the first length bytes of memory."""
    ip = "HALT" if computer.halted else f"${computer.ip:04X}"
    header = f"IP={ip} steps={computer.steps}"
    if length <= 0:
        return header
    return header + "\n" + format_memory(computer.memory, 0, length)


def _format_field(value: int, names: Mapping[int, str]) -> str:
    if value == HALT:
        return "HALT"
    name = names.get(value)
    if name is not None:
        return name
    return f"${value:04X}"


def format_listing(
    image: bytes,
    start: int = 0,
    names: Optional[Mapping[int, str]] = None,
) -> str:
    """
    Disassemble an image as one SBNZ per 8 bytes.

    Data embedded in the program is shown as instructions too, since the
    machine cannot tell them apart. Runs of all-zero instructions are
    collapsed to a single '...' line.

    Args:
        image: Program bytes
        start: Address of the first instruction to list
        names: Optional address -> name map used for field and line labels
    """
    names = names or {}
    lines = []
    skipping = False
    for address in range(start, len(image) - INSTRUCTION_SIZE + 1, INSTRUCTION_SIZE):
        inst = Instruction.decode(image, address)
        if inst == Instruction(0, 0, 0, 0):
            if not skipping:
                lines.append("    ...")
                skipping = True
            continue
        skipping = False
        fields = ", ".join(_format_field(v, names) for v in (inst.a, inst.b, inst.c, inst.d))
        label = names.get(address, "")
        lines.append(f"${address:04X} {label:<12} SBNZ {fields}")
    return "\n".join(lines)
