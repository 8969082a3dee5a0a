#!/usr/bin/env python3
"""
SBNZ Multiply Demo
==================

This script demonstrates how to use the SBNZ SDK to:
1. Build a program from macros
2. Assemble it into a memory image
3. Run it on the emulator
4. Inspect memory and the stack afterwards

Usage:
    python examples/multiply.py

Copyright (c) 2025 SBNZ SDK Contributors
"""

from sbnz_sdk import Computer
from sbnz_sdk.cli.sbnz import build_multiply_program
from sbnz_sdk.emulator import format_listing, format_memory


def main():
    # ==========================================================================
    # 1. Build the program
    # ==========================================================================
    # PRODUCT += FACTOR, COUNT times. The result is then pushed and popped
    # into COPY to go through the stack subroutines.

    asm = build_multiply_program(count=7, factor=6)

    # ==========================================================================
    # 2. Assemble
    # ==========================================================================
    image = asm.assemble()
    print(f"Assembled {len(image)} bytes, program starts at ${asm.runtime.start:04X}")

    names = {address: name for name, address in asm.symbols.items()}
    print(format_listing(image, start=asm.runtime.start, names=names))

    # ==========================================================================
    # 3. Run
    # ==========================================================================
    computer = Computer()
    computer.load_memory(image)
    executed = computer.run(100_000)
    print(f"\nHalted: {computer.halted} after {executed} steps")

    # ==========================================================================
    # 4. Inspect results
    # ==========================================================================
    print(f"PRODUCT = {computer.peek(asm.address_of('PRODUCT'))}")
    print(f"COPY    = {computer.peek(asm.address_of('COPY'))}")
    print("\nTop of stack:")
    print(format_memory(computer.memory, 0xFFF0, 16))


if __name__ == "__main__":
    main()
