"""
SBNZ Assembler Package
======================

In-memory assembler for the one-instruction SBNZ machine.

Modules:
    assembler: Assembler class (instructions, macros, stack protocol)
    relocator: Label, symbol table and forward-reference patching
    runtime:   Preamble layout and the RuntimeSupport record

Usage:
    from sbnz_sdk.assembler import Assembler

    asm = Assembler()
    asm.mov("SRC", "DST")
    asm.hlt()
    asm.label("SRC")
    asm.dw(0x1234)
    asm.label("DST")
    asm.dw(0)
    image = asm.assemble()

Copyright (c) 2025 SBNZ SDK Contributors
"""

from sbnz_sdk.assembler.assembler import Assembler
from sbnz_sdk.assembler.relocator import AddressRef, Label, Relocator, Symbol
from sbnz_sdk.assembler.runtime import DEFAULT_STACK_TOP, RuntimeSupport

__all__ = [
    "Assembler",
    "AddressRef",
    "Label",
    "Relocator",
    "Symbol",
    "RuntimeSupport",
    "DEFAULT_STACK_TOP",
]
