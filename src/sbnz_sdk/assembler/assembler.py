"""
SBNZ Assembler - Main Interface
===============================

This module provides the Assembler class, an in-memory assembler for the
SBNZ machine. Programs are built by calling methods, one per instruction,
macro or directive; assemble() resolves labels and returns the binary
image.

Example Usage
-------------
>>> from sbnz_sdk.assembler import Assembler
>>>
>>> asm = Assembler()
>>> asm.add("OP1", "OP2", "SUM")
>>> asm.hlt()
>>> asm.label("OP1")
>>> asm.dw(0x1234)
>>> asm.label("OP2")
>>> asm.dw(0x2345)
>>> asm.label("SUM")
>>> asm.dw(0)
>>>
>>> image = asm.assemble()
>>> sum_address = asm.address_of("SUM")

Macros
------
The machine only subtracts and branches on non-zero. Everything else is
built from that, using the cells set up by the preamble (see runtime.py):

    MOV  src, dst       dst = src - 0
    JMP  target         1 - 0 is never zero
    BEQ  a, b, target   a - b into scratch; skip the JMP when non-zero
    NEG  src, dst       dst = 0 - src
    ADD  a, b, dst      scratch = -b; dst = a - scratch
    SUB  a, b, dst      dst = a - b
    INC  x / DEC x      add / subtract the one-cell
    NOT  src, dst       ~x == -(x + 1)
    PUSH src / POP dst  shared self-modifying subroutines

Macros that must continue with the next instruction whatever the result
branch to a fresh label placed right after them, so no macro needs to
know its own length.

Operands may be addresses (int), Label objects or label names (str).

Copyright (c) 2025 SBNZ SDK Contributors
"""

import logging
from typing import Union

from sbnz_sdk.cpu import HALT
from sbnz_sdk.assembler.relocator import Label, Relocator, as_ref
from sbnz_sdk.assembler import runtime
from sbnz_sdk.assembler.runtime import DEFAULT_STACK_TOP, RuntimeSupport
from sbnz_sdk.errors import AssemblerError

logger = logging.getLogger(__name__)

Ref = Union[int, str, Label]

_ONE = Label(runtime.ONE)
_ZERO = Label(runtime.ZERO)
_SCRATCH = Label(runtime.SCRATCH)
_STAGE = Label(runtime.STAGE)
_SP = Label(runtime.STACK_POINTER)


class Assembler:
    """
    In-memory SBNZ assembler.

    A new assembler has already emitted the runtime preamble; the first
    user instruction lands at runtime.start. Build the program, then call
    assemble() once. The assembler cannot be reused afterwards.

    Attributes:
        runtime: Addresses of the preamble cells and subroutines
    """

    def __init__(self, stack_top: int = DEFAULT_STACK_TOP):
        """
        Initialize the assembler and emit the preamble.

        Args:
            stack_top: Initial stack pointer. The first push writes the
                       cell at this address; later pushes go downward.
        """
        self._relocator = Relocator()
        self._label_count = 0
        self.runtime = self._emit_preamble(stack_top)

    # =========================================================================
    # Labels
    # =========================================================================

    @property
    def pc(self) -> int:
        """Address the next instruction or datum will be emitted at."""
        return self._relocator.pc

    @property
    def symbols(self) -> dict[str, int]:
        """All defined labels, including preamble and generated ones."""
        return self._relocator.symbols

    def label(self, name: str) -> Label:
        """
        Define a label pointing to the current pc.

        Names starting with "__" belong to the preamble and to the labels
        generated by macros.

        Raises:
            AssemblerError: If the name uses the reserved "__" prefix
            DuplicateSymbolError: If the label is already defined
        """
        if name.startswith(runtime.RESERVED_PREFIX):
            raise AssemblerError(
                f"label name '{name}' is reserved",
                hint=f"names starting with '{runtime.RESERVED_PREFIX}' are used by the assembler",
            )
        return self._relocator.define_label(name)

    def unique_label(self) -> Label:
        """
        Create a label name that no other call returns.

        Used by macros that branch within themselves, so that nested
        expansions never collide. The label is not defined.
        """
        self._label_count += 1
        return Label(f"{runtime.RESERVED_PREFIX}label_{self._label_count:04d}")

    def address_of(self, name: str) -> int:
        """Address of a defined label."""
        return self._relocator.address_of(name)

    def assemble(self) -> bytes:
        """
        Resolve forward references and return the program image.

        Raises:
            UndefinedSymbolError: If a referenced label was never defined
        """
        image = self._relocator.finalize()
        logger.debug(f"Assembled {len(image)} bytes, user code at ${self.runtime.start:04X}")
        return image

    # =========================================================================
    # Directives
    # =========================================================================

    def db(self, *values: int) -> None:
        """Emit bytes."""
        for value in values:
            self._relocator.emit_byte(value)

    def dw(self, *values: int) -> None:
        """Emit 16-bit words, big-endian. Negative values are two's complement."""
        for value in values:
            self._relocator.emit_word(value)

    def da(self, *refs: Ref) -> None:
        """Emit the addresses of labels (or literal addresses) as data words."""
        self._relocator.emit_addresses([as_ref(ref) for ref in refs])

    # =========================================================================
    # Instructions
    # =========================================================================

    def sbnz(self, a: Ref, b: Ref, c: Ref, d: Ref) -> None:
        """
        Emit the primitive: mem[c] = mem[a] - mem[b]; branch to d if non-zero.

        Raises:
            AddressRangeError: If an int operand is outside $0000-$FFFF.
                The instruction is then not emitted at all.
        """
        self._relocator.emit_addresses([as_ref(ref) for ref in (a, b, c, d)])

    def _sbnz_next(self, a: Ref, b: Ref, c: Ref) -> None:
        """SBNZ that continues with the following instruction either way."""
        after = self.unique_label()
        self.sbnz(a, b, c, after)
        self._relocator.define_label(after.name)

    def hlt(self) -> None:
        """Stop the machine."""
        self.sbnz(_ONE, _ZERO, _SCRATCH, HALT)

    def nop(self) -> None:
        self._sbnz_next(_SCRATCH, _SCRATCH, _SCRATCH)

    def jmp(self, target: Ref) -> None:
        """Unconditional jump."""
        self.sbnz(_ONE, _ZERO, _SCRATCH, target)

    def mov(self, src: Ref, dst: Ref) -> None:
        """dst = src"""
        self._sbnz_next(src, _ZERO, dst)

    def beq(self, a: Ref, b: Ref, target: Ref) -> None:
        """Branch to target if a == b, else fall through. Clobbers scratch."""
        skip = self.unique_label()
        self.sbnz(a, b, _SCRATCH, skip)
        self.jmp(target)
        self._relocator.define_label(skip.name)

    def neg(self, src: Ref, dst: Ref) -> None:
        """dst = -src"""
        self._sbnz_next(_ZERO, src, dst)

    def add(self, a: Ref, b: Ref, dst: Ref) -> None:
        """dst = a + b, computed as a - (-b). Clobbers scratch."""
        self.neg(b, _SCRATCH)
        self._sbnz_next(a, _SCRATCH, dst)

    def sub(self, a: Ref, b: Ref, dst: Ref) -> None:
        """dst = a - b"""
        self._sbnz_next(a, b, dst)

    def inc(self, x: Ref) -> None:
        """x = x + 1. Clobbers scratch."""
        self.add(x, _ONE, x)

    def dec(self, x: Ref) -> None:
        """x = x - 1"""
        self.sub(x, _ONE, x)

    def not_(self, src: Ref, dst: Ref) -> None:
        """dst = ~src, using ~x == -(x + 1). Clobbers scratch."""
        self.add(src, _ONE, dst)
        self.neg(dst, dst)

    # =========================================================================
    # Stack Protocol
    # =========================================================================

    def push(self, src: Ref) -> None:
        """
        Push the cell at src onto the stack.

        Stages the value, patches the push body's return jump with the
        address after this call site, and jumps into the body.
        """
        ret = self.unique_label()
        ret_cell = self.unique_label()
        self.mov(src, _STAGE)
        self.mov(ret_cell, self.runtime.push_return)
        self.jmp(self.runtime.push_entry)
        self._relocator.define_label(ret_cell.name)
        self.da(ret)
        self._relocator.define_label(ret.name)

    def pop(self, dst: Ref) -> None:
        """Pop the top of the stack into the cell at dst."""
        ret = self.unique_label()
        ret_cell = self.unique_label()
        self.mov(ret_cell, self.runtime.pop_return)
        self.jmp(self.runtime.pop_entry)
        self._relocator.define_label(ret_cell.name)
        self.da(ret)
        self._relocator.define_label(ret.name)
        self.mov(_STAGE, dst)

    # =========================================================================
    # Preamble
    # =========================================================================

    def _emit_preamble(self, stack_top: int) -> RuntimeSupport:
        """Emit the support cells and the push/pop bodies. See runtime.py."""
        self.jmp(runtime.START)

        self._relocator.define_label(runtime.ONE)
        self.dw(1)
        self._relocator.define_label(runtime.ZERO)
        self.dw(0)
        self._relocator.define_label(runtime.SCRATCH)
        self.dw(0)
        self._relocator.define_label(runtime.STAGE)
        self.dw(0)
        self._relocator.define_label(runtime.STACK_POINTER)
        self.da(stack_top)

        # push: mem[SP] = STAGE; SP -= 2; jump back
        self._relocator.define_label(runtime.PUSH_ENTRY)
        self.mov(_SP, runtime.PUSH_SLOT)
        after = self.unique_label()
        self.da(_STAGE, _ZERO)
        self._relocator.define_label(runtime.PUSH_SLOT)
        self.da(0, after)
        self._relocator.define_label(after.name)
        self.dec(_SP)
        self.dec(_SP)
        self.da(_ONE, _ZERO, _SCRATCH)
        self._relocator.define_label(runtime.PUSH_RETURN)
        self.da(HALT)

        # pop: SP += 2; STAGE = mem[SP]; jump back
        self._relocator.define_label(runtime.POP_ENTRY)
        self.inc(_SP)
        self.inc(_SP)
        self.mov(_SP, runtime.POP_SLOT)
        after = self.unique_label()
        self._relocator.define_label(runtime.POP_SLOT)
        self.da(0, _ZERO, _STAGE, after)
        self._relocator.define_label(after.name)
        self.da(_ONE, _ZERO, _SCRATCH)
        self._relocator.define_label(runtime.POP_RETURN)
        self.da(HALT)

        self._relocator.define_label(runtime.START)

        address_of = self._relocator.address_of
        return RuntimeSupport(
            one=address_of(runtime.ONE),
            zero=address_of(runtime.ZERO),
            scratch=address_of(runtime.SCRATCH),
            stage=address_of(runtime.STAGE),
            stack_pointer=address_of(runtime.STACK_POINTER),
            push_entry=address_of(runtime.PUSH_ENTRY),
            push_slot=address_of(runtime.PUSH_SLOT),
            push_return=address_of(runtime.PUSH_RETURN),
            pop_entry=address_of(runtime.POP_ENTRY),
            pop_slot=address_of(runtime.POP_SLOT),
            pop_return=address_of(runtime.POP_RETURN),
            start=address_of(runtime.START),
            stack_top=stack_top,
        )
