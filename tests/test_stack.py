"""
Stack Protocol Tests
====================

Tests for PUSH and POP: stack pointer movement, round trips, LIFO order,
and the shared return cells that make the protocol non-reentrant.

Copyright (c) 2025 SBNZ SDK Contributors
"""

from sbnz_sdk.assembler import Assembler
from sbnz_sdk.cpu import INSTRUCTION_SIZE, Instruction


# Instructions executed by one PUSH / POP call site including the body
PUSH_STEPS = 8
POP_STEPS = 10


def steps(computer, n):
    for _ in range(n):
        computer.step()
    return computer


class TestPush:
    """Test PUSH."""

    def test_push(self, start_program):
        asm = Assembler()
        asm.push("SRC")
        asm.label("SRC")
        asm.dw(0x1234)

        c = steps(start_program(asm), PUSH_STEPS)
        assert c.peek(0xFFFE) == 0x1234
        assert c.peek(asm.runtime.stack_pointer) == -4  # $FFFC
        assert c.ip == asm.address_of("SRC")

    def test_push_decrements_sp_by_two(self, run_program):
        asm = Assembler()
        asm.push("SRC")
        asm.hlt()
        asm.label("SRC")
        asm.dw(7)

        c = run_program(asm)
        assert c.memory.read_word(asm.runtime.stack_pointer) == 0xFFFE - 2

    def test_push_uses_stage(self, run_program):
        asm = Assembler()
        asm.push("SRC")
        asm.hlt()
        asm.label("SRC")
        asm.dw(-5)

        c = run_program(asm)
        assert c.peek(asm.runtime.stage) == -5

    def test_push_custom_stack_top(self, run_program):
        asm = Assembler(stack_top=0x8000)
        asm.push("SRC")
        asm.hlt()
        asm.label("SRC")
        asm.dw(0x4242)

        c = run_program(asm)
        assert c.peek(0x8000) == 0x4242
        assert c.memory.read_word(asm.runtime.stack_pointer) == 0x7FFE

    def test_push_rewrites_return_cell(self, run_program):
        """The call site writes its return address into the push body."""
        asm = Assembler()
        asm.push("SRC")
        asm.label("back")
        asm.hlt()
        asm.label("SRC")
        asm.dw(1)

        c = run_program(asm)
        assert c.memory.read_word(asm.runtime.push_return) == asm.address_of("back")


class TestPop:
    """Test POP."""

    def test_push_pop(self, start_program):
        asm = Assembler()
        asm.push("SRC")
        asm.pop("DST")
        asm.label("SRC")
        asm.dw(0x1234)
        asm.label("DST")
        asm.dw(0x0000)

        c = steps(start_program(asm), PUSH_STEPS + POP_STEPS)
        assert c.peek(asm.address_of("DST")) == 0x1234
        assert c.peek(asm.runtime.stack_pointer) == -2  # back to $FFFE
        assert c.ip == asm.address_of("SRC")

    def test_pop_increments_sp_by_two(self, run_program):
        asm = Assembler()
        asm.push("SRC")
        asm.label("pushed")
        asm.pop("DST")
        asm.hlt()
        asm.label("SRC")
        asm.dw(3)
        asm.label("DST")
        asm.dw(0)

        c = run_program(asm)
        assert c.memory.read_word(asm.runtime.stack_pointer) == 0xFFFE

    def test_lifo_order(self, run_program):
        asm = Assembler()
        asm.push("A")
        asm.push("B")
        asm.push("C")
        asm.pop("X")
        asm.pop("Y")
        asm.pop("Z")
        asm.hlt()
        for name, value in (("A", 1), ("B", -2), ("C", 0x7FFF), ("X", 0), ("Y", 0), ("Z", 0)):
            asm.label(name)
            asm.dw(value)

        c = run_program(asm)
        assert c.peek(asm.address_of("X")) == 0x7FFF
        assert c.peek(asm.address_of("Y")) == -2
        assert c.peek(asm.address_of("Z")) == 1
        assert c.memory.read_word(asm.runtime.stack_pointer) == 0xFFFE

    def test_push_pop_zero(self, run_program):
        asm = Assembler()
        asm.push("SRC")
        asm.pop("DST")
        asm.hlt()
        asm.label("SRC")
        asm.dw(0)
        asm.label("DST")
        asm.dw(0x1111)

        c = run_program(asm)
        assert c.peek(asm.address_of("DST")) == 0

    def test_push_pop_in_loop(self, run_program):
        """Push 1..5 in a loop, then pop them back summing."""
        asm = Assembler()
        zero = asm.runtime.zero
        asm.mov("FIVE", "N")
        asm.label("push_loop")
        asm.push("N")
        asm.dec("N")
        asm.beq("N", zero, "pop_start")
        asm.jmp("push_loop")
        asm.label("pop_start")
        asm.mov("FIVE", "N")
        asm.label("pop_loop")
        asm.pop("V")
        asm.add("TOTAL", "V", "TOTAL")
        asm.dec("N")
        asm.beq("N", zero, "done")
        asm.jmp("pop_loop")
        asm.label("done")
        asm.hlt()
        for name, value in (("FIVE", 5), ("N", 0), ("V", 0), ("TOTAL", 0)):
            asm.label(name)
            asm.dw(value)

        c = run_program(asm)
        assert c.peek(asm.address_of("TOTAL")) == 15
        # The last value popped was the first pushed
        assert c.peek(asm.address_of("V")) == 5
        assert c.memory.read_word(asm.runtime.stack_pointer) == 0xFFFE


class TestReentrancy:
    """The push and pop bodies each have a single shared return cell."""

    def test_entering_body_without_patching_returns_to_last_caller(self, run_program):
        """
        Jumping into the push body without writing the return cell returns
        to whichever call site wrote it last.
        """
        asm = Assembler()
        rt = asm.runtime
        asm.push("A")
        # Runs twice: once after the real push, once after the raw entry
        asm.inc("COUNT")
        asm.beq("COUNT", "TWO", "done")
        asm.mov("B", rt.stage)
        asm.jmp(rt.push_entry)
        asm.label("done")
        asm.hlt()
        for name, value in (("A", 0x1111), ("B", 0x2222), ("COUNT", 0), ("TWO", 2)):
            asm.label(name)
            asm.dw(value)

        c = run_program(asm)
        assert c.peek(asm.address_of("COUNT")) == 2
        assert c.peek(0xFFFE) == 0x1111
        assert c.peek(0xFFFC) == 0x2222
        assert c.memory.read_word(rt.stack_pointer) == 0xFFFA

    def test_all_push_sites_share_one_cell(self):
        """Every call site patches the same return cell."""
        asm = Assembler()
        rt = asm.runtime
        first = asm.pc
        asm.push("A")
        second = asm.pc
        asm.push("A")
        asm.hlt()
        asm.label("A")
        asm.dw(0)
        image = asm.assemble()

        # Second instruction of each call site copies the return address
        for site in (first, second):
            assert Instruction.decode(image, site + INSTRUCTION_SIZE).c == rt.push_return
