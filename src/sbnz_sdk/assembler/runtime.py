"""
Runtime Support Block
=====================

Every program starts with a fixed preamble that the macros rely on:

    $0000  JMP __start
    $0008  __ONE     DW 1
    $000A  __ZERO    DW 0
    $000C  __JUNK    DW 0          scratch cell
    $000E  __STAGE   DW 0          value in transit for push/pop
    $0010  __SP      DW stack_top  stack grows downward
    $0012  __PUSH    push subroutine body
           __POP     pop subroutine body
           __start   first user instruction

The push and pop bodies are shared by every call site. A call site
writes its return address into the body's final jump (__PUSH_RET or
__POP_RET) and jumps in. Since there is one return cell per body, a push
or pop must finish before another begins: the protocol is not reentrant.

Copyright (c) 2025 SBNZ SDK Contributors
"""

from dataclasses import dataclass

# Default initial stack pointer: the last full cell of memory
DEFAULT_STACK_TOP = 0xFFFE

# Prefix of preamble and generated label names
RESERVED_PREFIX = "__"

# Preamble label names
ONE = "__ONE"
ZERO = "__ZERO"
SCRATCH = "__JUNK"
STAGE = "__STAGE"
STACK_POINTER = "__SP"
PUSH_ENTRY = "__PUSH"
PUSH_SLOT = "__PUSH_SLOT"
PUSH_RETURN = "__PUSH_RET"
POP_ENTRY = "__POP"
POP_SLOT = "__POP_SLOT"
POP_RETURN = "__POP_RET"
START = "__start"


@dataclass(frozen=True)
class RuntimeSupport:
    """
    Addresses established by the preamble.

    Attributes:
        one: Cell holding 1
        zero: Cell holding 0
        scratch: Cell clobbered by macros
        stage: Staging cell for push/pop
        stack_pointer: Cell holding the address of the next free stack slot
        push_entry: First instruction of the push body
        push_slot: C field of the push store, rewritten with the stack pointer
        push_return: D field of the push body's return jump
        pop_entry: First instruction of the pop body
        pop_slot: A field of the pop load, rewritten with the stack pointer
        pop_return: D field of the pop body's return jump
        start: First address after the preamble
        stack_top: Initial stack pointer value
    """
    one: int
    zero: int
    scratch: int
    stage: int
    stack_pointer: int
    push_entry: int
    push_slot: int
    push_return: int
    pop_entry: int
    pop_slot: int
    pop_return: int
    start: int
    stack_top: int
