"""
SBNZ CPU Emulator
=================

Interpreter for the single SBNZ instruction with an instrumentation hook.

The machine has no register file beyond the instruction pointer. All
state lives in memory: operands, results, and the program itself, which
may be rewritten while it runs (the stack protocol depends on this).

Each step:
    1. Fetch fields A, B, C, D from the 8 bytes at IP
    2. Read the signed 16-bit values at A and B
    3. Store r = a - b (wrapping) at C
    4. IP = D if r != 0, else IP + 8

D is fetched after the store, so an instruction whose C field points at
its own D field branches to the value it just wrote.

The only way to stop is to branch to HALT ($FFFF). Once there, step() is
a no-op. Programs that never get there run forever; callers bound them
with run(max_steps).

Copyright (c) 2025 SBNZ SDK Contributors
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from sbnz_sdk.cpu import ADDRESS_MASK, HALT, INSTRUCTION_SIZE, WORD_SIZE, Instruction, to_signed
from sbnz_sdk.emulator.memory import Memory

logger = logging.getLogger(__name__)


@dataclass
class CPUState:
    """
    Complete CPU state.

    - ip: 16-bit instruction pointer
    - steps: instructions executed since the last reset
    """
    ip: int = 0
    steps: int = 0


class Computer:
    """
    SBNZ computer: one Memory plus an instruction pointer.

    Instrumentation:
        on_instruction(ip, instruction) -> bool is called by run() before
        each instruction executes. Returning False stops run() without
        executing that instruction.

    Example:
        >>> computer = Computer()
        >>> computer.load_memory(image)
        >>> while not computer.halted:
        ...     computer.step()
        >>> print(computer.peek(0x0100))
    """

    def __init__(self, memory: Optional[Memory] = None):
        """
        Initialize a computer.

        Args:
            memory: Memory to run on. A fresh zeroed Memory is created if
                    not given.
        """
        self.memory = memory if memory is not None else Memory()
        self.state = CPUState()

        # on_instruction(ip, instruction) -> bool: return False to stop run()
        self.on_instruction: Optional[Callable[[int, Instruction], bool]] = None

    # ========================================
    # Registers
    # ========================================

    @property
    def ip(self) -> int:
        """Instruction pointer (16-bit)."""
        return self.state.ip

    @ip.setter
    def ip(self, value: int) -> None:
        self.state.ip = value & ADDRESS_MASK

    @property
    def steps(self) -> int:
        """Instructions executed since the last reset."""
        return self.state.steps

    @property
    def halted(self) -> bool:
        """True when the instruction pointer is at the HALT address."""
        return self.state.ip == HALT

    # ========================================
    # Memory Access
    # ========================================

    def load_memory(self, data: bytes) -> None:
        """
        Load a program image at address 0.

        Memory past the end of the image is left untouched.
        """
        self.memory.load(data)

    def peek(self, address: int) -> int:
        """Read the signed 16-bit cell at address."""
        return to_signed(self.memory.read_word(address))

    def poke(self, address: int, value: int) -> None:
        """Write a 16-bit cell at address (signed or unsigned value)."""
        self.memory.write_word(address, value)

    def fetch(self, address: Optional[int] = None) -> Instruction:
        """Decode the instruction at address (default: at IP)."""
        if address is None:
            address = self.state.ip
        read_word = self.memory.read_word
        return Instruction(
            read_word(address),
            read_word(address + WORD_SIZE),
            read_word(address + 2 * WORD_SIZE),
            read_word(address + 3 * WORD_SIZE),
        )

    # ========================================
    # Execution
    # ========================================

    def reset(self) -> None:
        """Set IP to 0 and clear the step counter. Memory is kept."""
        self.state = CPUState()

    def step(self) -> None:
        """Execute one instruction, unless halted."""
        if self.halted:
            return

        ip = self.state.ip
        inst = self.fetch(ip)
        result = to_signed(self.peek(inst.a) - self.peek(inst.b))
        self.memory.write_word(inst.c, result)

        if result != 0:
            # D is read after the store, so an instruction may retarget itself
            self.state.ip = self.memory.read_word(ip + 3 * WORD_SIZE)
        else:
            self.state.ip = (self.state.ip + INSTRUCTION_SIZE) & ADDRESS_MASK
        self.state.steps += 1

        if self.halted:
            logger.debug(f"Halted after {self.state.steps} steps")

    def run(self, max_steps: int) -> int:
        """
        Step until halted, the hook asks to stop, or max_steps is reached.

        Args:
            max_steps: Upper bound on instructions to execute

        Returns:
            Number of instructions executed by this call
        """
        executed = 0
        while executed < max_steps and not self.halted:
            if self.on_instruction and not self.on_instruction(self.ip, self.fetch()):
                break
            self.step()
            executed += 1
        return executed
