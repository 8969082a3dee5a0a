"""
SBNZ SDK - Test Configuration
=============================

Shared fixtures for the test suite:

- computer: a fresh Computer with zeroed memory
- run_program: assemble, load and run an Assembler until it halts
- start_program: assemble, load and step past the preamble jump, leaving
  IP at the first user instruction for step-exact checks

Copyright (c) 2025 SBNZ SDK Contributors
"""

from typing import Callable

import pytest

from sbnz_sdk.assembler import Assembler
from sbnz_sdk.emulator import Computer

# Generous bound for the small programs used in tests
MAX_TEST_STEPS = 10_000


@pytest.fixture
def computer() -> Computer:
    """Fixture: Computer with zeroed memory and IP at 0."""
    return Computer()


@pytest.fixture
def run_program() -> Callable[[Assembler], Computer]:
    """
    Fixture: run an assembled program to completion.

    Fails the test if the program does not reach HALT within the bound.
    """
    def _run(asm: Assembler, max_steps: int = MAX_TEST_STEPS) -> Computer:
        c = Computer()
        c.load_memory(asm.assemble())
        c.run(max_steps)
        assert c.halted, f"program did not halt within {max_steps} steps (IP=${c.ip:04X})"
        return c
    return _run


@pytest.fixture
def start_program() -> Callable[[Assembler], Computer]:
    """Fixture: load a program and execute the jump to the user code."""
    def _start(asm: Assembler) -> Computer:
        c = Computer()
        c.load_memory(asm.assemble())
        c.step()
        assert c.ip == asm.runtime.start
        return c
    return _start
