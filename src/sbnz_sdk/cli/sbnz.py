"""
sbnz - SBNZ Emulator Command-Line Interface
===========================================

Usage Examples
--------------
Run the built-in demo (7 * 6 by repeated addition):
    $ sbnz demo 7 6

Show the assembled demo program and save its image:
    $ sbnz demo 7 6 --listing -o multiply.bin

Run an image, dumping the first 64 bytes of memory afterwards:
    $ sbnz run multiply.bin --dump 64

Trace every instruction:
    $ sbnz run multiply.bin --trace

Copyright (c) 2025 SBNZ SDK Contributors
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from sbnz_sdk import __version__
from sbnz_sdk.assembler import Assembler
from sbnz_sdk.cli.errors import ExitCode, handle_cli_exception
from sbnz_sdk.cpu import Instruction
from sbnz_sdk.emulator import Computer, format_listing, format_state

DEFAULT_MAX_STEPS = 1_000_000


class Context:
    """Shared context for CLI commands."""

    def __init__(self) -> None:
        self.verbose: bool = False

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.WARNING
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


# =============================================================================
# Demo Program
# =============================================================================

def build_multiply_program(count: int, factor: int) -> Assembler:
    """
    Build a program computing count * factor by repeated addition.

    The product is left in PRODUCT, then pushed and popped into COPY to
    exercise the stack protocol.
    """
    asm = Assembler()
    zero = asm.runtime.zero

    asm.mov(zero, "PRODUCT")
    asm.label("loop")
    asm.beq("COUNT", zero, "done")
    asm.add("FACTOR", "PRODUCT", "PRODUCT")
    asm.dec("COUNT")
    asm.jmp("loop")
    asm.label("done")
    asm.push("PRODUCT")
    asm.pop("COPY")
    asm.hlt()

    asm.label("COUNT")
    asm.dw(count)
    asm.label("FACTOR")
    asm.dw(factor)
    asm.label("PRODUCT")
    asm.dw(0)
    asm.label("COPY")
    asm.dw(0)
    return asm


def _listing_names(symbols: dict[str, int]) -> dict[int, str]:
    """Address -> name, preferring user labels over generated ones."""
    names: dict[int, str] = {}
    for name, address in symbols.items():
        generated = name.startswith("__label_")
        if address not in names or (not generated and names[address].startswith("__label_")):
            names[address] = name
    return names


def _trace(ip: int, inst: Instruction) -> bool:
    click.echo(f"${ip:04X}  {inst}")
    return True


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.version_option(version=__version__, prog_name="sbnz")
@pass_context
def main(ctx: Context, verbose: bool) -> None:
    """
    Emulator for the SBNZ one-instruction computer.

    SBNZ a, b, c, d stores mem[a] - mem[b] at c and jumps to d when the
    result is not zero. Jumping to $FFFF halts the machine.
    """
    ctx.verbose = verbose
    ctx.setup_logging()


# =============================================================================
# Run Command
# =============================================================================

@main.command()
@click.argument(
    "image",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-n", "--max-steps",
    type=click.IntRange(min=0),
    default=DEFAULT_MAX_STEPS,
    show_default=True,
    help="Stop after this many instructions",
)
@click.option(
    "-d", "--dump",
    type=click.IntRange(min=0),
    default=0,
    help="Dump this many bytes of memory after running",
)
@click.option(
    "-t", "--trace",
    is_flag=True,
    help="Print every instruction before it executes",
)
@pass_context
def run(ctx: Context, image: Path, max_steps: int, dump: int, trace: bool) -> None:
    """
    Load IMAGE at address 0 and run it until it halts.

    Exits with status 4 if the step limit is reached first.
    """
    try:
        computer = Computer()
        computer.load_memory(image.read_bytes())
        if trace:
            computer.on_instruction = _trace
        computer.run(max_steps)
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose)

    click.echo(format_state(computer, dump))
    if not computer.halted:
        click.echo(f"Error: not halted after {max_steps} steps", err=True)
        sys.exit(ExitCode.NOT_HALTED)


# =============================================================================
# Demo Command
# =============================================================================

@main.command()
@click.argument("count", type=click.IntRange(0, 0x7FFF), default=7)
@click.argument("factor", type=click.IntRange(-0x8000, 0x7FFF), default=6)
@click.option(
    "-l", "--listing",
    is_flag=True,
    help="Print the assembled program",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the program image to this file",
)
@pass_context
def demo(ctx: Context, count: int, factor: int, listing: bool, output: Optional[Path]) -> None:
    """
    Multiply COUNT by FACTOR using only SBNZ instructions.

    The product wraps to 16 bits, like every value on the machine.
    """
    try:
        asm = build_multiply_program(count, factor)
        image = asm.assemble()
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose, error_type="Assembly")

    if listing:
        click.echo(format_listing(image, start=asm.runtime.start, names=_listing_names(asm.symbols)))
    if output is not None:
        output.write_bytes(image)
        click.echo(f"Wrote {len(image)} bytes to {output}")

    computer = Computer()
    computer.load_memory(image)
    computer.run(DEFAULT_MAX_STEPS)
    if not computer.halted:
        click.echo(f"Error: not halted after {DEFAULT_MAX_STEPS} steps", err=True)
        sys.exit(ExitCode.NOT_HALTED)

    product = computer.peek(asm.address_of("PRODUCT"))
    copy = computer.peek(asm.address_of("COPY"))
    click.echo(f"{count} * {factor} = {product} (stack copy: {copy}, {computer.steps} steps)")


if __name__ == "__main__":
    main()
