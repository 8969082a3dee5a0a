"""
Symbol Table and Relocator
==========================

The relocator owns the program being built: the output buffer, the
emission cursor (pc), the symbol table and the list of pending forward
references.

Instruction fields are either literal addresses (int) or symbolic
addresses (Label). A Label that is already defined is written straight
into the buffer. A Label that is not yet defined is written as the HALT
placeholder and its position is recorded; finalize() overwrites every
recorded position once all labels are known:

    pc=$0020  emit_address(Label("loop_end"))   -> FF FF, pending[loop_end]=[$0020]
    pc=$0048  define_label("loop_end")          -> symbols[loop_end]=$0048
    finalize()                                  -> bytes at $0020 become 00 48

Finalization fails loudly on labels that were referenced but never
defined, and define_label() refuses to rebind a name.

Copyright (c) 2025 SBNZ SDK Contributors
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from sbnz_sdk.cpu import HALT, MEMORY_SIZE, pack_word
from sbnz_sdk.errors import (
    AddressRangeError,
    AssemblerError,
    DuplicateSymbolError,
    ProgramSizeError,
    UndefinedSymbolError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Operand Types
# =============================================================================

@dataclass(frozen=True)
class Label:
    """Symbolic name for an address."""
    name: str

    def __str__(self) -> str:
        return self.name


# An instruction field: a resolved address or a label resolved on demand
AddressRef = Union[int, Label]


def as_ref(value: Union[int, str, Label]) -> AddressRef:
    """Accept plain strings as label names."""
    if isinstance(value, str):
        return Label(value)
    return value


# =============================================================================
# Symbol Table Entry
# =============================================================================

@dataclass
class Symbol:
    """
    Symbol table entry.

    Attributes:
        name: Label name
        address: Program counter at the point of definition
    """
    name: str
    address: int


# =============================================================================
# Relocator
# =============================================================================

class Relocator:
    """
    Output buffer, symbol table and forward-reference patching.

    Usage:
        rel = Relocator()
        rel.emit_address(Label("data"))   # forward reference
        rel.define_label("data")
        rel.emit_word(0x1234)
        image = rel.finalize()
    """

    def __init__(self, size_limit: int = MEMORY_SIZE):
        self._code = bytearray()
        self._size_limit = size_limit
        self._symbols: dict[str, Symbol] = {}
        # Label name -> patch sites, in the order the references were made
        self._pending: dict[str, list[int]] = {}
        self._image: Optional[bytes] = None

    # =========================================================================
    # Public Interface
    # =========================================================================

    @property
    def pc(self) -> int:
        """Emission cursor: address of the next byte to be emitted."""
        return len(self._code)

    @property
    def finalized(self) -> bool:
        return self._image is not None

    @property
    def symbols(self) -> dict[str, int]:
        """Copy of the symbol table as name -> address."""
        return {name: sym.address for name, sym in self._symbols.items()}

    @property
    def pending(self) -> dict[str, list[int]]:
        """Copy of the unresolved reference table as name -> patch sites."""
        return {name: list(sites) for name, sites in self._pending.items()}

    def define_label(self, name: str) -> Label:
        """
        Bind name to the current pc.

        Raises:
            DuplicateSymbolError: If name is already bound
        """
        self._check_open()
        existing = self._symbols.get(name)
        if existing is not None:
            raise DuplicateSymbolError(name, original_address=existing.address)
        self._symbols[name] = Symbol(name=name, address=self.pc)
        logger.debug(f"Label '{name}' = ${self.pc:04X}")
        return Label(name)

    def resolve(self, name: str) -> int:
        """
        Return the address of name, or HALT as a placeholder.

        When name is not yet defined the current pc is recorded as a patch
        site, so resolve() must be called right before the placeholder is
        emitted at pc.
        """
        self._check_open()
        sym = self._symbols.get(name)
        if sym is not None:
            return sym.address
        self._pending.setdefault(name, []).append(self.pc)
        return HALT

    def address_of(self, name: str) -> int:
        """
        Look up a defined label without recording a reference.

        Raises:
            UndefinedSymbolError: If name is not defined
        """
        sym = self._symbols.get(name)
        if sym is None:
            raise UndefinedSymbolError([name], similar_symbols=self._find_similar_symbols(name))
        return sym.address

    # =========================================================================
    # Code Emission Helpers
    # =========================================================================

    def emit_byte(self, value: int) -> None:
        """Emit a single byte to the output."""
        self._check_open()
        if not -0x80 <= value <= 0xFF:
            raise AddressRangeError(value, what="byte")
        self._check_size(1)
        self._code.append(value & 0xFF)

    def emit_word(self, value: int) -> None:
        """Emit a 16-bit word to the output (big-endian)."""
        self._check_open()
        if not -0x8000 <= value <= 0xFFFF:
            raise AddressRangeError(value, what="word")
        self._check_size(2)
        self._code.extend(pack_word(value))

    def emit_address(self, ref: AddressRef) -> None:
        """Emit an address field, recording a patch site for undefined labels."""
        self.emit_addresses([ref])

    def emit_addresses(self, refs: Sequence[AddressRef]) -> None:
        """
        Emit several address fields as one unit.

        Every field is checked before any is written, so a rejected
        instruction leaves pc and the pending references unchanged.

        Raises:
            AddressRangeError: If an int field is outside $0000-$FFFF
            ProgramSizeError: If the fields do not fit
        """
        self._check_open()
        for ref in refs:
            self.check_address(ref)
        self._check_size(2 * len(refs))
        for ref in refs:
            if isinstance(ref, Label):
                value = self.resolve(ref.name)
            else:
                value = ref
            self._code.extend(pack_word(value))

    @staticmethod
    def check_address(ref: AddressRef) -> None:
        """
        Check an address field without emitting it.

        Raises:
            AddressRangeError: If ref is an int outside $0000-$FFFF
        """
        if not isinstance(ref, Label) and not 0 <= ref <= HALT:
            raise AddressRangeError(ref)

    # =========================================================================
    # Finalization
    # =========================================================================

    def finalize(self) -> bytes:
        """
        Patch every pending reference and return the program image.

        After this call the relocator is sealed. Calling finalize() again
        returns the same image.

        Raises:
            UndefinedSymbolError: If any referenced label was never defined
        """
        if self._image is not None:
            return self._image

        missing = [name for name in self._pending if name not in self._symbols]
        if missing:
            similar: list[str] = []
            for name in missing:
                similar.extend(s for s in self._find_similar_symbols(name) if s not in similar)
            raise UndefinedSymbolError(missing, similar_symbols=similar)

        for name, sites in self._pending.items():
            address = self._symbols[name].address
            patch = pack_word(address)
            for site in sites:
                self._code[site:site + 2] = patch
            logger.debug(f"Patched {len(sites)} reference(s) to '{name}' with ${address:04X}")
        self._pending.clear()

        self._image = bytes(self._code)
        logger.debug(f"Finalized image: {len(self._image)} bytes, {len(self._symbols)} symbols")
        return self._image

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _check_open(self) -> None:
        if self._image is not None:
            raise AssemblerError(
                "program already assembled",
                hint="create a new assembler for each program",
            )

    def _check_size(self, count: int) -> None:
        if self.pc + count > self._size_limit:
            raise ProgramSizeError(self.pc + count, self._size_limit)

    def _find_similar_symbols(self, name: str) -> list[str]:
        """
        Find symbols with similar names for error hints.

        Uses simple edit distance heuristic.
        """
        name_lower = name.lower()
        similar = []

        for sym in self._symbols:
            if sym.startswith("__"):
                continue
            sym_lower = sym.lower()
            # Check for simple typos: off by one char, case difference
            if (
                sym_lower == name_lower or
                abs(len(sym) - len(name)) <= 1 and
                _edit_distance(name_lower, sym_lower) <= 2
            ):
                similar.append(sym)

        return similar[:3]


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1
    previous = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current = [i + 1]
        for j, c2 in enumerate(s2):
            current.append(min(
                previous[j + 1] + 1,
                current[j] + 1,
                previous[j] + (c1 != c2),
            ))
        previous = current
    return previous[-1]
