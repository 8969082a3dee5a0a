"""
SBNZ SDK Error Hierarchy
========================

This module defines the exception hierarchy for the SBNZ SDK. All
exceptions inherit from SbnzError, allowing callers to catch all
SDK-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
SbnzError (base)
└── AssemblerError (assembler-related)
    ├── UndefinedSymbolError - label referenced but never defined
    ├── DuplicateSymbolError - label defined more than once
    ├── AddressRangeError - address operand outside 0..$FFFF
    └── ProgramSizeError - program does not fit in memory

The execution engine never raises: every machine state is valid and
every address is in range by construction. Only the assembler reports
errors, and only for mistakes in the program being built.

Error messages follow this format:
    error: description
    hint: suggestion for fixing (when available)

Copyright (c) 2025 SBNZ SDK Contributors
"""

from typing import Iterable, Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class SbnzError(Exception):
    """
    Base exception for all SBNZ SDK errors.

        try:
            image = asm.assemble()
        except SbnzError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(SbnzError):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        hint: A suggestion for fixing the error (optional)
    """

    def __init__(self, message: str, hint: Optional[str] = None):
        self.message = message
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with its hint.

        Example output:
            error: undefined symbol 'lopp'
            hint: did you mean 'loop'?
        """
        parts = [f"error: {self.message}"]
        if self.hint:
            parts.append(f"hint: {self.hint}")
        return "\n".join(parts)


class UndefinedSymbolError(AssemblerError):
    """
    Reference to one or more labels that were never defined.

    Raised when the program is finalized and a label still has pending
    patch sites. All missing labels are reported together so a single
    run shows every typo.

    The assembler suggests similarly-named labels when it can find any.
    """

    def __init__(
        self,
        symbols: Iterable[str],
        hint: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbols = list(symbols)
        self.symbol = self.symbols[0] if self.symbols else ""
        self.similar_symbols = similar_symbols or []

        # Auto-generate hint if similar symbols found
        if not hint and self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        if len(self.symbols) == 1:
            message = f"undefined symbol '{self.symbol}'"
        else:
            names = ", ".join(f"'{s}'" for s in self.symbols)
            message = f"undefined symbols {names}"

        super().__init__(message, hint=hint)


class DuplicateSymbolError(AssemblerError):
    """
    Label defined more than once.

    Includes the address of the original definition so the earlier
    binding can be found in a listing.
    """

    def __init__(self, symbol: str, original_address: Optional[int] = None):
        self.symbol = symbol
        self.original_address = original_address

        hint = None
        if original_address is not None:
            hint = f"'{symbol}' was first defined at ${original_address:04X}"

        super().__init__(f"duplicate symbol '{symbol}'", hint=hint)


class AddressRangeError(AssemblerError):
    """
    Address or data value does not fit in 16 bits.

    Addresses must be in $0000-$FFFF. Data words may also be given as
    negative values down to -$8000, which are stored in two's complement.
    """

    def __init__(self, value: int, what: str = "address"):
        self.value = value
        super().__init__(
            f"{what} {value} is out of range",
            hint="addresses are 16 bits wide ($0000-$FFFF)",
        )


class ProgramSizeError(AssemblerError):
    """The program grew past the end of the 64KB address space."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"program size {size} exceeds memory size {limit}",
        )
