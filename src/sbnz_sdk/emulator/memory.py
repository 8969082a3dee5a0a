"""
Memory Subsystem for the SBNZ Emulator
======================================

Memory Map:
    $0000-$FFFF  One flat RAM shared by code and data

There are no ROM regions, banks or I/O ports: any address may hold an
instruction or an operand. Cells are 16 bits wide and stored big-endian
in two consecutive bytes. A word access at $FFFF wraps, taking its low
byte from $0000.

Copyright (c) 2025 SBNZ SDK Contributors
"""

import logging

from sbnz_sdk.cpu import ADDRESS_MASK, MEMORY_SIZE

logger = logging.getLogger(__name__)


class Memory:
    """
    Flat 64KB byte-addressed memory.

    The buffer is allocated once and never replaced, so references held by
    the owning Computer stay valid across loads.
    """

    SIZE = MEMORY_SIZE

    def __init__(self):
        self._data = bytearray(self.SIZE)

    def read(self, address: int) -> int:
        """
        Read byte from memory.

        Args:
            address: 16-bit address (wrapped if larger)

        Returns:
            Byte value at address
        """
        return self._data[address & ADDRESS_MASK]

    def write(self, address: int, value: int) -> None:
        """
        Write byte to memory.

        Args:
            address: 16-bit address (wrapped if larger)
            value: Byte value to write (masked to 8 bits)
        """
        self._data[address & ADDRESS_MASK] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Read an unsigned big-endian 16-bit word."""
        high = self._data[address & ADDRESS_MASK]
        low = self._data[(address + 1) & ADDRESS_MASK]
        return (high << 8) | low

    def write_word(self, address: int, value: int) -> None:
        """Write a 16-bit word big-endian. Negative values are stored in two's complement."""
        self._data[address & ADDRESS_MASK] = (value >> 8) & 0xFF
        self._data[(address + 1) & ADDRESS_MASK] = value & 0xFF

    def load(self, data: bytes, address: int = 0) -> None:
        """
        Copy a byte image into memory starting at address.

        Bytes outside the image keep their previous values.

        Raises:
            ValueError: If the image does not fit between address and $FFFF
        """
        end = address + len(data)
        if address < 0 or end > self.SIZE:
            raise ValueError(
                f"image of {len(data)} bytes at ${address:04X} does not fit in memory"
            )
        self._data[address:end] = data
        logger.debug(f"Loaded {len(data)} bytes at ${address:04X}")

    def clear(self) -> None:
        """Zero the whole address space."""
        self._data[:] = bytes(self.SIZE)

    def snapshot(self, start: int = 0, length: int | None = None) -> bytes:
        """Return a copy of a region of memory (the whole space by default)."""
        if length is None:
            length = self.SIZE - start
        return bytes(self._data[start:start + length])

    def __len__(self) -> int:
        return self.SIZE
