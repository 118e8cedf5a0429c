"""
MemoryBus -- the 64 KB address space of the ZX81.

Memory map
----------

===========  ======  ==========  ======================================
Range        Size    Contents    Notes
===========  ======  ==========  ======================================
0x0000-1FFF  8 KB    ROM         Read-only
0x2000-3FFF  8 KB    ROM ghost   Mirror of 0x0000-0x1FFF, read-only
0x4000-FFFF  48 KB   RAM         Writable
===========  ======  ==========  ======================================

Floating bus
------------
Opcode fetches at 0x8000 and above are served from ``address & 0x7FFF``
and only return the stored byte when its bit 6 is set; otherwise the CPU
sees 0x00 (NOP).  This is how the video hardware "executes" the display
file in upper memory.  Plain data reads never see this behaviour.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class MemoryBus:
    """ROM + RAM address space with ghosting and the floating-bus fetch.

    Parameters
    ----------
    rom:
        The 8 KB system ROM image.

    Raises
    ------
    ValueError
        If *rom* is not exactly :attr:`ROM_SIZE` bytes.
    """

    ADDRESS_SPACE: int = 0x10000
    ADDRESS_MASK: int = 0xFFFF

    ROM_SIZE: int = 0x2000
    RAM_START: int = 0x4000

    FLOATING_BUS_START: int = 0x8000
    FLOATING_BUS_MASK: int = 0x7FFF
    FLOATING_BUS_VALID_BIT: int = 0x40

    # DISPLAY-5: the ROM routine that counts scanlines to generate video.
    # Redraw is done by the host, so it is patched to return immediately.
    DISPLAY_ROUTINE_PATCH: int = 0x02B5
    RET_OPCODE: int = 0xC9

    # System variable holding the address of the display file.
    D_FILE: int = 0x400C

    # 64 characters x 8 rows of bitmap data.
    CHARSET_ADDRESS: int = 0x1E00
    CHARSET_SIZE: int = 64 * 8

    def __init__(self, rom: bytes) -> None:
        if len(rom) != self.ROM_SIZE:
            raise ValueError(
                f"ROM image must be {self.ROM_SIZE} bytes, got {len(rom)}"
            )
        self._rom: bytes = bytes(rom)
        self._memory: bytearray = bytearray(self.ADDRESS_SPACE)
        self.setup()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def setup(self) -> None:
        """Return the address space to its power-on state.

        RAM is cleared, the ROM is copied to 0x0000 and ghosted at 0x2000,
        and the display routine is patched to ``RET`` in both copies.
        """
        mem = self._memory
        mem[self.RAM_START:] = bytes(self.ADDRESS_SPACE - self.RAM_START)

        rom_size = self.ROM_SIZE
        mem[0:rom_size] = self._rom
        mem[rom_size:2 * rom_size] = self._rom

        mem[self.DISPLAY_ROUTINE_PATCH] = self.RET_OPCODE
        mem[self.DISPLAY_ROUTINE_PATCH + rom_size] = self.RET_OPCODE

        logger.debug("Memory bus reset (ROM ghosted at 0x%04X)", rom_size)

    # ------------------------------------------------------------------
    # CPU access
    # ------------------------------------------------------------------

    def fetch(self, address: int) -> int:
        """Fetch an opcode byte, applying the floating-bus rule above 0x7FFF."""
        if address < self.FLOATING_BUS_START:
            return self._memory[address]
        b = self._memory[address & self.FLOATING_BUS_MASK]
        return b if b & self.FLOATING_BUS_VALID_BIT else 0

    def read(self, address: int) -> int:
        return self._memory[address]

    def write(self, address: int, value: int) -> None:
        # Writes to the ROM and its ghost are discarded.
        if address >= self.RAM_START:
            self._memory[address] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Read a little-endian 16-bit value; the high byte wraps at 64 KB."""
        mem = self._memory
        return mem[address & self.ADDRESS_MASK] | (
            mem[(address + 1) & self.ADDRESS_MASK] << 8
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def load(self, address: int, data: bytes) -> None:
        """Copy *data* into memory starting at *address*.

        Each byte goes through :meth:`write`, so bytes landing in the ROM
        window are dropped.  Addresses wrap at 64 KB.
        """
        for offset, value in enumerate(data):
            self.write((address + offset) & self.ADDRESS_MASK, value)

    def display_file_address(self) -> int:
        """The address stored in the D_FILE system variable."""
        return self.read_word(self.D_FILE)

    def charset(self) -> bytes:
        """The character bitmaps from the unpatched ROM image."""
        start = self.CHARSET_ADDRESS
        return self._rom[start:start + self.CHARSET_SIZE]

    @property
    def rom(self) -> bytes:
        """The ROM image this bus was built from."""
        return self._rom

    def __len__(self) -> int:
        return self.ADDRESS_SPACE

    def __repr__(self) -> str:
        return (
            f"MemoryBus(rom={self.ROM_SIZE}, "
            f"ram=0x{self.RAM_START:04X}-0x{self.ADDRESS_MASK:04X}, "
            f"d_file=0x{self.display_file_address():04X})"
        )
