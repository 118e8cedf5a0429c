"""
ROM loading service for the ZX81 emulator.

Responsibilities:
  - Read the 8 KB system ROM image from disk and validate its size.
  - Describe a ROM image (checksums, signature check) for ``--info``.
"""

from __future__ import annotations

import hashlib
import os
import zlib

from zx81emu.core.memory_bus import MemoryBus


# ---------------------------------------------------------------------------
# ROM constants
# ---------------------------------------------------------------------------

ROM_SIZE: int = MemoryBus.ROM_SIZE

# Every ZX81 ROM revision starts with ``OUT ($FD),A`` (disable NMI generator).
_RESET_SIGNATURE: bytes = b"\xD3\xFD"


class RomBytesService:
    """Static utility for loading ROM images and describing them."""

    # -- reading -----------------------------------------------------------

    @staticmethod
    def read(path: str) -> bytes:
        """Read a file from *path* without validation.

        Raises:
            FileNotFoundError: If *path* does not exist.
            OSError: On general I/O failure.
        """
        with open(path, "rb") as fh:
            return fh.read()

    @staticmethod
    def load(path: str) -> bytes:
        """Read and validate a system ROM image.

        Returns:
            Exactly :data:`ROM_SIZE` bytes.

        Raises:
            FileNotFoundError: If *path* does not exist.
            ValueError: If the file is not 8192 bytes long.
        """
        data = RomBytesService.read(path)
        if len(data) != ROM_SIZE:
            raise ValueError(
                f"{os.path.basename(path)}: ROM image must be {ROM_SIZE} bytes, "
                f"got {len(data)}"
            )
        return data

    # -- inspection --------------------------------------------------------

    @staticmethod
    def looks_like_zx81(data: bytes) -> bool:
        """Return ``True`` if *data* starts like a ZX81 ROM and has a blank space glyph."""
        if len(data) != ROM_SIZE:
            return False
        charset = MemoryBus.CHARSET_ADDRESS
        return (
            data.startswith(_RESET_SIGNATURE)
            and data[charset:charset + 8] == bytes(8)
        )

    @staticmethod
    def describe(path: str) -> dict[str, str]:
        """Return a human-readable description of the ROM file at *path*.

        Keys: ``file``, ``size``, ``valid_size``, ``crc32``, ``md5``,
        ``zx81_signature``, ``charset``, ``display_patch``.
        """
        data = RomBytesService.read(path)
        patch = MemoryBus.DISPLAY_ROUTINE_PATCH
        original = f"0x{data[patch]:02X}" if len(data) > patch else "n/a"

        return {
            "file": os.path.basename(path),
            "size": str(len(data)),
            "valid_size": "yes" if len(data) == ROM_SIZE else "no",
            "crc32": f"{zlib.crc32(data) & 0xFFFFFFFF:08X}",
            "md5": hashlib.md5(data).hexdigest(),
            "zx81_signature": "yes" if RomBytesService.looks_like_zx81(data) else "no",
            "charset": f"0x{MemoryBus.CHARSET_ADDRESS:04X}",
            "display_patch": f"0x{patch:04X} ({original} -> RET)",
        }
