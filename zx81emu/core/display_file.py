"""
Display-file walker.

The D_FILE system variable points at the leading NEWLINE (0x76) of the
display file.  Each of the 24 screen rows follows as 32 character codes
and a NEWLINE terminator, so cell ``(row, col)`` lives at::

    d_file + 1 + row * 33 + col

Terminators are skipped, not checked.  A bad D_FILE value renders garbage
rather than failing: address arithmetic wraps at 64 KB like the real bus.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from zx81emu.core.memory_bus import MemoryBus

ROWS: int = 24
COLUMNS: int = 32
NEWLINE: int = 0x76
ROW_STRIDE: int = COLUMNS + 1

# fmt: off
CHARACTER_SET: str = (
    " ▘▝▀▖▌▞▛▒▒▒\"£$:?"
    "()><=+-*/;,.0123"
    "456789ABCDEFGHIJ"
    "KLMNOPQRSTUVWXYZ"
)
# fmt: on

assert len(CHARACTER_SET) == 64

UNPRINTABLE: str = "?"


def walk_display_file(bus: MemoryBus) -> Iterator[tuple[int, int, int]]:
    """Yield ``(row, col, code)`` for every screen cell in display order."""
    mask = bus.ADDRESS_MASK
    addr = bus.display_file_address()
    for row in range(ROWS):
        for col in range(COLUMNS):
            addr = (addr + 1) & mask
            yield row, col, bus.read(addr)
        # skip the NEWLINE at the end of the row
        addr = (addr + 1) & mask


def decode_char(code: int) -> str:
    """Printable form of a display-file character code.

    Inverse-video codes decode to the same character as their normal
    counterpart.  Codes outside the two character blocks are unprintable.
    """
    if code & 0x40:
        return UNPRINTABLE
    return CHARACTER_SET[code & 0x3F]


def decode_text(bus: MemoryBus) -> list[str]:
    """Return the current screen as 24 strings of 32 characters."""
    lines: list[list[str]] = [[] for _ in range(ROWS)]
    for row, _col, code in walk_display_file(bus):
        lines[row].append(decode_char(code))
    return ["".join(line) for line in lines]
