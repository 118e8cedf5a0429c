"""
KeyboardMatrix -- the ZX81's 8 x 5 key matrix.

The keyboard is read with ``IN A,(port)`` where bit 0 of the port is
clear.  The high byte of the port selects the half-row: the first zero
bit (scanning from bit 0) picks the row.  Rows are active-low: a cleared
bit in the returned byte means the key in that column is held.

===  =======================  ===  =======================
Row  Columns (bit 0 -> 4)      Row  Columns (bit 0 -> 4)
===  =======================  ===  =======================
0    SHIFT Z X C V            4    0 9 8 7 6
1    A S D F G                5    P O I U Y
2    Q W E R T                6    NEWLINE L K J H
3    1 2 3 4 5                7    SPACE . M N B
===  =======================  ===  =======================

Scan codes pack the row in bits 5-7 and a one-hot column mask in bits
0-4, so a single byte describes one physical key.
"""

from __future__ import annotations

import logging
from typing import Hashable, Mapping, Optional

logger = logging.getLogger(__name__)


ROW_COUNT: int = 8
COLUMN_MASK: int = 0x1F
ROW_SHIFT: int = 5

# Value returned when a port read selects no row.
NO_ROW_SELECTED: int = 0xFF


def scan_code(row: int, column_mask: int) -> int:
    """Encode a matrix position as ``row << 5 | column_mask``.

    Raises:
        ValueError: If *row* is not 0..7 or *column_mask* is not a single
            bit within the low five bits.
    """
    if not 0 <= row < ROW_COUNT:
        raise ValueError(f"row must be 0..{ROW_COUNT - 1}, got {row}")
    if column_mask <= 0 or column_mask & ~COLUMN_MASK or column_mask & (column_mask - 1):
        raise ValueError(f"column mask must be one of 1, 2, 4, 8, 16, got {column_mask}")
    return (row << ROW_SHIFT) | column_mask


class KeyboardMatrix:
    """Row state table plus the host-key -> scan-code lookup.

    Parameters
    ----------
    keymap:
        Mapping from an opaque host key identifier to an encoded scan code
        (see :func:`scan_code`).  Keys missing from the map are inert.
    delete_key:
        Optional host key identifier for the compound RUBOUT key, which
        presses SHIFT (row 0, bit 0) and 0 (row 4, bit 0) together.
    """

    # Row/column pairs held down by the compound delete key.
    DELETE_POSITIONS: tuple[tuple[int, int], ...] = ((0, 0x01), (4, 0x01))

    def __init__(
        self,
        keymap: Mapping[Hashable, int],
        delete_key: Optional[Hashable] = None,
    ) -> None:
        self._keymap: dict[Hashable, int] = dict(keymap)
        self._delete_key: Optional[Hashable] = delete_key
        self._rows: bytearray = bytearray(ROW_COUNT)
        self.reset()

        logger.info(
            "KeyboardMatrix: %d mapped keys, delete key %s",
            len(self._keymap),
            "set" if delete_key is not None else "unset",
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Release every key."""
        for i in range(ROW_COUNT):
            self._rows[i] = 0xFF

    @property
    def rows(self) -> bytes:
        """Snapshot of the eight row bytes."""
        return bytes(self._rows)

    def lookup(self, key: Hashable) -> Optional[int]:
        """Return the scan code for *key*, or ``None`` if it is unmapped."""
        return self._keymap.get(key)

    # ------------------------------------------------------------------
    # Port I/O
    # ------------------------------------------------------------------

    def port_read(self, port: int) -> int:
        """Return the row selected by the high byte of *port*.

        Only meaningful for ports with bit 0 clear; the caller does the
        device decoding.
        """
        select = (port >> 8) & 0xFF
        for i in range(ROW_COUNT):
            if not select & 1:
                return self._rows[i]
            select >>= 1
        return NO_ROW_SELECTED

    # ------------------------------------------------------------------
    # Host key transitions
    # ------------------------------------------------------------------

    def key_down(self, key: Hashable) -> bool:
        """Press *key*.  Returns ``False`` for unmapped keys."""
        if self._delete_key is not None and key == self._delete_key:
            for row, mask in self.DELETE_POSITIONS:
                self._rows[row] &= ~mask & 0xFF
            return True

        code = self._keymap.get(key)
        if code is None:
            return False
        self._rows[code >> ROW_SHIFT] &= ~(code & COLUMN_MASK) & 0xFF
        return True

    def key_up(self, key: Hashable) -> bool:
        """Release *key*.  Returns ``False`` for unmapped keys."""
        if self._delete_key is not None and key == self._delete_key:
            for row, mask in self.DELETE_POSITIONS:
                self._rows[row] |= mask
            return True

        code = self._keymap.get(key)
        if code is None:
            return False
        self._rows[code >> ROW_SHIFT] |= code & COLUMN_MASK
        return True

    def __repr__(self) -> str:
        rows = " ".join(f"{r:02X}" for r in self._rows)
        return f"KeyboardMatrix(rows=[{rows}])"
