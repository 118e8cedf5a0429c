"""
Glyph atlas builder for the ZX81 character ROM.

The ROM holds 64 characters of 8 x 8 pixels, one byte per row with the
most significant bit leftmost.  The atlas doubles both axes (every source
pixel becomes a 2 x 2 block) and lays the 16 x 16 cells out in a single
strip, indexed by character code:

==============  =============================
Cells           Contents
==============  =============================
0-63            Normal glyphs (ink on paper)
64-127          Unused (black)
128-191         Inverse-video glyphs
192-255         Unused (black)
==============  =============================

so the glyph for display-file code ``c`` always starts at ``x = c * 16``.
"""

from __future__ import annotations

import numpy as np

GLYPH_COUNT: int = 64
SOURCE_SIZE: int = 8
SCALE: int = 2
CELL_SIZE: int = SOURCE_SIZE * SCALE  # 16

CELL_COUNT: int = 256
ATLAS_WIDTH: int = CELL_COUNT * CELL_SIZE  # 4096
ATLAS_HEIGHT: int = CELL_SIZE

# Inverse-video characters have bit 7 set in the display file.
INVERSE_CELL_OFFSET: int = 128

INK: tuple[int, int, int] = (0, 0, 0)
PAPER: tuple[int, int, int] = (255, 255, 255)


def build_glyph_pixels(charset: bytes) -> np.ndarray:
    """Rasterise *charset* into an RGB atlas.

    Args:
        charset: 512 bytes of glyph rows (64 glyphs x 8 rows).

    Returns:
        A new ``uint8`` array of shape ``(16, 4096, 3)`` in (y, x, rgb)
        order.

    Raises:
        ValueError: If *charset* is not 512 bytes long.
    """
    expected = GLYPH_COUNT * SOURCE_SIZE
    if len(charset) != expected:
        raise ValueError(f"charset must be {expected} bytes, got {len(charset)}")

    rows = np.frombuffer(bytes(charset), dtype=np.uint8).reshape(GLYPH_COUNT, SOURCE_SIZE)
    # (glyph, y, x), MSB first.
    bits = np.unpackbits(rows, axis=1).reshape(GLYPH_COUNT, SOURCE_SIZE, SOURCE_SIZE)
    bits = bits.repeat(SCALE, axis=1).repeat(SCALE, axis=2).astype(bool)

    # Lay the cells out side by side: (y, glyph * 16 + x).
    strip = bits.transpose(1, 0, 2).reshape(CELL_SIZE, GLYPH_COUNT * CELL_SIZE)

    ink = np.array(INK, dtype=np.uint8)
    paper = np.array(PAPER, dtype=np.uint8)

    pixels = np.zeros((ATLAS_HEIGHT, ATLAS_WIDTH, 3), dtype=np.uint8)
    width = GLYPH_COUNT * CELL_SIZE
    inverse_x = INVERSE_CELL_OFFSET * CELL_SIZE
    pixels[:, :width] = np.where(strip[..., None], ink, paper)
    pixels[:, inverse_x:inverse_x + width] = np.where(strip[..., None], paper, ink)
    return pixels


def cell_x(code: int) -> int:
    """Left edge of the atlas cell for display-file character *code*."""
    return (code & 0xFF) * CELL_SIZE
