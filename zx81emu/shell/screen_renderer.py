"""
Screen renderer for the ZX81 emulator.
Redraws the 512 x 384 screen from the display file every frame.

The character ROM is rasterised once into a glyph atlas (see
:mod:`zx81emu.core.glyph_atlas`); each redraw walks the display file and
blits one 16 x 16 atlas cell per character.  There is no dirty tracking:
all 768 cells are redrawn every frame.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
import pygame

from zx81emu.core.display_file import COLUMNS, ROWS, walk_display_file
from zx81emu.core.glyph_atlas import CELL_SIZE, build_glyph_pixels, cell_x

if TYPE_CHECKING:
    from zx81emu.core.memory_bus import MemoryBus

logger = logging.getLogger(__name__)


class GlyphAtlas:
    """The rasterised character set as a pygame Surface.

    Parameters
    ----------
    charset:
        512 bytes of character bitmaps from the ROM.

    Raises
    ------
    ValueError
        If *charset* has the wrong size.
    pygame.error
        If the surface cannot be created.
    """

    def __init__(self, charset: bytes) -> None:
        self._pixels: np.ndarray = build_glyph_pixels(charset)

        # pygame surfarray expects (W, H, 3) -- transpose width and height.
        surface = pygame.surfarray.make_surface(self._pixels.transpose(1, 0, 2))
        self._pixels.setflags(write=False)

        # Match the display's pixel format for fast blits, once there is one.
        if pygame.display.get_init() and pygame.display.get_surface() is not None:
            surface = surface.convert()
        self._surface: pygame.Surface = surface

        logger.info("GlyphAtlas: %dx%d", *self._surface.get_size())

    @property
    def pixels(self) -> np.ndarray:
        """Read-only (y, x, rgb) pixel array the surface was built from."""
        return self._pixels

    @property
    def surface(self) -> pygame.Surface:
        return self._surface

    def cell(self, code: int) -> pygame.Rect:
        """Source rectangle of the glyph for character *code*."""
        return pygame.Rect(cell_x(code), 0, CELL_SIZE, CELL_SIZE)


class ScreenRenderer:
    """Draw the display file into a reusable pygame Surface.

    Parameters
    ----------
    memory:
        The address space holding the display file.
    atlas:
        The glyph atlas to blit from.
    """

    WIDTH: int = COLUMNS * CELL_SIZE   # 512
    HEIGHT: int = ROWS * CELL_SIZE     # 384

    def __init__(self, memory: MemoryBus, atlas: GlyphAtlas) -> None:
        self._memory = memory
        self._atlas = atlas
        self._surface: pygame.Surface = pygame.Surface((self.WIDTH, self.HEIGHT))
        if pygame.display.get_init() and pygame.display.get_surface() is not None:
            self._surface = self._surface.convert()

        # Precomputed source rectangles, one per character code.
        self._cells: list[pygame.Rect] = [atlas.cell(code) for code in range(256)]

        logger.info("ScreenRenderer: %dx%d", self.WIDTH, self.HEIGHT)

    @property
    def width(self) -> int:
        return self.WIDTH

    @property
    def height(self) -> int:
        return self.HEIGHT

    @property
    def surface(self) -> pygame.Surface:
        """The internal pygame Surface (updated on each :meth:`render` call)."""
        return self._surface

    def render(self) -> pygame.Surface:
        """Redraw every character cell and return the surface."""
        source = self._atlas.surface
        cells = self._cells
        self._surface.blits(
            [
                (source, (col * CELL_SIZE, row * CELL_SIZE), cells[code])
                for row, col, code in walk_display_file(self._memory)
            ],
            doreturn=False,
        )
        return self._surface
