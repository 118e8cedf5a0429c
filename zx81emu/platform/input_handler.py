"""
Input handler for the ZX81 emulator.
Maps pygame keyboard events onto the emulated keyboard matrix.

Keyboard layout
---------------

The PC keyboard is used positionally: each ZX81 key is typed with the PC
key carrying the same legend.

===================  ============================
PC key               ZX81 key
===================  ============================
Left / Right Shift   SHIFT
A-Z, 0-9             Same letter / digit
Return               NEWLINE
Space                SPACE
Period               .
Backspace            RUBOUT (SHIFT + 0)
Escape               Quit the emulator
===================  ============================

All other keys are ignored.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pygame

from zx81emu.core.keyboard_matrix import scan_code

if TYPE_CHECKING:
    from zx81emu.core.keyboard_matrix import KeyboardMatrix

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# pygame key -> scan code
# ---------------------------------------------------------------------------
# Rows are listed column 0 first (bit 0 of the row byte).

_MATRIX_LAYOUT: tuple[tuple[tuple[int, ...], ...], ...] = (
    ((pygame.K_LSHIFT, pygame.K_RSHIFT), (pygame.K_z,), (pygame.K_x,), (pygame.K_c,), (pygame.K_v,)),
    ((pygame.K_a,), (pygame.K_s,), (pygame.K_d,), (pygame.K_f,), (pygame.K_g,)),
    ((pygame.K_q,), (pygame.K_w,), (pygame.K_e,), (pygame.K_r,), (pygame.K_t,)),
    ((pygame.K_1,), (pygame.K_2,), (pygame.K_3,), (pygame.K_4,), (pygame.K_5,)),
    ((pygame.K_0,), (pygame.K_9,), (pygame.K_8,), (pygame.K_7,), (pygame.K_6,)),
    ((pygame.K_p,), (pygame.K_o,), (pygame.K_i,), (pygame.K_u,), (pygame.K_y,)),
    ((pygame.K_RETURN,), (pygame.K_l,), (pygame.K_k,), (pygame.K_j,), (pygame.K_h,)),
    ((pygame.K_SPACE,), (pygame.K_PERIOD,), (pygame.K_m,), (pygame.K_n,), (pygame.K_b,)),
)

KEYMAP: dict[int, int] = {
    key: scan_code(row, 1 << col)
    for row, columns in enumerate(_MATRIX_LAYOUT)
    for col, keys in enumerate(columns)
    for key in keys
}

# RUBOUT is SHIFT + 0 on the real keyboard.
DELETE_KEY: int = pygame.K_BACKSPACE

QUIT_KEY: int = pygame.K_ESCAPE


class InputHandler:
    """Translates pygame events into keyboard-matrix transitions.

    Parameters
    ----------
    keyboard:
        The matrix to update.  Its keymap is expected to use pygame key
        constants (see :data:`KEYMAP`).
    """

    def __init__(self, keyboard: KeyboardMatrix) -> None:
        self._keyboard = keyboard
        self._quit_requested: bool = False

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def quit_requested(self) -> bool:
        """``True`` if the user pressed Escape or closed the window."""
        return self._quit_requested

    def poll(self) -> None:
        """Drain the pygame event queue.

        Once quit has been requested the rest of the queue is discarded.
        """
        for event in pygame.event.get():
            self.handle_event(event)
            if self._quit_requested:
                break

    def handle_event(self, event: pygame.event.Event) -> None:
        """Process a single pygame event."""
        if event.type == pygame.QUIT:
            self._quit_requested = True
            return

        if event.type == pygame.KEYDOWN:
            if event.key == QUIT_KEY:
                self._quit_requested = True
                return
            if self._keyboard.key_down(event.key):
                logger.debug("Key down: %d", event.key)
        elif event.type == pygame.KEYUP:
            if self._keyboard.key_up(event.key):
                logger.debug("Key up: %d", event.key)

    def clear_all(self) -> None:
        """Release all currently-held keys."""
        self._keyboard.reset()
