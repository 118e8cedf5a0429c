"""
Main application window for the ZX81 emulator.
Uses pygame to create a display and drive the emulation main loop.

Typical usage::

    from zx81emu.platform.window import Window

    machine = MachineFactory.create("zx81.rom", engine="myz80:Z80Engine")
    window = Window(machine, scale=2)
    window.run()
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import pygame

from zx81emu.platform.input_handler import InputHandler
from zx81emu.shell.screen_renderer import GlyphAtlas, ScreenRenderer

if TYPE_CHECKING:
    from zx81emu.core.machine import ZX81Machine

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WINDOW_TITLE: str = "ZX81"

# Minimum / maximum allowed display scale factors.
_MIN_SCALE: int = 1
_MAX_SCALE: int = 4


class Window:
    """Pygame window that owns the emulation main loop.

    Parameters
    ----------
    machine:
        A machine in its power-on state.
    scale:
        Integer scale factor applied to the 512 x 384 screen.
    max_fps:
        Frame-rate cap.  ``0`` runs unthrottled, so emulation speed is set
        only by :attr:`ZX81Machine.instructions_per_slice`.

    Raises
    ------
    pygame.error
        If the display or the glyph atlas cannot be created.
    """

    def __init__(
        self,
        machine: ZX81Machine,
        scale: int = 1,
        *,
        max_fps: int = 0,
    ) -> None:
        # ---- basic state -------------------------------------------------
        self._machine = machine
        self._scale: int = max(_MIN_SCALE, min(_MAX_SCALE, scale))
        self._max_fps: int = max(0, max_fps)
        self._running: bool = False

        # ---- init pygame display -----------------------------------------
        if not pygame.get_init():
            pygame.init()

        self._native_width: int = ScreenRenderer.WIDTH
        self._native_height: int = ScreenRenderer.HEIGHT
        self._display_width: int = self._native_width * self._scale
        self._display_height: int = self._native_height * self._scale

        self._screen: pygame.Surface = pygame.display.set_mode(
            (self._display_width, self._display_height)
        )
        pygame.display.set_caption(_WINDOW_TITLE)

        self._clock: pygame.time.Clock = pygame.time.Clock()

        # ---- subsystems --------------------------------------------------
        self._atlas: GlyphAtlas = GlyphAtlas(machine.memory.charset())
        self._renderer: ScreenRenderer = ScreenRenderer(machine.memory, self._atlas)
        self._input: InputHandler = InputHandler(machine.keyboard)

        # ---- performance counters ----------------------------------------
        self._frame_count: int = 0
        self._fps_update_time: float = 0.0
        self._fps_display: float = 0.0

        logger.info(
            "Window: %dx%d native, %dx%d display (scale=%d, max_fps=%d)",
            self._native_width,
            self._native_height,
            self._display_width,
            self._display_height,
            self._scale,
            self._max_fps,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    @property
    def scale(self) -> int:
        return self._scale

    @property
    def fps(self) -> float:
        """The measured frames-per-second (updated once per second)."""
        return self._fps_display

    @property
    def input(self) -> InputHandler:
        return self._input

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Enter the main emulation loop.

        This method blocks until the user closes the window or presses
        Escape.
        """
        self._running = True
        self._fps_update_time = time.monotonic()
        self._frame_count = 0

        logger.info("Entering main loop")

        try:
            while self._running:
                self._running = self.tick()
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        finally:
            self._shutdown()

    def tick(self) -> bool:
        """Execute one frame.  Returns ``False`` once quit was requested.

        1. Runs one instruction slice on the engine.
        2. Drains pending input into the keyboard matrix.
        3. Redraws the screen from the display file and presents it,
           unless quit was requested.
        """
        # ---- emulation ---------------------------------------------------
        self._machine.run_slice()

        # ---- input -------------------------------------------------------
        self._input.poll()
        if self._input.quit_requested:
            return False

        # ---- video -------------------------------------------------------
        surface = self._renderer.render()
        if self._scale != 1:
            pygame.transform.scale(surface, self._screen.get_size(), self._screen)
        else:
            self._screen.blit(surface, (0, 0))
        pygame.display.flip()

        # ---- timing ------------------------------------------------------
        self._clock.tick(self._max_fps)
        self._update_fps()
        return True

    # ------------------------------------------------------------------
    # FPS tracking
    # ------------------------------------------------------------------

    def _update_fps(self) -> None:
        """Update the displayed FPS counter roughly once per second."""
        self._frame_count += 1
        now = time.monotonic()
        elapsed = now - self._fps_update_time
        if elapsed >= 1.0:
            self._fps_display = self._frame_count / elapsed
            self._frame_count = 0
            self._fps_update_time = now
            pygame.display.set_caption(
                f"{_WINDOW_TITLE}  [{self._fps_display:.1f} fps]"
            )

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def _shutdown(self) -> None:
        logger.info("Shutting down")
        pygame.quit()
