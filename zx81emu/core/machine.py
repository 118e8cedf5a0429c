"""
ZX81Machine -- the emulated computer minus its CPU core.

The machine owns the components every frame touches:

* **Memory** -- :class:`~zx81emu.core.memory_bus.MemoryBus`.
* **Keyboard** -- :class:`~zx81emu.core.keyboard_matrix.KeyboardMatrix`.
* **Bus** -- :class:`~zx81emu.core.engine.SystemBus` tying the two
  together for the engine.
* **Engine** -- an :class:`~zx81emu.core.engine.IEngine` built by the
  supplied factory.

Timing
------
There is no cycle counting.  Each frame the engine is stepped a fixed
number of instructions (:attr:`instructions_per_slice`).  Fewer steps make
the emulation slower; more steps make the keyboard less responsive, since
input is only applied between slices.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from zx81emu.core.engine import SystemBus

if TYPE_CHECKING:
    from zx81emu.core.engine import EngineFactory, IEngine
    from zx81emu.core.keyboard_matrix import KeyboardMatrix
    from zx81emu.core.memory_bus import MemoryBus

logger = logging.getLogger(__name__)


class ZX81Machine:
    """A ZX81 wired to an external execution engine.

    Parameters
    ----------
    memory:
        The address space holding ROM and RAM.
    keyboard:
        The keyboard matrix read through port I/O.
    engine_factory:
        Callable receiving the :class:`SystemBus` and returning the engine.
    instructions_per_slice:
        Instructions executed per call to :meth:`run_slice`.  Must be >= 1.
    """

    DEFAULT_INSTRUCTIONS_PER_SLICE: int = 100_000

    SCREEN_WIDTH: int = 512
    SCREEN_HEIGHT: int = 384

    def __init__(
        self,
        memory: MemoryBus,
        keyboard: KeyboardMatrix,
        engine_factory: EngineFactory,
        instructions_per_slice: int = DEFAULT_INSTRUCTIONS_PER_SLICE,
    ) -> None:
        if instructions_per_slice < 1:
            raise ValueError(
                f"instructions_per_slice must be >= 1, got {instructions_per_slice}"
            )

        self.memory: MemoryBus = memory
        self.keyboard: KeyboardMatrix = keyboard
        self.bus: SystemBus = SystemBus(memory, keyboard)
        self.engine: IEngine = engine_factory(self.bus)

        self.instructions_per_slice: int = instructions_per_slice
        self.frame_number: int = 0
        self.instruction_count: int = 0

        logger.info(
            "ZX81Machine: engine=%s, %d instructions per slice",
            type(self.engine).__name__,
            instructions_per_slice,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Power-cycle the machine: memory, keyboard and CPU."""
        self.memory.setup()
        self.keyboard.reset()
        self.engine.reset()
        self.frame_number = 0
        self.instruction_count = 0

    def run_slice(self) -> None:
        """Execute one slice of instructions.

        The engine runs synchronously; keyboard state cannot change until
        the slice completes.
        """
        step = self.engine.step
        for _ in range(self.instructions_per_slice):
            step()
        self.instruction_count += self.instructions_per_slice
        self.frame_number += 1

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"engine={type(self.engine).__name__}, "
            f"slice={self.instructions_per_slice}, "
            f"frame={self.frame_number})"
        )
