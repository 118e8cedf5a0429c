"""
Execution-engine contract.

The Z80 interpreter is not part of this package.  Any engine that
implements :class:`IEngine` can be plugged in: it is constructed with a
:class:`SystemBus` and must route every memory and port access through it.

=========  ==========================================================
Callback   Behaviour
=========  ==========================================================
fetch      Opcode fetch -- floating-bus rule above 0x7FFF
read       Data read -- raw memory
write      Data write -- ROM window is write-protected
port_in    Keyboard when bit 0 of the port is clear, else 0xFF
port_out   Ignored
=========  ==========================================================
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from zx81emu.core.keyboard_matrix import KeyboardMatrix
    from zx81emu.core.memory_bus import MemoryBus


# Value seen on reads from ports no device answers.
IDLE_PORT_VALUE: int = 0xFF


class SystemBus:
    """The capability object handed to the execution engine.

    Parameters
    ----------
    memory:
        The address space.
    keyboard:
        The keyboard matrix, answering port reads with bit 0 clear.
    """

    def __init__(self, memory: MemoryBus, keyboard: KeyboardMatrix) -> None:
        self.memory = memory
        self.keyboard = keyboard

        # Bind the hot paths once; the engine calls these per instruction.
        self.fetch: Callable[[int], int] = memory.fetch
        self.read: Callable[[int], int] = memory.read
        self.write: Callable[[int, int], None] = memory.write

    def port_in(self, port: int) -> int:
        if port & 1 == 0:
            return self.keyboard.port_read(port)
        return IDLE_PORT_VALUE

    def port_out(self, port: int, value: int) -> None:
        pass

    def __repr__(self) -> str:
        return f"SystemBus(memory={self.memory!r}, keyboard={self.keyboard!r})"


class IEngine(ABC):
    """Abstract interface for the instruction-execution engine.

    Concrete engines take the :class:`SystemBus` as their only constructor
    argument.
    """

    @abstractmethod
    def reset(self) -> None:
        """Put the CPU in its power-on state (PC = 0, interrupts off)."""
        ...

    @abstractmethod
    def step(self) -> None:
        """Execute exactly one instruction."""
        ...


EngineFactory = Callable[[SystemBus], IEngine]
