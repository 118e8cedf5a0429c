# ZX81 core
"""
Hardware model of the ZX81: address space, keyboard matrix, character
rasterisation and the execution-engine contract.  Nothing here imports
pygame.
"""

from zx81emu.core.engine import IEngine, SystemBus
from zx81emu.core.keyboard_matrix import KeyboardMatrix, scan_code
from zx81emu.core.machine import ZX81Machine
from zx81emu.core.memory_bus import MemoryBus

__all__ = [
    "IEngine",
    "KeyboardMatrix",
    "MemoryBus",
    "SystemBus",
    "ZX81Machine",
    "scan_code",
]
