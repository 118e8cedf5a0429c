"""Fixtures shared by the ZX81 test suite."""

import pytest

from zx81emu.core.keyboard_matrix import KeyboardMatrix, scan_code
from zx81emu.core.machine import ZX81Machine
from zx81emu.core.memory_bus import MemoryBus

from tests.fakes import CountingEngine, make_rom

# Plain string key identifiers, independent of pygame.
TEST_KEYMAP = {
    "shift": scan_code(0, 0x01),
    "z": scan_code(0, 0x02),
    "a": scan_code(1, 0x01),
    "g": scan_code(1, 0x10),
    "0": scan_code(4, 0x01),
    "newline": scan_code(6, 0x01),
    "b": scan_code(7, 0x10),
}


@pytest.fixture
def rom():
    return make_rom()


@pytest.fixture
def bus(rom):
    return MemoryBus(rom)


@pytest.fixture
def keyboard():
    return KeyboardMatrix(TEST_KEYMAP, delete_key="delete")


@pytest.fixture
def machine(bus, keyboard):
    m = ZX81Machine(bus, keyboard, CountingEngine, instructions_per_slice=10)
    m.reset()
    return m


@pytest.fixture
def rom_file(tmp_path, rom):
    path = tmp_path / "zx81.rom"
    path.write_bytes(rom)
    return path
