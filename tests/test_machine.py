"""
Machine, System Bus and Factory Tests
=====================================
"""

import pytest

from zx81emu.core.engine import IDLE_PORT_VALUE, SystemBus
from zx81emu.core.machine import ZX81Machine
from zx81emu.core.memory_bus import MemoryBus
from zx81emu.shell.services.machine_factory import MachineFactory, resolve_engine

from tests.conftest import TEST_KEYMAP
from tests.fakes import CountingEngine, KeyboardProbeEngine


# =============================================================================
# System bus
# =============================================================================

class TestSystemBus:

    @pytest.fixture
    def sysbus(self, bus, keyboard):
        return SystemBus(bus, keyboard)

    def test_memory_callbacks(self, sysbus, bus):
        sysbus.write(0x4800, 0x55)
        assert sysbus.read(0x4800) == 0x55
        sysbus.write(0x0100, 0x55)
        assert sysbus.read(0x0100) == bus.read(0x0100)
        bus.write(0x4801, 0x05)
        assert sysbus.fetch(0xC801) == 0

    def test_keyboard_port(self, sysbus, keyboard):
        keyboard.key_down("a")
        assert sysbus.port_in(0xFDFE) == 0xFE

    def test_odd_port_not_keyboard(self, sysbus, keyboard):
        keyboard.key_down("a")
        assert sysbus.port_in(0xFDFF) == IDLE_PORT_VALUE

    def test_port_out_ignored(self, sysbus, bus, keyboard):
        rows = keyboard.rows
        sysbus.port_out(0xFFFE, 0x00)
        assert keyboard.rows == rows


# =============================================================================
# Machine
# =============================================================================

class TestMachine:

    def test_engine_gets_system_bus(self, machine):
        assert isinstance(machine.engine, CountingEngine)
        assert machine.engine.bus is machine.bus
        assert machine.bus.memory is machine.memory

    def test_reset(self, machine):
        machine.memory.write(0x4000, 1)
        machine.keyboard.key_down("a")
        machine.run_slice()
        machine.reset()
        assert machine.memory.read(0x4000) == 0
        assert machine.keyboard.rows == bytes([0xFF] * 8)
        assert machine.engine.resets == 2
        assert machine.frame_number == 0
        assert machine.instruction_count == 0

    def test_run_slice_steps_exact_count(self, machine):
        machine.run_slice()
        assert machine.engine.steps == 10
        machine.run_slice()
        assert machine.engine.steps == 20
        assert machine.frame_number == 2
        assert machine.instruction_count == 20

    def test_slice_must_be_positive(self, bus, keyboard):
        with pytest.raises(ValueError):
            ZX81Machine(bus, keyboard, CountingEngine, instructions_per_slice=0)

    def test_keyboard_stable_within_slice(self, bus, keyboard):
        m = ZX81Machine(bus, keyboard, KeyboardProbeEngine, instructions_per_slice=4)
        m.run_slice()
        keyboard.key_down("z")
        m.run_slice()
        assert m.engine.seen == [0xFF] * 4 + [0xFD] * 4


# =============================================================================
# Engine resolution and factory
# =============================================================================

class TestResolveEngine:

    def test_resolves_class(self):
        assert resolve_engine("tests.fakes:CountingEngine") is CountingEngine

    @pytest.mark.parametrize("ref", ["tests.fakes", ":CountingEngine", "tests.fakes:"])
    def test_malformed(self, ref):
        with pytest.raises(RuntimeError):
            resolve_engine(ref)

    def test_missing_module(self):
        with pytest.raises(RuntimeError):
            resolve_engine("no_such_module_zx81:Engine")

    def test_missing_class(self):
        with pytest.raises(RuntimeError):
            resolve_engine("tests.fakes:Missing")

    def test_not_an_engine(self):
        with pytest.raises(RuntimeError):
            resolve_engine("tests.fakes:NotAnEngine")


class TestMachineFactory:

    def test_create_from_reference(self, rom_file):
        machine = MachineFactory.create(
            str(rom_file), "tests.fakes:CountingEngine", instructions_per_slice=3
        )
        assert isinstance(machine.engine, CountingEngine)
        assert machine.engine.resets == 1
        assert machine.instructions_per_slice == 3
        assert machine.memory.read(MemoryBus.DISPLAY_ROUTINE_PATCH) == MemoryBus.RET_OPCODE

    def test_create_with_callable_and_keymap(self, rom_file):
        machine = MachineFactory.create(
            str(rom_file), CountingEngine, keymap=TEST_KEYMAP, delete_key="delete"
        )
        machine.keyboard.key_down("delete")
        assert machine.keyboard.rows[4] == 0xFE

    def test_default_keymap_is_pygame(self, rom_file):
        import pygame

        machine = MachineFactory.create(str(rom_file), CountingEngine)
        assert machine.keyboard.lookup(pygame.K_a) is not None
        machine.keyboard.key_down(pygame.K_BACKSPACE)
        assert machine.keyboard.rows[0] == 0xFE

    def test_missing_rom(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            MachineFactory.create(str(tmp_path / "missing.rom"), CountingEngine)

    def test_wrong_size_rom(self, tmp_path):
        path = tmp_path / "short.rom"
        path.write_bytes(bytes(4096))
        with pytest.raises(ValueError):
            MachineFactory.create(str(path), CountingEngine)

    def test_bad_engine(self, rom_file):
        with pytest.raises(RuntimeError):
            MachineFactory.create(str(rom_file), "tests.fakes:NotAnEngine")
