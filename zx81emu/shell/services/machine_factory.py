"""
Machine creation factory for the ZX81 emulator.

Creates fully-wired :class:`~zx81emu.core.machine.ZX81Machine` instances
from a ROM file path and an execution-engine reference.

Typical usage::

    machine = MachineFactory.create("zx81.rom", engine="myz80.engine:Z80")
    machine = MachineFactory.create("zx81.rom", engine=MyEngine, instructions_per_slice=50_000)
"""

from __future__ import annotations

import importlib
import logging
import os
from typing import Hashable, Mapping, Optional, Union

from zx81emu.core.engine import EngineFactory, IEngine
from zx81emu.core.keyboard_matrix import KeyboardMatrix
from zx81emu.core.machine import ZX81Machine
from zx81emu.core.memory_bus import MemoryBus
from zx81emu.shell.services.rom_bytes_service import RomBytesService

logger = logging.getLogger(__name__)


def resolve_engine(reference: str) -> type[IEngine]:
    """Import an engine class from a ``"package.module:ClassName"`` string.

    Raises:
        RuntimeError: If the reference is malformed, the module or class
            cannot be found, or the class does not implement :class:`IEngine`.
    """
    module_name, sep, class_name = reference.partition(":")
    if not sep or not module_name or not class_name:
        raise RuntimeError(
            f"Engine reference must look like 'package.module:ClassName', got {reference!r}"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise RuntimeError(f"Cannot import engine module {module_name!r}: {exc}") from exc

    engine_cls = getattr(module, class_name, None)
    if engine_cls is None:
        raise RuntimeError(f"Module {module_name!r} has no attribute {class_name!r}")
    if not (isinstance(engine_cls, type) and issubclass(engine_cls, IEngine)):
        raise RuntimeError(f"{reference} does not implement IEngine")

    logger.info("Resolved engine %s", reference)
    return engine_cls


class MachineFactory:
    """Create an emulated ZX81 from a ROM file."""

    @staticmethod
    def create(
        rom_path: str,
        engine: Union[str, EngineFactory],
        instructions_per_slice: int = ZX81Machine.DEFAULT_INSTRUCTIONS_PER_SLICE,
        keymap: Optional[Mapping[Hashable, int]] = None,
        delete_key: Optional[Hashable] = None,
    ) -> ZX81Machine:
        """Build and return a machine in its power-on state.

        Parameters
        ----------
        rom_path:
            Filesystem path to the 8 KB ZX81 ROM image.
        engine:
            Either a ``"package.module:ClassName"`` reference or a callable
            taking the :class:`~zx81emu.core.engine.SystemBus`.
        instructions_per_slice:
            Instructions executed per frame.
        keymap:
            Host key -> scan code table.  ``None`` uses the pygame layout
            from :mod:`zx81emu.platform.input_handler`, together with its
            delete key.
        delete_key:
            Host key for RUBOUT when a custom *keymap* is given.

        Raises
        ------
        FileNotFoundError
            If *rom_path* does not exist.
        ValueError
            If the ROM is the wrong size or *instructions_per_slice* < 1.
        RuntimeError
            If the engine reference cannot be resolved.
        """
        rom_path = os.path.expanduser(rom_path)
        logger.info("Loading ROM: %s", rom_path)
        rom = RomBytesService.load(rom_path)
        if not RomBytesService.looks_like_zx81(rom):
            logger.warning("%s does not look like a ZX81 ROM", rom_path)

        engine_factory: EngineFactory
        if isinstance(engine, str):
            engine_factory = resolve_engine(engine)
        else:
            engine_factory = engine

        if keymap is None:
            from zx81emu.platform.input_handler import DELETE_KEY, KEYMAP
            keymap, delete_key = KEYMAP, DELETE_KEY

        memory = MemoryBus(rom)
        keyboard = KeyboardMatrix(keymap, delete_key=delete_key)
        machine = ZX81Machine(
            memory,
            keyboard,
            engine_factory,
            instructions_per_slice=instructions_per_slice,
        )
        machine.reset()
        logger.info("Machine created: %r", machine)
        return machine

    @staticmethod
    def describe(rom_path: str) -> dict[str, str]:
        """Return a human-readable description of a ROM file."""
        return RomBytesService.describe(os.path.expanduser(rom_path))
